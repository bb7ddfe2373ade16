"""Swap repository implementation."""
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.orm import selectinload

from skillswap.domain.common.types import utcnow
from skillswap.domain.swap.models import (
    InteractionStatus,
    InteractionUpdate,
    SwapRequest,
    SwapRequestInteraction,
    SwapRequestStatus,
)
from skillswap.domain.swap.services import SwapRepository
from skillswap.infra.db.models.swap import (
    InteractionUpdateModel,
    SwapRequestInteractionModel,
    SwapRequestModel,
)

_ACTIVE_REQUEST_STATUSES = (SwapRequestStatus.OPEN.value, SwapRequestStatus.IN_PROGRESS.value)


class SwapRepositoryImpl(SwapRepository):
    """Swap repository implementation.

    Status changes are conditional UPDATEs (compare-and-set on the current
    status) and update-log entries are inserted one row at a time while the
    interaction row is locked, so concurrent writers never overwrite each other.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # Swap requests
    async def create_swap_request(self, request: SwapRequest) -> SwapRequest:
        """Create a swap request."""
        model = SwapRequestModel.from_entity(request)
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model.to_entity()

    async def get_swap_request(self, request_id: str) -> Optional[SwapRequest]:
        """Get swap request by ID."""
        result = await self.session.execute(
            select(SwapRequestModel)
            .where(SwapRequestModel.id == request_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_swap_requests(
        self,
        created_by: Optional[str] = None,
        exclude_user: Optional[str] = None,
    ) -> List[SwapRequest]:
        """Swap requests, newest first."""
        query = select(SwapRequestModel).execution_options(populate_existing=True)
        if created_by:
            query = query.where(SwapRequestModel.created_by == created_by)
        if exclude_user:
            query = query.where(SwapRequestModel.created_by != exclude_user)
        result = await self.session.execute(
            query.order_by(SwapRequestModel.created_at.desc(), SwapRequestModel.id.asc())
        )
        return [model.to_entity() for model in result.scalars().all()]

    async def update_swap_request(self, request_id: str, values: dict) -> Optional[SwapRequest]:
        """Apply field edits while the request is still Open or In Progress."""
        result = await self.session.execute(
            update(SwapRequestModel)
            .where(
                SwapRequestModel.id == request_id,
                SwapRequestModel.request_status.in_(_ACTIVE_REQUEST_STATUSES),
            )
            .values(**values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.session.rollback()
            return None
        await self.session.commit()
        return await self.get_swap_request(request_id)

    async def update_request_status(
        self,
        request_id: str,
        expected: SwapRequestStatus,
        target: SwapRequestStatus,
    ) -> Optional[SwapRequest]:
        """Move a swap request to target if it is still in expected."""
        if not await self._swap_request_cas(request_id, expected, target):
            await self.session.rollback()
            return None
        await self.session.commit()
        return await self.get_swap_request(request_id)

    async def complete_swap_request(
        self,
        request_id: str,
        expected: SwapRequestStatus,
        interaction_id: str,
        message: str,
    ) -> Optional[SwapRequest]:
        """Mark the request completed and log a system update, in one transaction."""
        if not await self._swap_request_cas(request_id, expected, SwapRequestStatus.COMPLETED):
            await self.session.rollback()
            return None
        entry = await self._append_locked(interaction_id, None, message, None, None)
        if entry is None:
            await self.session.rollback()
            return None
        await self.session.commit()
        return await self.get_swap_request(request_id)

    async def _swap_request_cas(
        self,
        request_id: str,
        expected: SwapRequestStatus,
        target: SwapRequestStatus,
    ) -> bool:
        now = utcnow()
        values = {"request_status": target.value, "updated_at": now}
        if target == SwapRequestStatus.COMPLETED:
            values["completed_at"] = now
        result = await self.session.execute(
            update(SwapRequestModel)
            .where(
                SwapRequestModel.id == request_id,
                SwapRequestModel.request_status == expected.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # Interactions
    async def create_interaction(self, interaction: SwapRequestInteraction) -> SwapRequestInteraction:
        """Create an interaction."""
        model = SwapRequestInteractionModel.from_entity(interaction)
        self.session.add(model)
        await self.session.commit()
        created = await self.get_interaction(interaction.id)
        return created

    async def get_interaction(self, interaction_id: str) -> Optional[SwapRequestInteraction]:
        """Get interaction by ID, with updates in insertion order."""
        result = await self.session.execute(
            self._interaction_query().where(SwapRequestInteractionModel.id == interaction_id)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_interactions_by_request(self, request_id: str) -> List[SwapRequestInteraction]:
        """Interactions on a swap request, oldest first."""
        result = await self.session.execute(
            self._interaction_query()
            .where(SwapRequestInteractionModel.swap_request_id == request_id)
            .order_by(SwapRequestInteractionModel.created_at.asc(), SwapRequestInteractionModel.id.asc())
        )
        return [model.to_entity() for model in result.scalars().all()]

    async def list_interactions_by_user(self, user_id: str) -> List[SwapRequestInteraction]:
        """Interactions a user initiated, newest first."""
        result = await self.session.execute(
            self._interaction_query()
            .where(SwapRequestInteractionModel.user_id == user_id)
            .order_by(SwapRequestInteractionModel.created_at.desc())
        )
        return [model.to_entity() for model in result.scalars().all()]

    async def list_interactions_by_request_owner(self, owner_id: str) -> List[SwapRequestInteraction]:
        """Interactions on requests owned by a user, newest first."""
        result = await self.session.execute(
            self._interaction_query()
            .join(SwapRequestModel, SwapRequestInteractionModel.swap_request_id == SwapRequestModel.id)
            .where(SwapRequestModel.created_by == owner_id)
            .order_by(SwapRequestInteractionModel.created_at.desc())
        )
        return [model.to_entity() for model in result.scalars().all()]

    async def transition_interaction(
        self,
        interaction_id: str,
        expected: InteractionStatus,
        target: InteractionStatus,
        parent_request_id: Optional[str] = None,
    ) -> Optional[SwapRequestInteraction]:
        """Compare-and-set the interaction status; with a parent, require it active and start it."""
        now = utcnow()
        if parent_request_id:
            # Parent row first, same lock order as complete_swap_request.
            started = await self.session.execute(
                update(SwapRequestModel)
                .where(
                    SwapRequestModel.id == parent_request_id,
                    SwapRequestModel.request_status.in_(_ACTIVE_REQUEST_STATUSES),
                )
                .values(request_status=SwapRequestStatus.IN_PROGRESS.value, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if started.rowcount != 1:
                await self.session.rollback()
                return None

        result = await self.session.execute(
            update(SwapRequestInteractionModel)
            .where(
                SwapRequestInteractionModel.id == interaction_id,
                SwapRequestInteractionModel.status == expected.value,
            )
            .values(status=target.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.session.rollback()
            return None

        await self.session.commit()
        return await self.get_interaction(interaction_id)

    async def append_update(
        self,
        interaction_id: str,
        user_id: Optional[str],
        message: str,
        title: Optional[str] = None,
        percentage: Optional[int] = None,
        client_token: Optional[str] = None,
    ) -> Optional[InteractionUpdate]:
        """Append one update entry; a repeated client_token returns the stored entry."""
        entry = await self._append_locked(
            interaction_id, user_id, message, title, percentage, client_token=client_token
        )
        if entry is None:
            await self.session.rollback()
            return None
        await self.session.commit()
        return entry

    async def _append_locked(
        self,
        interaction_id: str,
        user_id: Optional[str],
        message: str,
        title: Optional[str],
        percentage: Optional[int],
        client_token: Optional[str] = None,
    ) -> Optional[InteractionUpdate]:
        """Insert an update row inside the caller's transaction. Does not commit."""
        # Touching the interaction row takes its write lock before the log is read.
        touched = await self.session.execute(
            update(SwapRequestInteractionModel)
            .where(SwapRequestInteractionModel.id == interaction_id)
            .values(updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if touched.rowcount != 1:
            return None

        if client_token:
            existing = await self.session.execute(
                select(InteractionUpdateModel).where(
                    InteractionUpdateModel.interaction_id == interaction_id,
                    InteractionUpdateModel.client_token == client_token,
                )
            )
            found = existing.scalar_one_or_none()
            if found is not None:
                return found.to_entity()

        last = await self.session.execute(
            select(func.max(InteractionUpdateModel.created_at)).where(
                InteractionUpdateModel.interaction_id == interaction_id
            )
        )
        last_created_at = last.scalar_one_or_none()
        created_at = utcnow()
        if last_created_at is not None and last_created_at > created_at:
            created_at = last_created_at

        model = InteractionUpdateModel(
            interaction_id=interaction_id,
            user_id=user_id,
            message=message,
            title=title,
            percentage=percentage,
            client_token=client_token,
            created_at=created_at,
        )
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()

    @staticmethod
    def _interaction_query():
        return (
            select(SwapRequestInteractionModel)
            .options(selectinload(SwapRequestInteractionModel.updates))
            .execution_options(populate_existing=True)
        )
