"""Swap domain services.

Lifecycle rules for swap requests and the interactions users open against
them. Every method either returns the new state or raises a DomainError;
persistence atomicity (compare-and-set on status, locked appends) is the
repository's job.
"""
from typing import Protocol, Optional, List

from skillswap.domain.common.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from skillswap.domain.common.types import generate_id, utcnow
from skillswap.domain.swap.models import (
    InteractionStatus,
    InteractionUpdate,
    SwapRequest,
    SwapRequestInteraction,
    SwapRequestStatus,
    ensure_request_transition,
    ensure_transition,
    parse_status,
)
from skillswap.domain.users.services import UserRepository

COMPLETED_MESSAGE = "Swap request marked as completed"


class SwapRepository(Protocol):
    """Swap repository protocol."""

    async def create_swap_request(self, request: SwapRequest) -> SwapRequest:
        """Create a swap request."""
        ...

    async def get_swap_request(self, request_id: str) -> Optional[SwapRequest]:
        """Get swap request by ID."""
        ...

    async def list_swap_requests(
        self,
        created_by: Optional[str] = None,
        exclude_user: Optional[str] = None,
    ) -> List[SwapRequest]:
        """Swap requests, newest first, optionally filtered by creator or excluding one user's."""
        ...

    async def update_swap_request(
        self,
        request_id: str,
        values: dict,
    ) -> Optional[SwapRequest]:
        """Apply field edits while the request is still Open or In Progress. None when it is not."""
        ...

    async def update_request_status(
        self,
        request_id: str,
        expected: SwapRequestStatus,
        target: SwapRequestStatus,
    ) -> Optional[SwapRequest]:
        """Move a swap request to target if it is still in expected. None when it was not."""
        ...

    async def complete_swap_request(
        self,
        request_id: str,
        expected: SwapRequestStatus,
        interaction_id: str,
        message: str,
    ) -> Optional[SwapRequest]:
        """Mark a swap request completed and log a system update on the interaction, in one transaction."""
        ...

    async def create_interaction(self, interaction: SwapRequestInteraction) -> SwapRequestInteraction:
        """Create an interaction."""
        ...

    async def get_interaction(self, interaction_id: str) -> Optional[SwapRequestInteraction]:
        """Get interaction by ID, with its updates in insertion order."""
        ...

    async def list_interactions_by_request(self, request_id: str) -> List[SwapRequestInteraction]:
        """Interactions on a swap request, oldest first."""
        ...

    async def list_interactions_by_user(self, user_id: str) -> List[SwapRequestInteraction]:
        """Interactions a user initiated, newest first."""
        ...

    async def list_interactions_by_request_owner(self, owner_id: str) -> List[SwapRequestInteraction]:
        """Interactions on requests owned by a user, newest first."""
        ...

    async def transition_interaction(
        self,
        interaction_id: str,
        expected: InteractionStatus,
        target: InteractionStatus,
        parent_request_id: Optional[str] = None,
    ) -> Optional[SwapRequestInteraction]:
        """Compare-and-set the interaction status.

        When parent_request_id is given the parent must still be Open or In Progress;
        it is left In Progress in the same transaction. None when the interaction was
        no longer in expected or the parent had closed.
        """
        ...

    async def append_update(
        self,
        interaction_id: str,
        user_id: Optional[str],
        message: str,
        title: Optional[str] = None,
        percentage: Optional[int] = None,
        client_token: Optional[str] = None,
    ) -> Optional[InteractionUpdate]:
        """Append one update under a row lock. Returns the existing entry for a repeated client_token."""
        ...


class SwapService:
    """Swap service for business logic."""

    def __init__(self, repo: SwapRepository, user_repo: UserRepository, max_message_length: int = 5000):
        self.repo = repo
        self.user_repo = user_repo
        self.max_message_length = max_message_length

    # Swap requests
    async def create_swap_request(
        self,
        created_by: str,
        service_title: str,
        service_required: str,
        service_description: Optional[str] = None,
        categories: Optional[List[str]] = None,
    ) -> SwapRequest:
        """Publish a new swap request."""
        if not created_by:
            raise ValidationError("created_by is required")
        if not service_title or not service_title.strip():
            raise ValidationError("service_title is required")
        if not service_required or not service_required.strip():
            raise ValidationError("service_required is required")
        if not await self.user_repo.get_by_id(created_by):
            raise ValidationError(f"User {created_by} does not exist")

        now = utcnow()
        request = SwapRequest(
            id=generate_id(),
            created_by=created_by,
            service_title=service_title.strip(),
            service_required=service_required.strip(),
            service_description=service_description,
            categories=list(categories or []),
            request_status=SwapRequestStatus.OPEN,
            created_at=now,
            updated_at=now,
        )
        return await self.repo.create_swap_request(request)

    async def get_swap_request(self, request_id: str) -> SwapRequest:
        """Get swap request by ID."""
        request = await self.repo.get_swap_request(request_id)
        if not request:
            raise NotFoundError("SwapRequest", request_id)
        return request

    async def list_swap_requests(
        self,
        viewer_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> List[SwapRequest]:
        """Marketplace listing.

        With created_by, only that user's requests; otherwise everyone's except
        the viewer's own.
        """
        if created_by:
            return await self.repo.list_swap_requests(created_by=created_by)
        return await self.repo.list_swap_requests(exclude_user=viewer_id)

    async def update_swap_request(
        self,
        request_id: str,
        actor_id: str,
        service_title: Optional[str] = None,
        service_required: Optional[str] = None,
        service_description: Optional[str] = None,
        categories: Optional[List[str]] = None,
    ) -> SwapRequest:
        """Edit a swap request (owner only, while it is Open or In Progress).

        Fields left as None keep their current value.
        """
        request = await self.get_swap_request(request_id)
        if request.created_by != actor_id:
            raise AuthorizationError("Only the owner can edit this swap request")
        if not request.accepts_responses:
            raise ValidationError(f"Swap request is {request.request_status.value}")

        values = {}
        for name, value in (("service_title", service_title), ("service_required", service_required)):
            if value is None:
                continue
            if not value.strip():
                raise ValidationError(f"{name} is required")
            values[name] = value.strip()
        if service_description is not None:
            values["service_description"] = service_description
        if categories is not None:
            values["categories"] = list(categories)
        if not values:
            return request

        updated = await self.repo.update_swap_request(request_id, values)
        if updated is None:
            raise ConflictError(f"Swap request {request_id} changed concurrently; reload and retry")
        return updated

    async def cancel_swap_request(self, request_id: str, actor_id: str) -> SwapRequest:
        """Cancel a swap request (owner only)."""
        request = await self.get_swap_request(request_id)
        if request.created_by != actor_id:
            raise AuthorizationError("Only the owner can cancel this swap request")
        ensure_request_transition(request.request_status, SwapRequestStatus.CANCELLED)

        updated = await self.repo.update_request_status(
            request_id, request.request_status, SwapRequestStatus.CANCELLED
        )
        if updated is None:
            raise ConflictError(f"Swap request {request_id} changed concurrently; reload and retry")
        return updated

    # Interactions
    async def create_interaction(
        self,
        swap_request_id: str,
        user_id: str,
        message: str = "",
    ) -> SwapRequestInteraction:
        """Respond to a swap request. The interaction starts pending with no updates."""
        if not swap_request_id:
            raise ValidationError("swap_request_id is required")
        if not user_id:
            raise ValidationError("user_id is required")

        request = await self.repo.get_swap_request(swap_request_id)
        if not request:
            raise ValidationError(f"Swap request {swap_request_id} does not exist")
        if not await self.user_repo.get_by_id(user_id):
            raise ValidationError(f"User {user_id} does not exist")
        if request.created_by == user_id:
            raise ValidationError("Cannot respond to your own swap request")
        if not request.accepts_responses:
            raise ValidationError(f"Swap request is {request.request_status.value}")

        message = message or ""
        self._check_length(message)

        now = utcnow()
        interaction = SwapRequestInteraction(
            id=generate_id(),
            swap_request_id=swap_request_id,
            user_id=user_id,
            message=message,
            status=InteractionStatus.PENDING,
            created_at=now,
            updated_at=now,
            updates=[],
        )
        return await self.repo.create_interaction(interaction)

    async def get_interaction(self, interaction_id: str) -> SwapRequestInteraction:
        """Get interaction by ID."""
        interaction = await self.repo.get_interaction(interaction_id)
        if not interaction:
            raise NotFoundError("SwapRequestInteraction", interaction_id)
        return interaction

    async def list_by_swap_request(self, swap_request_id: str) -> List[SwapRequestInteraction]:
        """List interactions on a swap request in creation order."""
        await self.get_swap_request(swap_request_id)
        return await self.repo.list_interactions_by_request(swap_request_id)

    async def list_sent(self, user_id: str) -> List[SwapRequestInteraction]:
        """Interactions the user opened on other people's requests."""
        return await self.repo.list_interactions_by_user(user_id)

    async def list_received(self, user_id: str) -> List[SwapRequestInteraction]:
        """Interactions other users opened on this user's requests."""
        return await self.repo.list_interactions_by_request_owner(user_id)

    async def append_update(
        self,
        interaction_id: str,
        author_id: Optional[str],
        message: str,
        percentage: Optional[int] = None,
        title: Optional[str] = None,
        client_token: Optional[str] = None,
    ) -> InteractionUpdate:
        """Append a progress note. Never touches the interaction status."""
        interaction = await self.get_interaction(interaction_id)
        client_token = (client_token or "").strip() or None

        if not message or not message.strip():
            raise ValidationError("Update message is required")
        self._check_length(message)
        if percentage is not None:
            if isinstance(percentage, bool) or not isinstance(percentage, int):
                raise ValidationError("percentage must be an integer")
            if not 0 <= percentage <= 100:
                raise ValidationError("percentage must be between 0 and 100")

        if author_id is not None:
            if not await self.user_repo.get_by_id(author_id):
                raise ValidationError(f"User {author_id} does not exist")
            request = await self.get_swap_request(interaction.swap_request_id)
            if author_id not in (interaction.user_id, request.created_by):
                raise AuthorizationError("Only swap participants can post updates")

        entry = await self.repo.append_update(
            interaction_id,
            author_id,
            message,
            title=title,
            percentage=percentage,
            client_token=client_token,
        )
        if entry is None:
            raise NotFoundError("SwapRequestInteraction", interaction_id)
        return entry

    async def set_status(self, interaction_id: str, new_status, actor_id: str) -> SwapRequestInteraction:
        """Apply a status transition; only the swap request owner may decide."""
        target = parse_status(new_status)
        interaction = await self.get_interaction(interaction_id)
        ensure_transition(interaction.status, target)

        request = await self.get_swap_request(interaction.swap_request_id)
        if actor_id != request.created_by:
            raise AuthorizationError("Only the swap request owner can accept or reject")

        parent_request_id = None
        if target == InteractionStatus.ACCEPTED:
            if not request.accepts_responses:
                raise ValidationError(f"Swap request is {request.request_status.value}")
            parent_request_id = request.id

        updated = await self.repo.transition_interaction(
            interaction_id,
            interaction.status,
            target,
            parent_request_id=parent_request_id,
        )
        if updated is None:
            raise ConflictError(f"Interaction {interaction_id} changed concurrently; reload and retry")
        return updated

    async def mark_accepted(self, interaction_id: str, actor_id: str) -> SwapRequestInteraction:
        """pending -> accepted."""
        return await self.set_status(interaction_id, InteractionStatus.ACCEPTED, actor_id)

    async def mark_rejected(self, interaction_id: str, actor_id: str) -> SwapRequestInteraction:
        """pending -> rejected."""
        return await self.set_status(interaction_id, InteractionStatus.REJECTED, actor_id)

    async def complete(self, interaction_id: str, actor_id: str) -> SwapRequest:
        """Mark the parent swap request completed.

        The interaction status is left as it is; a system update records the event.
        """
        interaction = await self.get_interaction(interaction_id)
        request = await self.get_swap_request(interaction.swap_request_id)
        if actor_id not in (interaction.user_id, request.created_by):
            raise AuthorizationError("Only swap participants can complete this swap")
        if interaction.status != InteractionStatus.ACCEPTED:
            raise ValidationError("Only an accepted interaction can complete its swap request")
        ensure_request_transition(request.request_status, SwapRequestStatus.COMPLETED)

        updated = await self.repo.complete_swap_request(
            request.id,
            request.request_status,
            interaction_id,
            COMPLETED_MESSAGE,
        )
        if updated is None:
            raise ConflictError(f"Swap request {request.id} changed concurrently; reload and retry")
        return updated

    def _check_length(self, message: str) -> None:
        if len(message) > self.max_message_length:
            raise ValidationError(f"Message longer than {self.max_message_length} characters")
