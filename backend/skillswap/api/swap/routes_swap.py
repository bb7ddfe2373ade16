"""Swap request and interaction API routes."""
import logging
from datetime import datetime
from typing import Optional, List

from fastapi import APIRouter, Depends, Header, Query, status
from pydantic import BaseModel, Field

from skillswap.api.deps import get_current_user, get_swap_service
from skillswap.domain.swap.models import InteractionUpdate, SwapRequest, SwapRequestInteraction
from skillswap.domain.swap.services import SwapService
from skillswap.domain.users.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response Models
class SwapRequestCreateRequest(BaseModel):
    """Swap request creation payload."""
    service_title: str
    service_required: str
    service_description: Optional[str] = None
    categories: List[str] = []


class SwapRequestResponse(BaseModel):
    """Swap request response."""
    id: str
    created_by: str
    service_title: str
    service_required: str
    service_description: Optional[str]
    categories: List[str]
    request_status: str
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]


class SwapRequestEditRequest(BaseModel):
    """Swap request edit payload; omitted fields keep their value."""
    service_title: Optional[str] = None
    service_required: Optional[str] = None
    service_description: Optional[str] = None
    categories: Optional[List[str]] = None


class InteractionCreateRequest(BaseModel):
    """Response to a swap request."""
    message: str = ""


class UpdateCreateRequest(BaseModel):
    """Progress note on an interaction."""
    message: str
    title: Optional[str] = None
    percentage: Optional[int] = Field(default=None, ge=0, le=100)
    client_token: Optional[str] = None


class StatusChangeRequest(BaseModel):
    """Status change payload ("accepted" or "rejected")."""
    status: str


class InteractionUpdateResponse(BaseModel):
    """Interaction update response."""
    id: int
    user_id: Optional[str]
    message: str
    title: Optional[str]
    percentage: Optional[int]
    created_at: datetime


class InteractionResponse(BaseModel):
    """Interaction response."""
    id: str
    swap_request_id: str
    user_id: str
    message: str
    status: str
    created_at: datetime
    updated_at: datetime
    updates: List[InteractionUpdateResponse]


def _request_response(request: SwapRequest) -> SwapRequestResponse:
    return SwapRequestResponse(
        id=request.id,
        created_by=request.created_by,
        service_title=request.service_title,
        service_required=request.service_required,
        service_description=request.service_description,
        categories=request.categories,
        request_status=request.request_status.value,
        created_at=request.created_at,
        updated_at=request.updated_at,
        completed_at=request.completed_at,
    )


def _update_response(update: InteractionUpdate) -> InteractionUpdateResponse:
    return InteractionUpdateResponse(
        id=update.id,
        user_id=update.user_id,
        message=update.message,
        title=update.title,
        percentage=update.percentage,
        created_at=update.created_at,
    )


def _interaction_response(interaction: SwapRequestInteraction) -> InteractionResponse:
    return InteractionResponse(
        id=interaction.id,
        swap_request_id=interaction.swap_request_id,
        user_id=interaction.user_id,
        message=interaction.message,
        status=interaction.status.value,
        created_at=interaction.created_at,
        updated_at=interaction.updated_at,
        updates=[_update_response(u) for u in interaction.updates],
    )


# Swap requests
@router.post("/swap-requests", response_model=SwapRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    request: SwapRequestCreateRequest,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Publish a swap request owned by the caller."""
    swap_request = await service.create_swap_request(
        created_by=current_user.id,
        service_title=request.service_title,
        service_required=request.service_required,
        service_description=request.service_description,
        categories=request.categories,
    )
    logger.info("[SWAP] request created id=%s by=%s", swap_request.id, current_user.id)
    return _request_response(swap_request)


@router.get("/swap-requests", response_model=List[SwapRequestResponse])
async def list_swap_requests(
    created_by: Optional[str] = Query(default=None),
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Marketplace: other users' requests, or one creator's with ?created_by=."""
    requests = await service.list_swap_requests(viewer_id=current_user.id, created_by=created_by)
    return [_request_response(r) for r in requests]


@router.get("/swap-requests/{request_id}", response_model=SwapRequestResponse)
async def get_swap_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Get a swap request."""
    return _request_response(await service.get_swap_request(request_id))


@router.put("/swap-requests/{request_id}", response_model=SwapRequestResponse)
async def edit_swap_request(
    request_id: str,
    request: SwapRequestEditRequest,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Edit a swap request (owner only, while Open or In Progress)."""
    swap_request = await service.update_swap_request(
        request_id,
        current_user.id,
        service_title=request.service_title,
        service_required=request.service_required,
        service_description=request.service_description,
        categories=request.categories,
    )
    logger.info("[SWAP] request edited id=%s by=%s", request_id, current_user.id)
    return _request_response(swap_request)


@router.put("/swap-requests/{request_id}/cancel", response_model=SwapRequestResponse)
async def cancel_swap_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Cancel a swap request (owner only)."""
    swap_request = await service.cancel_swap_request(request_id, current_user.id)
    logger.info("[SWAP] request cancelled id=%s by=%s", request_id, current_user.id)
    return _request_response(swap_request)


# Interactions
@router.post(
    "/swap-requests/{request_id}/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_interaction(
    request_id: str,
    request: InteractionCreateRequest,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Respond to a swap request as the caller."""
    interaction = await service.create_interaction(request_id, current_user.id, request.message)
    logger.info(
        "[SWAP] interaction created id=%s request=%s user=%s",
        interaction.id, request_id, current_user.id,
    )
    return _interaction_response(interaction)


@router.get("/swap-requests/{request_id}/interactions", response_model=List[InteractionResponse])
async def list_interactions(
    request_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """List interactions on a swap request, oldest first."""
    interactions = await service.list_by_swap_request(request_id)
    return [_interaction_response(i) for i in interactions]


@router.get("/sent-swap-requests", response_model=List[InteractionResponse])
async def list_sent(
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Interactions the caller opened."""
    return [_interaction_response(i) for i in await service.list_sent(current_user.id)]


@router.get("/received-swap-requests", response_model=List[InteractionResponse])
async def list_received(
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Interactions other users opened on the caller's requests."""
    return [_interaction_response(i) for i in await service.list_received(current_user.id)]


@router.get("/swap-request-interactions/{interaction_id}", response_model=InteractionResponse)
async def get_interaction(
    interaction_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Get an interaction with its update log."""
    return _interaction_response(await service.get_interaction(interaction_id))


@router.post(
    "/swap-request-interactions/{interaction_id}/updates",
    response_model=InteractionUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def append_update(
    interaction_id: str,
    request: UpdateCreateRequest,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    """Append a progress update; a repeated client token returns the stored entry."""
    update = await service.append_update(
        interaction_id,
        current_user.id,
        request.message,
        percentage=request.percentage,
        title=request.title,
        client_token=request.client_token or idempotency_key,
    )
    logger.info("[SWAP] update appended interaction=%s update=%s", interaction_id, update.id)
    return _update_response(update)


@router.put("/swap-request-interactions/{interaction_id}/status", response_model=InteractionResponse)
async def set_status(
    interaction_id: str,
    request: StatusChangeRequest,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Accept or reject an interaction (swap request owner only)."""
    interaction = await service.set_status(interaction_id, request.status, current_user.id)
    logger.info(
        "[SWAP] interaction %s -> %s by=%s", interaction_id, interaction.status.value, current_user.id
    )
    return _interaction_response(interaction)


@router.put("/swap-request-interactions/{interaction_id}/approve", response_model=InteractionResponse)
async def approve_interaction(
    interaction_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Accept an interaction."""
    interaction = await service.mark_accepted(interaction_id, current_user.id)
    logger.info("[SWAP] interaction %s accepted by=%s", interaction_id, current_user.id)
    return _interaction_response(interaction)


@router.put("/swap-request-interactions/{interaction_id}/reject", response_model=InteractionResponse)
async def reject_interaction(
    interaction_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Reject an interaction."""
    interaction = await service.mark_rejected(interaction_id, current_user.id)
    logger.info("[SWAP] interaction %s rejected by=%s", interaction_id, current_user.id)
    return _interaction_response(interaction)


@router.put("/swap-request-interactions/{interaction_id}/complete", response_model=SwapRequestResponse)
async def complete_swap(
    interaction_id: str,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Mark the parent swap request completed."""
    swap_request = await service.complete(interaction_id, current_user.id)
    logger.info(
        "[SWAP] request %s completed via interaction %s by=%s",
        swap_request.id, interaction_id, current_user.id,
    )
    return _request_response(swap_request)
