"""Swap domain models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from enum import Enum

from skillswap.domain.common.errors import InvalidTransitionError, ValidationError


class InteractionStatus(str, Enum):
    """Interaction status enum."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SwapRequestStatus(str, Enum):
    """Swap request status enum."""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Allowed moves; a state with no targets is terminal.
ALLOWED_TRANSITIONS: dict[InteractionStatus, frozenset[InteractionStatus]] = {
    InteractionStatus.PENDING: frozenset({InteractionStatus.ACCEPTED, InteractionStatus.REJECTED}),
    InteractionStatus.ACCEPTED: frozenset(),
    InteractionStatus.REJECTED: frozenset(),
}

REQUEST_TRANSITIONS: dict[SwapRequestStatus, frozenset[SwapRequestStatus]] = {
    SwapRequestStatus.OPEN: frozenset({
        SwapRequestStatus.IN_PROGRESS,
        SwapRequestStatus.COMPLETED,
        SwapRequestStatus.CANCELLED,
    }),
    SwapRequestStatus.IN_PROGRESS: frozenset({SwapRequestStatus.COMPLETED, SwapRequestStatus.CANCELLED}),
    SwapRequestStatus.COMPLETED: frozenset(),
    SwapRequestStatus.CANCELLED: frozenset(),
}


def parse_status(value) -> InteractionStatus:
    """Coerce a raw value into an InteractionStatus or raise ValidationError."""
    if isinstance(value, InteractionStatus):
        return value
    try:
        return InteractionStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in InteractionStatus)
        raise ValidationError(f"Invalid status {value!r}; expected one of: {allowed}") from None


def is_terminal(status: InteractionStatus) -> bool:
    """True when no further transition is possible."""
    return not ALLOWED_TRANSITIONS[status]


def ensure_transition(current: InteractionStatus, target: InteractionStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is in the table."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError("interaction", current.value, target.value)


def ensure_request_transition(current: SwapRequestStatus, target: SwapRequestStatus) -> None:
    """Raise InvalidTransitionError unless the swap request may move to target."""
    if target not in REQUEST_TRANSITIONS[current]:
        raise InvalidTransitionError("swap request", current.value, target.value)


@dataclass
class SwapRequest:
    """Swap request domain model (the parent of interactions)."""
    id: str
    created_by: str
    service_title: str
    service_required: str
    service_description: Optional[str]
    categories: list[str]
    request_status: SwapRequestStatus
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def accepts_responses(self) -> bool:
        return self.request_status in (SwapRequestStatus.OPEN, SwapRequestStatus.IN_PROGRESS)


@dataclass(frozen=True)
class InteractionUpdate:
    """One entry of an interaction's progress log. Never modified once written."""
    id: int
    interaction_id: str
    user_id: Optional[str]  # None for system-generated entries
    message: str
    title: Optional[str]
    percentage: Optional[int]
    client_token: Optional[str]
    created_at: datetime


@dataclass
class SwapRequestInteraction:
    """A user's response/negotiation thread on a swap request."""
    id: str
    swap_request_id: str
    user_id: str
    message: str
    status: InteractionStatus
    created_at: datetime
    updated_at: datetime
    updates: list[InteractionUpdate] = field(default_factory=list)
