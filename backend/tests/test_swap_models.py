"""Tests for the interaction and swap request state machines."""
import sys
from pathlib import Path

backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest

from skillswap.domain.common.errors import InvalidTransitionError, ValidationError
from skillswap.domain.swap.models import (
    ALLOWED_TRANSITIONS,
    InteractionStatus,
    SwapRequestStatus,
    ensure_request_transition,
    ensure_transition,
    is_terminal,
    parse_status,
)


def test_pending_can_move_to_accepted_or_rejected():
    ensure_transition(InteractionStatus.PENDING, InteractionStatus.ACCEPTED)
    ensure_transition(InteractionStatus.PENDING, InteractionStatus.REJECTED)


@pytest.mark.parametrize("current", [InteractionStatus.ACCEPTED, InteractionStatus.REJECTED])
@pytest.mark.parametrize("target", list(InteractionStatus))
def test_terminal_states_reject_every_move(current, target):
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(current, target)
    assert exc_info.value.current == current.value
    assert exc_info.value.target == target.value


def test_pending_to_pending_is_not_a_transition():
    with pytest.raises(InvalidTransitionError):
        ensure_transition(InteractionStatus.PENDING, InteractionStatus.PENDING)


def test_is_terminal_matches_table():
    assert not is_terminal(InteractionStatus.PENDING)
    assert is_terminal(InteractionStatus.ACCEPTED)
    assert is_terminal(InteractionStatus.REJECTED)
    assert set(ALLOWED_TRANSITIONS) == set(InteractionStatus)


def test_parse_status_accepts_values_and_members():
    assert parse_status("accepted") is InteractionStatus.ACCEPTED
    assert parse_status(InteractionStatus.REJECTED) is InteractionStatus.REJECTED


@pytest.mark.parametrize("raw", ["Accepted", "done", "", None, 1])
def test_parse_status_rejects_unknown_values(raw):
    with pytest.raises(ValidationError) as exc_info:
        parse_status(raw)
    assert "pending" in exc_info.value.message


def test_swap_request_lifecycle():
    ensure_request_transition(SwapRequestStatus.OPEN, SwapRequestStatus.IN_PROGRESS)
    ensure_request_transition(SwapRequestStatus.IN_PROGRESS, SwapRequestStatus.COMPLETED)
    ensure_request_transition(SwapRequestStatus.OPEN, SwapRequestStatus.CANCELLED)

    with pytest.raises(InvalidTransitionError):
        ensure_request_transition(SwapRequestStatus.COMPLETED, SwapRequestStatus.CANCELLED)
    with pytest.raises(InvalidTransitionError):
        ensure_request_transition(SwapRequestStatus.CANCELLED, SwapRequestStatus.OPEN)
    with pytest.raises(InvalidTransitionError):
        ensure_request_transition(SwapRequestStatus.IN_PROGRESS, SwapRequestStatus.OPEN)
