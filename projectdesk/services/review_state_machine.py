"""Submission review state machine with valid transitions."""

from projectdesk.exceptions import InvalidTransitionError

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

VALID_TRANSITIONS: dict[str, list[str]] = {
    PENDING: [APPROVED, REJECTED],
    APPROVED: [],
    REJECTED: [],
}


def can_transition(current: str, target: str) -> bool:
    """Check if a transition from current to target is valid."""
    return target in VALID_TRANSITIONS.get(current, [])


def is_terminal(status: str) -> bool:
    return not VALID_TRANSITIONS.get(status, [])


def validate_transition(current: str, target: str) -> None:
    """Validate a transition, raising InvalidTransitionError if invalid."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            current, target, VALID_TRANSITIONS.get(current, [])
        )
