# backend/booking_engine/domain/transitions.py
"""
Booking transition table.

Each (role, action) pair maps to exactly one rule naming the states it may
start from and the state it produces. Terminal states are never a valid
source, so a finished booking cannot be re-entered.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from ..core.enums import ActorRole, BookingAction
from ..core.exceptions import ValidationException
from .booking_state import BookingState


@dataclass(frozen=True)
class TransitionRule:
    role: ActorRole
    action: BookingAction
    allowed_from: FrozenSet[BookingState]
    target: BookingState
    past_tense: str
    stores_reason: bool = False
    requires_service_window_elapsed: bool = False

    def permits(self, current: BookingState) -> bool:
        return not current.is_terminal and current in self.allowed_from


_OPEN = frozenset({BookingState.PENDING, BookingState.ACCEPTED})

TRANSITION_RULES: Dict[Tuple[ActorRole, BookingAction], TransitionRule] = {
    (rule.role, rule.action): rule
    for rule in (
        TransitionRule(
            role=ActorRole.PROVIDER,
            action=BookingAction.ACCEPT,
            allowed_from=frozenset({BookingState.PENDING}),
            target=BookingState.ACCEPTED,
            past_tense="accepted",
        ),
        TransitionRule(
            role=ActorRole.PROVIDER,
            action=BookingAction.REJECT,
            allowed_from=frozenset({BookingState.PENDING}),
            target=BookingState.REJECTED,
            past_tense="rejected",
            stores_reason=True,
        ),
        TransitionRule(
            role=ActorRole.PROVIDER,
            action=BookingAction.COMPLETE,
            allowed_from=frozenset({BookingState.ACCEPTED, BookingState.CUSTOMER_COMPLETED}),
            target=BookingState.COMPLETED,
            past_tense="completed",
            requires_service_window_elapsed=True,
        ),
        TransitionRule(
            role=ActorRole.PROVIDER,
            action=BookingAction.CANCEL,
            allowed_from=_OPEN | {BookingState.CUSTOMER_COMPLETED},
            target=BookingState.CANCELLED,
            past_tense="cancelled",
            stores_reason=True,
        ),
        # A customer cancellation is recorded as a rejection on the booking
        # and a cancellation on the line item.
        TransitionRule(
            role=ActorRole.CUSTOMER,
            action=BookingAction.CUSTOMER_CANCEL,
            allowed_from=_OPEN,
            target=BookingState.REJECTED,
            past_tense="cancelled",
            stores_reason=True,
        ),
        # No timing gate on the customer side: customers may confirm early.
        TransitionRule(
            role=ActorRole.CUSTOMER,
            action=BookingAction.MARK_COMPLETE,
            allowed_from=_OPEN,
            target=BookingState.CUSTOMER_COMPLETED,
            past_tense="marked complete",
        ),
    )
}

_ACTIONS_BY_NAME: Dict[str, BookingAction] = {action.value.lower(): action for action in BookingAction}
_ACTIONS_BY_NAME["customer_cancel"] = BookingAction.CUSTOMER_CANCEL
_ACTIONS_BY_NAME["mark_complete"] = BookingAction.MARK_COMPLETE


def parse_action(raw: Optional[str], role: ActorRole) -> BookingAction:
    """
    Normalize a caller-supplied action string for the caller's role.

    Matching is case-insensitive. A customer saying "cancel" means a
    customer cancellation. Actions that exist but belong to the other role
    are rejected the same way as unknown ones.

    Raises:
        ValidationException: If the action is empty, unknown, or not
            available to the role
    """
    name = (raw or "").strip().lower()
    if not name:
        raise ValidationException("Missing required field: action", code="MISSING_ACTION")

    action = _ACTIONS_BY_NAME.get(name)
    if action is BookingAction.CANCEL and role is ActorRole.CUSTOMER:
        action = BookingAction.CUSTOMER_CANCEL

    if action is None or (role, action) not in TRANSITION_RULES:
        raise ValidationException(
            f"Invalid action: {raw}",
            code="INVALID_ACTION",
            details={"action": raw, "role": role.value},
        )
    return action


def resolve_rule(role: ActorRole, action: BookingAction) -> TransitionRule:
    try:
        return TRANSITION_RULES[(role, action)]
    except KeyError:
        raise ValidationException(
            f"Invalid action: {action.value}",
            code="INVALID_ACTION",
            details={"action": action.value, "role": role.value},
        ) from None
