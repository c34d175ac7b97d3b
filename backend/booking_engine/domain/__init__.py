"""Pure booking lifecycle rules with no I/O."""

from .booking_state import BookingState, BookingStatus, DetailStatus, TERMINAL_STATES
from .transitions import TRANSITION_RULES, TransitionRule, parse_action, resolve_rule

__all__ = [
    "BookingState",
    "BookingStatus",
    "DetailStatus",
    "TERMINAL_STATES",
    "TRANSITION_RULES",
    "TransitionRule",
    "parse_action",
    "resolve_rule",
]
