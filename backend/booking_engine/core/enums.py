# backend/booking_engine/core/enums.py
"""
Enumerations shared across the booking engine.

Roles and actions arrive as free text from callers; these enums are the
normalized forms used everywhere past the API boundary.
"""

from enum import Enum


class ActorRole(str, Enum):
    """Who is calling. Identity is verified upstream by the gateway."""

    CUSTOMER = "customer"
    PROVIDER = "provider"

    @property
    def counterparty(self) -> "ActorRole":
        return ActorRole.PROVIDER if self is ActorRole.CUSTOMER else ActorRole.CUSTOMER


class BookingAction(str, Enum):
    """Lifecycle actions a caller may request on an existing booking."""

    ACCEPT = "accept"
    REJECT = "reject"
    COMPLETE = "complete"
    CANCEL = "cancel"
    CUSTOMER_CANCEL = "customerCancel"
    MARK_COMPLETE = "markComplete"


class NotificationChannel(str, Enum):
    PUSH = "push"
    EMAIL = "email"
    RECORD = "record"
