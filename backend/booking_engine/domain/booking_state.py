# backend/booking_engine/domain/booking_state.py
"""
Booking lifecycle state.

A booking has exactly one authoritative `BookingState`. The coarse booking
status and the finer UI-facing detail status are read-only projections of
that state, so an inconsistent pair can never be written.
"""

from enum import Enum
from typing import Dict, FrozenSet, Tuple


class BookingStatus(str, Enum):
    """Coarse order status shown on the booking record."""

    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class DetailStatus(str, Enum):
    """UI-facing status shown on the booking line item."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class BookingState(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    # Customer confirmed the service happened; provider has not closed it yet
    CUSTOMER_COMPLETED = "customer_completed"

    @property
    def projection(self) -> Tuple[BookingStatus, DetailStatus]:
        return _PROJECTION[self]

    @property
    def booking_status(self) -> BookingStatus:
        return self.projection[0]

    @property
    def detail_status(self) -> DetailStatus:
        return self.projection[1]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


_PROJECTION: Dict[BookingState, Tuple[BookingStatus, DetailStatus]] = {
    BookingState.PENDING: (BookingStatus.PENDING, DetailStatus.PENDING),
    BookingState.ACCEPTED: (BookingStatus.ACCEPTED, DetailStatus.CONFIRMED),
    BookingState.REJECTED: (BookingStatus.REJECTED, DetailStatus.CANCELLED),
    BookingState.COMPLETED: (BookingStatus.COMPLETED, DetailStatus.COMPLETED),
    BookingState.CANCELLED: (BookingStatus.CANCELLED, DetailStatus.CANCELLED),
    BookingState.CUSTOMER_COMPLETED: (BookingStatus.ACCEPTED, DetailStatus.COMPLETED),
}

TERMINAL_STATES: FrozenSet[BookingState] = frozenset(
    {BookingState.REJECTED, BookingState.COMPLETED, BookingState.CANCELLED}
)
