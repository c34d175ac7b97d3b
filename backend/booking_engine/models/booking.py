# backend/booking_engine/models/booking.py
"""
Booking models.

A booking is stored as three rows created together:
- `Booking`: the order itself, holding the single authoritative state
- `BookingDetail`: the line item (quantity, price) shown in the UI
- `BookingServiceLink`: which provider and service the booking belongs to

The coarse booking status and the line-item status are both projections of
`Booking.state`; there is no second status column that could drift.
"""

import logging
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base
from ..domain.booking_state import BookingState, BookingStatus, DetailStatus

logger = logging.getLogger(__name__)

_STATE_VALUES = ", ".join(f"'{state.value}'" for state in BookingState)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    event_address = Column(Text, nullable=False)
    event_start = Column(DateTime(timezone=True), nullable=False)
    event_end = Column(DateTime(timezone=True), nullable=False)
    # Time of day as entered by the customer (HH:MM, platform timezone)
    event_time = Column(String(5), nullable=False)

    state = Column(String(32), nullable=False, default=BookingState.PENDING.value, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    # Optimistic concurrency token, bumped on every state change
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", backref="bookings")
    service = relationship("Service")
    detail = relationship(
        "BookingDetail", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )
    service_link = relationship(
        "BookingServiceLink", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(f"state IN ({_STATE_VALUES})", name="ck_bookings_state"),
        CheckConstraint("total_amount >= 0", name="ck_bookings_amount_non_negative"),
        CheckConstraint("event_end >= event_start", name="ck_bookings_event_window"),
    )

    def __init__(self, **kwargs: Any) -> None:
        state = kwargs.get("state")
        if isinstance(state, BookingState):
            kwargs["state"] = state.value
        super().__init__(**kwargs)
        if not self.state:
            self.state = BookingState.PENDING.value
        if self.version is None:
            self.version = 1

    @property
    def lifecycle_state(self) -> BookingState:
        return BookingState(self.state)

    @property
    def booking_status(self) -> BookingStatus:
        return self.lifecycle_state.booking_status

    @property
    def detail_status(self) -> DetailStatus:
        return self.lifecycle_state.detail_status

    @property
    def provider_id(self) -> Optional[int]:
        return self.service_link.provider_id if self.service_link else None

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: customer={self.customer_id}, service={self.service_id}, "
            f"state={self.state}, v{self.version}>"
        )


class BookingDetail(Base):
    __tablename__ = "booking_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)

    booking = relationship("Booking", back_populates="detail")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_booking_details_quantity_positive"),
        CheckConstraint("price >= 0", name="ck_booking_details_price_non_negative"),
    )

    @property
    def status(self) -> DetailStatus:
        return self.booking.detail_status


class BookingServiceLink(Base):
    """Ownership junction: the provider referenced here is the only one who may act."""

    __tablename__ = "booking_services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    provider_id = Column(Integer, ForeignKey("service_providers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    booking = relationship("Booking", back_populates="service_link")
    provider = relationship("ServiceProvider")

    def __repr__(self) -> str:
        return f"<BookingServiceLink booking={self.booking_id} provider={self.provider_id}>"
