# backend/booking_engine/repositories/booking_repository.py
"""
Booking Repository for the booking engine.

Implements the store gateway used by the creation flow, the ownership
guard, the temporal checker and the transition engine:
- Creating the booking, its line item and its provider link
- Ownership predicates for customers and providers
- Locked reads and version-checked state writes
- Single-row lookups used to build notification content

All lookups are keyed by booking id and run inside the caller's session;
nothing here commits.
"""

from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..domain.booking_state import BookingState
from ..models.booking import Booking, BookingDetail, BookingServiceLink
from ..models.service import Service
from ..models.user import Customer, ServiceProvider
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Creation

    def find_provider_for_service(self, service_id: int) -> Optional[Tuple[int, str]]:
        """
        Resolve the provider that owns a service.

        Returns:
            (provider_id, service_name), or None when the service does not
            exist or has no provider attached
        """
        try:
            row = (
                self.db.query(Service.provider_id, Service.service_name)
                .join(ServiceProvider, ServiceProvider.id == Service.provider_id)
                .filter(Service.id == service_id)
                .first()
            )
            return (row.provider_id, row.service_name) if row else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error resolving provider for service {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to resolve service provider: {str(e)}") from e

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        try:
            return self.db.query(Customer).filter(Customer.id == customer_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading customer {customer_id}: {str(e)}")
            raise RepositoryException(f"Failed to load customer: {str(e)}") from e

    def create_booking(self, **kwargs: Any) -> Booking:
        return self.create(**kwargs)

    def create_detail(self, booking_id: int, service_id: int, price: Decimal, quantity: int = 1) -> BookingDetail:
        try:
            detail = BookingDetail(
                booking_id=booking_id, service_id=service_id, price=price, quantity=quantity
            )
            self.db.add(detail)
            self.db.flush()
            return detail
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating detail for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to create booking detail: {str(e)}") from e

    def create_service_link(self, booking_id: int, provider_id: int, service_id: int) -> BookingServiceLink:
        try:
            link = BookingServiceLink(
                booking_id=booking_id, provider_id=provider_id, service_id=service_id
            )
            self.db.add(link)
            self.db.flush()
            return link
        except SQLAlchemyError as e:
            self.logger.error(f"Error linking booking {booking_id} to provider {provider_id}: {str(e)}")
            raise RepositoryException(f"Failed to create booking service link: {str(e)}") from e

    # Ownership

    def is_provider_owner(self, booking_id: int, provider_id: int) -> bool:
        try:
            return (
                self.db.query(BookingServiceLink.id)
                .filter(
                    BookingServiceLink.booking_id == booking_id,
                    BookingServiceLink.provider_id == provider_id,
                )
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking provider ownership of booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to check booking ownership: {str(e)}") from e

    def is_customer_owner(self, booking_id: int, customer_id: int) -> bool:
        try:
            return (
                self.db.query(Booking.id)
                .filter(Booking.id == booking_id, Booking.customer_id == customer_id)
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking customer ownership of booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to check booking ownership: {str(e)}") from e

    # State

    def get_for_update(self, booking_id: int) -> Optional[Booking]:
        """
        Load a booking and lock its row until the transaction ends.

        Dialects without row locks (SQLite) ignore FOR UPDATE; the version
        check in `update_state` still guarantees a single winner.
        """
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}") from e

    def update_state(
        self,
        booking_id: int,
        state: BookingState,
        expected_version: int,
        reason: Optional[str] = None,
    ) -> int:
        """
        Write a new state if the row still has the expected version.

        The reason column is only touched when a reason is given, so an
        earlier reason is never overwritten with NULL.

        Returns:
            Number of booking rows affected (0 or 1)
        """
        values: dict = {
            Booking.state: state.value,
            Booking.version: Booking.version + 1,
        }
        if reason is not None:
            values[Booking.cancellation_reason] = reason

        try:
            affected = (
                self.db.query(Booking)
                .filter(Booking.id == booking_id, Booking.version == expected_version)
                .update(values, synchronize_session="fetch")
            )
            self.logger.debug(
                f"update_state booking={booking_id} state={state.value} "
                f"expected_version={expected_version} affected={affected}"
            )
            return affected
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating state of booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking state: {str(e)}") from e

    def get_state(self, booking_id: int) -> Optional[BookingState]:
        value = self._execute_scalar(self.db.query(Booking.state).filter(Booking.id == booking_id))
        return BookingState(value) if value else None

    # Single-row lookups for notification content

    def get_customer_email(self, booking_id: int) -> Optional[str]:
        return self._execute_scalar(
            self.db.query(Customer.email)
            .join(Booking, Booking.customer_id == Customer.id)
            .filter(Booking.id == booking_id)
        )

    def get_customer_contact(self, booking_id: int) -> Optional[Tuple[int, str, Optional[str]]]:
        """Return (customer_id, full_name, phone) for the booking's customer."""
        try:
            row = (
                self.db.query(Customer.id, Customer.full_name, Customer.phone)
                .join(Booking, Booking.customer_id == Customer.id)
                .filter(Booking.id == booking_id)
                .first()
            )
            return (row.id, row.full_name, row.phone) if row else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading customer contact for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load customer contact: {str(e)}") from e

    def get_provider_id(self, booking_id: int) -> Optional[int]:
        return self._execute_scalar(
            self.db.query(BookingServiceLink.provider_id).filter(
                BookingServiceLink.booking_id == booking_id
            )
        )

    def get_provider_email(self, booking_id: int) -> Optional[str]:
        return self._execute_scalar(
            self.db.query(ServiceProvider.email)
            .join(BookingServiceLink, BookingServiceLink.provider_id == ServiceProvider.id)
            .filter(BookingServiceLink.booking_id == booking_id)
        )

    def get_service_name(self, booking_id: int) -> Optional[str]:
        return self._execute_scalar(
            self.db.query(Service.service_name)
            .join(Booking, Booking.service_id == Service.id)
            .filter(Booking.id == booking_id)
        )

    def get_event_window(self, booking_id: int) -> Optional[Tuple[datetime, datetime]]:
        try:
            row = (
                self.db.query(Booking.event_start, Booking.event_end)
                .filter(Booking.id == booking_id)
                .first()
            )
            return (row.event_start, row.event_end) if row else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading event window for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load event window: {str(e)}") from e

    def get_total_amount(self, booking_id: int) -> Optional[Decimal]:
        return self._execute_scalar(
            self.db.query(Booking.total_amount).filter(Booking.id == booking_id)
        )

    def get_booking_with_details(self, booking_id: int) -> Optional[Booking]:
        """Get a booking with customer, service, line item and provider link loaded."""
        return self.get_by_id(booking_id, load_relationships=True)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.customer),
            joinedload(Booking.service),
            joinedload(Booking.detail),
            joinedload(Booking.service_link),
        )
