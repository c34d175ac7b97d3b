# backend/booking_engine/services/booking_service.py
"""
Booking creation and read access for booking owners.

Creation writes the booking, its line item, its provider link and the
provider's notification record in one transaction, then hands off to the
notification dispatcher once the commit has succeeded.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.enums import ActorRole
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..domain.booking_state import BookingState
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import ActorPrincipal
from ..repositories.booking_repository import BookingRepository
from ..repositories.notification_repository import NotificationRepository
from ..schemas.booking import BookingCreate, BookingCreateResponse, BookingView
from .base import BaseService
from .notification_dispatcher import NotificationDispatcher, booking_request_message
from .ownership_checker import OwnershipChecker
from .temporal_rules import Clock, utc_now
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    def __init__(
        self,
        db: Session,
        settings: Settings,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Clock] = None,
        booking_repository: Optional[BookingRepository] = None,
        notification_repository: Optional[NotificationRepository] = None,
    ):
        super().__init__(db)
        self.settings = settings
        self.dispatcher = dispatcher
        self.clock = clock or utc_now
        self.repository = booking_repository or BookingRepository(db)
        self.notification_repository = notification_repository or NotificationRepository(db)
        self.ownership = OwnershipChecker(self.repository)

    @BaseService.measure_operation("create_booking")
    def create_booking(self, principal: ActorPrincipal, data: BookingCreate) -> BookingCreateResponse:
        """
        Create a booking request in state Pending.

        Raises:
            ForbiddenException: If the caller is not a customer
            ValidationException: If the event start is not in the future or
                the local time does not exist
            NotFoundException: If the service has no resolvable provider
        """
        if not principal.is_customer:
            raise ForbiddenException("Only customers can create bookings", code="CUSTOMER_ONLY")

        tz = self.settings.platform_timezone
        try:
            event_start = TimezoneService.local_to_utc(data.start_date, data.event_time, tz)
            event_end = TimezoneService.local_to_utc(data.effective_end_date, data.event_time, tz)
        except ValueError as e:
            raise ValidationException(str(e), code="INVALID_EVENT_TIME") from e

        now = TimezoneService.ensure_utc(self.clock())
        if event_start <= now:
            raise ValidationException(
                "Event start date/time cannot be in the past",
                code="EVENT_IN_PAST",
                details={"event_start": event_start.isoformat()},
            )

        with self.transaction():
            resolved = self.repository.find_provider_for_service(data.service_id)
            if resolved is None:
                raise NotFoundException(
                    f"Service not found or provider missing for service_id: {data.service_id}",
                    code="SERVICE_PROVIDER_NOT_FOUND",
                )
            provider_id, service_name = resolved

            customer = self.repository.get_customer(principal.subject_id)
            if customer is None:
                raise NotFoundException("Customer account not found", code="CUSTOMER_NOT_FOUND")

            booking = self.repository.create_booking(
                customer_id=customer.id,
                service_id=data.service_id,
                event_address=data.event_address,
                event_start=event_start,
                event_end=event_end,
                event_time=data.event_time_text,
                state=BookingState.PENDING,
                total_amount=data.price,
                notes=data.notes,
            )
            self.repository.create_detail(booking.id, data.service_id, data.price, quantity=1)
            self.repository.create_service_link(booking.id, provider_id, data.service_id)
            self.notification_repository.create_notification(
                receiver_id=provider_id,
                receiver_role=ActorRole.PROVIDER,
                message=booking_request_message(booking.id, service_name, customer.full_name, customer.email),
                booking_id=booking.id,
            )
            booking_id = booking.id

        prometheus_metrics.record_booking_created()
        self.logger.info(
            f"Booking {booking_id} created by customer {principal.subject_id} "
            f"for service {data.service_id} (provider {provider_id})"
        )

        if self.dispatcher is not None:
            self.dispatcher.booking_created(self.repository, booking_id)

        return BookingCreateResponse(
            booking_id=booking_id,
            status=BookingState.PENDING.detail_status.value,
            message="Booking request sent to provider",
        )

    @BaseService.measure_operation("get_booking_view")
    def get_booking_view(self, principal: ActorPrincipal, booking_id: int) -> BookingView:
        self.ownership.ensure_owner(principal, booking_id)

        booking = self.repository.get_booking_with_details(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

        return BookingView(
            booking_id=booking.id,
            customer_id=booking.customer_id,
            provider_id=booking.provider_id,
            service_id=booking.service_id,
            service_name=booking.service.service_name if booking.service else None,
            booking_status=booking.booking_status.value,
            detail_status=booking.detail_status.value,
            event_address=booking.event_address,
            event_start=TimezoneService.ensure_utc(booking.event_start),
            event_end=TimezoneService.ensure_utc(booking.event_end),
            event_time=booking.event_time,
            total_amount=booking.total_amount,
            quantity=booking.detail.quantity if booking.detail else 1,
            notes=booking.notes,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
        )
