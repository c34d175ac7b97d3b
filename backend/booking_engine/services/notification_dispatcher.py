# backend/booking_engine/services/notification_dispatcher.py
"""
Fan-out of booking outcomes to push and email.

Called only after the state change has committed. Booking details are read
from committed data on the request thread and frozen into a
BookingEmailContext, so the email worker never touches the database
session. Nothing in this module raises to its caller: a notification
failure can never make a committed transition look failed.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from functools import partial
import logging
from typing import Any, Dict, Optional

from ..core.config import Settings
from ..core.enums import ActorRole, BookingAction, NotificationChannel
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from .email import EmailService
from .email_worker_pool import EmailWorkerPool
from .push_notification_service import PushConnectionRegistry
from .template_registry import TemplateRegistry
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)

TRANSITION_EMAILS: Dict[BookingAction, TemplateRegistry] = {
    BookingAction.ACCEPT: TemplateRegistry.BOOKING_ACCEPTED_CUSTOMER,
    BookingAction.REJECT: TemplateRegistry.BOOKING_REJECTED_CUSTOMER,
    BookingAction.COMPLETE: TemplateRegistry.BOOKING_COMPLETED_CUSTOMER,
    BookingAction.CANCEL: TemplateRegistry.BOOKING_CANCELLED_BY_PROVIDER_CUSTOMER,
    BookingAction.CUSTOMER_CANCEL: TemplateRegistry.BOOKING_CANCELLED_BY_CUSTOMER_PROVIDER,
    BookingAction.MARK_COMPLETE: TemplateRegistry.BOOKING_MARKED_COMPLETE_PROVIDER,
}


def transition_message(action: BookingAction, booking_id: int, service_name: str) -> str:
    """Text shown to the counterparty, both as push and as persisted notification."""
    if action is BookingAction.ACCEPT:
        return (
            f"Your booking #{booking_id} for {service_name} was accepted by provider. "
            "You will get an email shortly. Thank you!"
        )
    if action is BookingAction.REJECT:
        return (
            f"Your booking #{booking_id} for {service_name} was not accepted by provider. "
            "You will get an email shortly. Thank you!"
        )
    if action is BookingAction.COMPLETE:
        return f"Your booking #{booking_id} for {service_name} was marked Completed by provider. Thank you!"
    if action is BookingAction.CANCEL:
        return (
            f"Your booking #{booking_id} for {service_name} was Cancelled by provider. "
            "You will get an email shortly. Thank you!"
        )
    if action is BookingAction.CUSTOMER_CANCEL:
        return f"Booking #{booking_id} for {service_name} was cancelled by the customer."
    return f"Booking #{booking_id} for {service_name} was marked completed by the customer."


def booking_request_message(booking_id: int, service_name: str, customer_name: str, customer_email: str) -> str:
    return f'New booking request for "{service_name}" by {customer_name} ({customer_email}). BookingId: {booking_id}'


def booking_placed_message(service_name: str) -> str:
    return f'Your booking request for "{service_name}" has been placed successfully.'


@dataclass(frozen=True)
class BookingEmailContext:
    """Immutable snapshot of committed booking data handed to the email worker."""

    booking_id: int
    service_name: str
    customer_id: int
    customer_name: str
    customer_email: Optional[str]
    customer_phone: Optional[str]
    provider_id: Optional[int]
    provider_email: Optional[str]
    event_start: datetime
    event_start_display: str
    amount: Optional[Decimal]
    notes: Optional[str] = None
    reason: Optional[str] = None
    original_status: Optional[str] = None

    def template_context(self, recipient_name: Optional[str], dashboard_url: str) -> Dict[str, Any]:
        context = asdict(self)
        context["recipient_name"] = recipient_name
        context["dashboard_url"] = dashboard_url
        return context


def build_email_context(
    repository: BookingRepository,
    booking_id: int,
    timezone_str: str,
    reason: Optional[str] = None,
    original_status: Optional[str] = None,
) -> Optional[BookingEmailContext]:
    """Read everything a booking notification needs. Returns None if the booking is gone."""
    booking = repository.get_booking_with_details(booking_id)
    contact = repository.get_customer_contact(booking_id)
    if booking is None or contact is None:
        return None

    customer_id, customer_name, customer_phone = contact
    event_start = TimezoneService.ensure_utc(booking.event_start)
    return BookingEmailContext(
        booking_id=booking_id,
        service_name=repository.get_service_name(booking_id) or "your service",
        customer_id=customer_id,
        customer_name=customer_name,
        customer_email=repository.get_customer_email(booking_id),
        customer_phone=customer_phone,
        provider_id=repository.get_provider_id(booking_id),
        provider_email=repository.get_provider_email(booking_id),
        event_start=event_start,
        event_start_display=TimezoneService.format_for_display(event_start, timezone_str),
        amount=repository.get_total_amount(booking_id),
        notes=booking.notes,
        reason=reason if reason is not None else booking.cancellation_reason,
        original_status=original_status,
    )


class NotificationDispatcher:
    """
    Pushes to the counterparty and schedules the matching email.

    Push runs inline and is non-blocking; email is submitted to the
    background pool. Each channel is isolated from the other's failure.
    """

    def __init__(
        self,
        settings: Settings,
        push_registry: PushConnectionRegistry,
        email_service: EmailService,
        email_pool: EmailWorkerPool,
    ):
        self.settings = settings
        self.push_registry = push_registry
        self.email_service = email_service
        self.email_pool = email_pool

    def booking_created(self, repository: BookingRepository, booking_id: int) -> None:
        context = self._load_context(repository, booking_id)
        if context is None:
            return

        self._push(
            ActorRole.CUSTOMER,
            context.customer_id,
            booking_placed_message(context.service_name),
            booking_id,
        )
        self._email(
            TemplateRegistry.BOOKING_REQUEST_PROVIDER,
            context.provider_email,
            context.template_context(None, self._dashboard_url(ActorRole.PROVIDER)),
            booking_id,
        )

    def booking_transitioned(
        self,
        repository: BookingRepository,
        booking_id: int,
        action: BookingAction,
        actor_role: ActorRole,
        reason: Optional[str] = None,
        original_status: Optional[str] = None,
    ) -> None:
        context = self._load_context(repository, booking_id, reason, original_status)
        if context is None:
            return

        receiver_role = actor_role.counterparty
        if receiver_role is ActorRole.CUSTOMER:
            receiver_id: Optional[int] = context.customer_id
            recipient = context.customer_email
            recipient_name = context.customer_name
        else:
            receiver_id = context.provider_id
            recipient = context.provider_email
            recipient_name = None

        if receiver_id is not None:
            self._push(
                receiver_role,
                receiver_id,
                transition_message(action, booking_id, context.service_name),
                booking_id,
            )

        template = TRANSITION_EMAILS.get(action)
        if template is not None:
            self._email(
                template,
                recipient,
                context.template_context(recipient_name, self._dashboard_url(receiver_role)),
                booking_id,
            )

    def _load_context(
        self,
        repository: BookingRepository,
        booking_id: int,
        reason: Optional[str] = None,
        original_status: Optional[str] = None,
    ) -> Optional[BookingEmailContext]:
        try:
            context = build_email_context(
                repository, booking_id, self.settings.platform_timezone, reason, original_status
            )
        except Exception:
            logger.error("Could not load notification context for booking %s", booking_id, exc_info=True)
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "failed")
            return None
        if context is None:
            logger.warning("Booking %s disappeared before notifications were sent", booking_id)
        return context

    def _push(self, role: ActorRole, receiver_id: int, message: str, booking_id: int) -> None:
        try:
            self.push_registry.notify(receiver_id, message, booking_id, role=role)
        except Exception:
            logger.error(
                "Push notification to %s:%s failed for booking %s",
                role.value,
                receiver_id,
                booking_id,
                exc_info=True,
            )
            prometheus_metrics.record_notification(NotificationChannel.PUSH.value, "failed")

    def _email(
        self,
        template: TemplateRegistry,
        recipient: Optional[str],
        context: Dict[str, Any],
        booking_id: int,
    ) -> None:
        if not recipient:
            logger.warning("No email address for %s on booking %s", template.name, booking_id)
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "skipped")
            return
        try:
            self.email_pool.submit(
                partial(self.email_service.send, template, recipient, context),
                description=f"{template.name} email for booking {booking_id}",
            )
        except Exception:
            logger.error("Could not schedule %s for booking %s", template.name, booking_id, exc_info=True)
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "failed")

    def _dashboard_url(self, role: ActorRole) -> str:
        base = self.settings.frontend_url.rstrip("/")
        return f"{base}/provider" if role is ActorRole.PROVIDER else f"{base}/customer/bookings"
