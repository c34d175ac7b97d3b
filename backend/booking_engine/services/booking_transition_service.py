# backend/booking_engine/services/booking_transition_service.py
"""
Booking transition engine.

Applies one lifecycle action to one booking:

1. Normalize the action for the caller's role (unknown -> 400)
2. Ownership guard (not the owner -> 403, nothing touched)
3. Service-window gate for provider `complete` (too early -> 400)
4. One transaction: lock the row, check the source state (-> 409), write
   the target state with a version check (lost race -> 409, row gone ->
   404), record the counterparty's notification, commit
5. After commit: push + email through the notification dispatcher

Storage failures in step 4 roll the whole transaction back and surface as
ServiceException (500). Nothing after step 4 can fail the request.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.enums import ActorRole
from ..core.exceptions import (
    BookingStateConflictException,
    BusinessRuleException,
    ConcurrentModificationException,
    ConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    ServiceWindowNotElapsedException,
    ValidationException,
)
from ..domain.transitions import TransitionRule, parse_action, resolve_rule
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import ActorPrincipal
from ..repositories.booking_repository import BookingRepository
from ..repositories.notification_repository import NotificationRepository
from ..schemas.booking import BookingActionResponse
from .base import BaseService
from .notification_dispatcher import NotificationDispatcher, transition_message
from .ownership_checker import OwnershipChecker
from .temporal_rules import Clock, TemporalRuleChecker

logger = logging.getLogger(__name__)


def _outcome_label(exc: DomainException) -> str:
    if isinstance(exc, ValidationException):
        return "invalid"
    if isinstance(exc, ForbiddenException):
        return "forbidden"
    if isinstance(exc, BusinessRuleException):
        return "rule_violation"
    if isinstance(exc, ConflictException):
        return "conflict"
    if isinstance(exc, NotFoundException):
        return "not_found"
    return "error"


class BookingTransitionService(BaseService):
    def __init__(
        self,
        db: Session,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Clock] = None,
        booking_repository: Optional[BookingRepository] = None,
        notification_repository: Optional[NotificationRepository] = None,
    ):
        super().__init__(db)
        self.dispatcher = dispatcher
        self.repository = booking_repository or BookingRepository(db)
        self.notification_repository = notification_repository or NotificationRepository(db)
        self.ownership = OwnershipChecker(self.repository)
        self.temporal_rules = TemporalRuleChecker(self.repository, clock)

    @BaseService.measure_operation("apply_action")
    def apply_action(
        self,
        principal: ActorPrincipal,
        booking_id: int,
        raw_action: Optional[str],
        reason: Optional[str] = None,
    ) -> BookingActionResponse:
        """
        Apply a lifecycle action requested by a customer or provider.

        Returns:
            booking id, the new line-item status and a confirmation message

        Raises:
            ValidationException: Unknown action for the caller's role
            ForbiddenException: Caller does not own the booking
            BusinessRuleException: Provider completes before the event ended
            ConflictException: Booking state does not allow the action, or
                another request changed it first
            NotFoundException: Booking vanished while the action ran
            ServiceException: Storage failure (transaction rolled back)
        """
        action_label = (raw_action or "").strip() or "unknown"
        try:
            action = parse_action(raw_action, principal.role)
            action_label = action.value
            rule = resolve_rule(principal.role, action)
            response, original_status, stored_reason = self._apply(principal, booking_id, rule, reason)
        except DomainException as e:
            prometheus_metrics.record_transition(action_label, _outcome_label(e))
            self.logger.warning(
                f"Booking action {action_label} by {principal.identifier} on booking {booking_id} "
                f"rejected: {e.message}"
            )
            raise

        prometheus_metrics.record_transition(action.value, "applied")
        self.log_operation(
            "booking_transition",
            booking_id=booking_id,
            action=action.value,
            actor=principal.identifier,
            new_status=response.status,
        )

        if self.dispatcher is not None:
            self.dispatcher.booking_transitioned(
                self.repository,
                booking_id,
                action,
                principal.role,
                reason=stored_reason,
                original_status=original_status,
            )
        return response

    def _apply(
        self,
        principal: ActorPrincipal,
        booking_id: int,
        rule: TransitionRule,
        reason: Optional[str],
    ):
        self.ownership.ensure_owner(principal, booking_id)

        if rule.requires_service_window_elapsed and not self.temporal_rules.is_service_window_elapsed(
            booking_id
        ):
            raise ServiceWindowNotElapsedException(booking_id)

        stored_reason = reason if rule.stores_reason and reason and reason.strip() else None

        with self.transaction():
            booking = self.repository.get_for_update(booking_id)
            if booking is None:
                raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

            current = booking.lifecycle_state
            if not rule.permits(current):
                raise BookingStateConflictException(rule.action.value, current.booking_status.value)

            affected = self.repository.update_state(
                booking_id, rule.target, expected_version=booking.version, reason=stored_reason
            )
            if affected == 0:
                if self.repository.get_state(booking_id) is None:
                    raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
                raise ConcurrentModificationException(booking_id)

            receiver_role = principal.role.counterparty
            receiver_id = (
                booking.customer_id
                if receiver_role is ActorRole.CUSTOMER
                else self.repository.get_provider_id(booking_id)
            )
            if receiver_id is not None:
                self.notification_repository.create_notification(
                    receiver_id=receiver_id,
                    receiver_role=receiver_role,
                    message=transition_message(
                        rule.action,
                        booking_id,
                        self.repository.get_service_name(booking_id) or "your service",
                    ),
                    booking_id=booking_id,
                )

        response = BookingActionResponse(
            booking_id=booking_id,
            status=rule.target.detail_status.value,
            message=f"Booking {rule.past_tense} successfully",
        )
        return response, current.detail_status.value, stored_reason

