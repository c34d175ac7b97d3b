"""
Booking ownership guard.

Ownership comes from persisted rows only: a provider owns a booking through
its BookingServiceLink, a customer through Booking.customer_id.
"""

import logging

from ..core.exceptions import ForbiddenException
from ..principal import ActorPrincipal
from ..repositories.booking_repository import BookingRepository

logger = logging.getLogger(__name__)


class OwnershipChecker:
    def __init__(self, repository: BookingRepository):
        self.repository = repository

    def is_provider_owner(self, booking_id: int, provider_id: int) -> bool:
        return self.repository.is_provider_owner(booking_id, provider_id)

    def is_customer_owner(self, booking_id: int, customer_id: int) -> bool:
        return self.repository.is_customer_owner(booking_id, customer_id)

    def owns(self, principal: ActorPrincipal, booking_id: int) -> bool:
        if principal.is_provider:
            return self.is_provider_owner(booking_id, principal.subject_id)
        return self.is_customer_owner(booking_id, principal.subject_id)

    def ensure_owner(self, principal: ActorPrincipal, booking_id: int) -> None:
        """
        Raises:
            ForbiddenException: If the caller does not own the booking. A
                booking that does not exist is owned by nobody.
        """
        if self.owns(principal, booking_id):
            return

        logger.warning(
            "Ownership check failed for %s on booking %s", principal.identifier, booking_id
        )
        if principal.is_provider:
            raise ForbiddenException("Not authorized to manage this booking", code="NOT_BOOKING_PROVIDER")
        raise ForbiddenException("Not your booking", code="NOT_BOOKING_CUSTOMER")
