"""Booking timing rules."""

from datetime import datetime, timezone
import logging
from typing import Callable, Optional

from ..repositories.booking_repository import BookingRepository
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TemporalRuleChecker:
    """
    Checks whether a booking's service window is over.

    The clock is injectable so callers can pin "now" in tests.
    """

    def __init__(self, repository: BookingRepository, clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or utc_now

    def is_service_window_elapsed(self, booking_id: int) -> bool:
        """True iff the current instant is strictly after the booking's event end."""
        window = self.repository.get_event_window(booking_id)
        if window is None:
            return False

        _, event_end = window
        now = TimezoneService.ensure_utc(self.clock())
        elapsed = now > TimezoneService.ensure_utc(event_end)
        logger.debug(
            "Service window check for booking %s: now=%s end=%s elapsed=%s",
            booking_id,
            now.isoformat(),
            event_end.isoformat(),
            elapsed,
        )
        return elapsed
