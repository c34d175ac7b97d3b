"""
Centralized timezone handling for bookings.

Rules:
- Customers enter event dates and times in the platform timezone
- All storage: UTC
- All comparisons: UTC
- Notification text: platform timezone with abbreviation
"""

from datetime import date, datetime, time, timezone
from typing import Optional

import pytz


class TimezoneService:
    """Handles all timezone conversions consistently."""

    DEFAULT_TIMEZONE = "Asia/Kolkata"

    @staticmethod
    def get_timezone(tz_str: Optional[str]) -> pytz.BaseTzInfo:
        """Get timezone object, with fallback to default."""
        try:
            return pytz.timezone(tz_str or TimezoneService.DEFAULT_TIMEZONE)
        except pytz.UnknownTimeZoneError:
            return pytz.timezone(TimezoneService.DEFAULT_TIMEZONE)

    @staticmethod
    def local_to_utc(event_date: date, event_time: time, timezone_str: str) -> datetime:
        """
        Convert local date/time to UTC.

        Uses the timezone rules valid on event_date, so DST changes are
        handled for zones that observe them.

        Raises:
            ValueError: If the time doesn't exist (DST spring-forward gap)
        """
        tz = TimezoneService.get_timezone(timezone_str)
        naive_dt = datetime.combine(event_date, event_time)

        try:
            local_dt = tz.localize(naive_dt, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            # Fall back (time exists twice) - use first occurrence
            local_dt = tz.localize(naive_dt, is_dst=True)
        except pytz.exceptions.NonExistentTimeError:
            raise ValueError(
                f"The time {event_time.strftime('%I:%M %p')} does not exist on "
                f"{event_date} in {timezone_str} due to Daylight Saving Time. "
                f"Please select a different time."
            )

        return local_dt.astimezone(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Attach UTC to naive values read back from stores that drop tzinfo."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def utc_to_local(utc_dt: datetime, timezone_str: str) -> datetime:
        tz = TimezoneService.get_timezone(timezone_str)
        return TimezoneService.ensure_utc(utc_dt).astimezone(tz)

    @staticmethod
    def format_for_display(
        utc_dt: datetime, timezone_str: str, include_tz_abbrev: bool = True
    ) -> str:
        """
        Format a UTC datetime for display in a specific timezone.

        Returns: e.g., "Dec 25, 2025 at 02:00 PM IST"
        """
        local_dt = TimezoneService.utc_to_local(utc_dt, timezone_str)

        if include_tz_abbrev:
            return local_dt.strftime("%b %d, %Y at %I:%M %p %Z")
        return local_dt.strftime("%b %d, %Y at %I:%M %p")
