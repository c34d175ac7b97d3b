# backend/booking_engine/schemas/booking.py
"""
Request and response schemas for booking endpoints.

Dates arrive as YYYY-MM-DD and times of day as HH:MM, both local to the
platform timezone. Whether the resulting instant is in the future depends
on "now" and the timezone, so that check lives in BookingService.
"""

from datetime import date, datetime, time
from decimal import Decimal
import re
from typing import Any, Optional

from pydantic import Field, ValidationInfo, field_validator, model_validator

from ..core.constants import MAX_ADDRESS_LENGTH, MAX_NOTES_LENGTH, MAX_REASON_LENGTH, MAX_RECORD_ID
from ._strict_base import StrictModel, StrictRequestModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_OF_DAY_REGEX = re.compile(r"^\d{1,2}:\d{2}$")


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


class BookingCreate(StrictRequestModel):
    """New booking request from a customer."""

    service_id: int = Field(..., gt=0, le=MAX_RECORD_ID)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    event_address: str = Field(..., min_length=1, max_length=MAX_ADDRESS_LENGTH)
    start_date: date = Field(..., description="Event start date (YYYY-MM-DD)")
    end_date: Optional[date] = Field(None, description="Event end date, defaults to start_date")
    event_time: time = Field(..., description="Time of day (HH:MM)")
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @model_validator(mode="before")
    @classmethod
    def _default_end_date(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("end_date"):
            data = {**data, "end_date": data.get("start_date")}
        return data

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object, info: ValidationInfo) -> object:
        return _ensure_date_only(v, info.field_name)

    @field_validator("event_address")
    @classmethod
    def _address_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("event_address cannot be blank")
        return v

    @field_validator("event_time", mode="before")
    @classmethod
    def parse_time_string(cls, v: object) -> object:
        """Convert HH:MM strings to time objects."""
        if isinstance(v, str):
            candidate = v.strip()
            try:
                if not TIME_OF_DAY_REGEX.fullmatch(candidate):
                    raise ValueError(candidate)
                hour, minute = candidate.split(":")
                return time(int(hour), int(minute))
            except ValueError:
                raise ValueError(f"Invalid time format: {v}. Expected HH:MM format.")
        return v

    @model_validator(mode="after")
    def _check_date_order(self) -> "BookingCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

    @property
    def effective_end_date(self) -> date:
        return self.end_date or self.start_date

    @property
    def event_time_text(self) -> str:
        return self.event_time.strftime("%H:%M")


class BookingActionRequest(StrictRequestModel):
    action: str = Field(..., min_length=1, max_length=32)
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)

    @field_validator("reason", mode="after")
    @classmethod
    def _blank_reason_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v


class BookingCreateResponse(StrictModel):
    booking_id: int
    status: str
    message: str


class BookingActionResponse(StrictModel):
    booking_id: int
    status: str
    message: str


class BookingView(StrictModel):
    """Owner-facing view of a booking with both status projections."""

    booking_id: int
    customer_id: int
    provider_id: Optional[int]
    service_id: int
    service_name: Optional[str]
    booking_status: str
    detail_status: str
    event_address: str
    event_start: datetime
    event_end: datetime
    event_time: str
    total_amount: Decimal
    quantity: int
    notes: Optional[str]
    cancellation_reason: Optional[str]
    created_at: Optional[datetime]


class ErrorResponse(StrictModel):
    error: str
