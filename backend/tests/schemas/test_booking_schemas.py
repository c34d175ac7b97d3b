from datetime import date, time
from decimal import Decimal

from pydantic import ValidationError
import pytest

from booking_engine.schemas.booking import BookingActionRequest, BookingCreate


def _payload(**overrides):
    payload = {
        "service_id": 7,
        "price": "2500.50",
        "event_address": "Lawn 3, Palace Grounds",
        "start_date": "2030-06-02",
        "event_time": "18:30",
    }
    payload.update(overrides)
    return payload


class TestBookingCreate:
    def test_valid_payload(self):
        data = BookingCreate(**_payload(end_date="2030-06-03", notes="Two days"))
        assert data.price == Decimal("2500.50")
        assert data.start_date == date(2030, 6, 2)
        assert data.end_date == date(2030, 6, 3)
        assert data.event_time == time(18, 30)
        assert data.event_time_text == "18:30"

    def test_end_date_defaults_to_start_date(self):
        data = BookingCreate(**_payload())
        assert data.end_date == date(2030, 6, 2)
        assert data.effective_end_date == date(2030, 6, 2)

    def test_empty_end_date_defaults_to_start_date(self):
        assert BookingCreate(**_payload(end_date="")).end_date == date(2030, 6, 2)

    def test_single_digit_hour(self):
        assert BookingCreate(**_payload(event_time="9:05")).event_time == time(9, 5)

    @pytest.mark.parametrize("bad_time", ["25:00", "10:61", "noon", "10-30", "10:30:00"])
    def test_invalid_time(self, bad_time):
        with pytest.raises(ValidationError, match="Invalid time format"):
            BookingCreate(**_payload(event_time=bad_time))

    @pytest.mark.parametrize("bad_date", ["02-06-2030", "2030/06/02", "2030-06-02T10:00:00"])
    def test_date_must_be_date_only(self, bad_date):
        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            BookingCreate(**_payload(start_date=bad_date))

    def test_end_before_start(self):
        with pytest.raises(ValidationError, match="end_date cannot be before start_date"):
            BookingCreate(**_payload(end_date="2030-06-01"))

    @pytest.mark.parametrize("service_id", [0, 2**31])
    def test_service_id_range(self, service_id):
        with pytest.raises(ValidationError):
            BookingCreate(**_payload(service_id=service_id))

    @pytest.mark.parametrize("price", ["0", "-10", "12.345"])
    def test_invalid_price(self, price):
        with pytest.raises(ValidationError):
            BookingCreate(**_payload(price=price))

    def test_blank_address(self):
        with pytest.raises(ValidationError, match="event_address cannot be blank"):
            BookingCreate(**_payload(event_address="   "))

    def test_missing_fields(self):
        payload = _payload()
        del payload["service_id"]
        del payload["event_time"]
        with pytest.raises(ValidationError) as exc_info:
            BookingCreate(**payload)
        missing = {error["loc"][0] for error in exc_info.value.errors() if error["type"] == "missing"}
        assert missing == {"service_id", "event_time"}

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            BookingCreate(**_payload(status="Accepted"))


class TestBookingActionRequest:
    def test_reason_is_kept(self):
        request = BookingActionRequest(action="reject", reason="Fully booked that day")
        assert request.reason == "Fully booked that day"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_blank_reason_is_absent(self, reason):
        assert BookingActionRequest(action="reject", reason=reason).reason is None

    def test_action_required(self):
        with pytest.raises(ValidationError):
            BookingActionRequest(reason="why")
