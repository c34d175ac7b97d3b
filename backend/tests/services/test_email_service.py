from datetime import datetime, timezone
from decimal import Decimal

import pytest

from booking_engine.core.exceptions import NotificationException
from booking_engine.services.email import ConsoleEmailTransport, EmailService, build_email_transport
from booking_engine.services.template_registry import TemplateRegistry
from booking_engine.services.template_service import TemplateService


class DummyTransport:
    def __init__(self):
        self.messages = []

    def deliver(self, message):
        self.messages.append(message)


class FailingTransport:
    def deliver(self, message):
        raise RuntimeError("422 invalid from address")


def _context(**overrides):
    context = {
        "booking_id": 11,
        "service_name": "Wedding Catering",
        "customer_id": 1,
        "customer_name": "Asha Verma",
        "customer_email": "asha@example.com",
        "customer_phone": None,
        "provider_id": 2,
        "provider_email": "royal@example.com",
        "event_start": datetime(2030, 6, 2, 4, 30, tzinfo=timezone.utc),
        "event_start_display": "Jun 02, 2030 at 10:00 AM IST",
        "amount": Decimal("1500.00"),
        "notes": None,
        "reason": None,
        "original_status": "Confirmed",
        "recipient_name": "Asha Verma",
        "dashboard_url": "https://app.example.test/customer/bookings",
    }
    context.update(overrides)
    return context


@pytest.fixture
def template_service(settings):
    return TemplateService(settings)


@pytest.mark.parametrize("template", list(TemplateRegistry))
def test_every_booking_template_renders(template_service, template):
    html = template_service.render_template(template.value, _context())
    assert "Wedding Catering" in html
    assert "ShaadiSarthi" in html


def test_currency_filter(template_service):
    html = template_service.render_template(TemplateRegistry.BOOKING_REQUEST_PROVIDER.value, _context())
    assert "₹1,500.00" in html


def test_send_builds_message(settings, template_service):
    transport = DummyTransport()
    service = EmailService(settings, template_service, transport=transport)

    service.send(TemplateRegistry.BOOKING_REJECTED_CUSTOMER, "asha@example.com", _context(reason="Fully booked"))

    message = transport.messages[0]
    assert message.to == "asha@example.com"
    assert message.sender == "ShaadiSarthi <bookings@shaadisarthi.com>"
    assert message.subject == "Booking Rejection on ShaadiSarthi"
    assert "Fully booked" in message.text
    assert "<" not in message.text


def test_send_without_recipient(settings, template_service):
    service = EmailService(settings, template_service, transport=DummyTransport())
    with pytest.raises(NotificationException):
        service.send(TemplateRegistry.BOOKING_ACCEPTED_CUSTOMER, None, _context())


def test_transport_failure_becomes_notification_exception(settings, template_service):
    service = EmailService(settings, template_service, transport=FailingTransport())
    with pytest.raises(NotificationException, match="Email delivery failed"):
        service.send(TemplateRegistry.BOOKING_ACCEPTED_CUSTOMER, "asha@example.com", _context())


def test_console_transport_is_the_default(settings):
    assert isinstance(build_email_transport(settings), ConsoleEmailTransport)
