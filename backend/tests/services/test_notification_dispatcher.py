"""
NotificationDispatcher must never raise: every failure is logged and the
other channel still runs.
"""

import logging

from booking_engine.core.enums import ActorRole, BookingAction
from booking_engine.core.exceptions import NotificationException
from booking_engine.repositories.booking_repository import BookingRepository
from booking_engine.services.notification_dispatcher import (
    NotificationDispatcher,
    build_email_context,
    transition_message,
)


class DummyPushRegistry:
    def __init__(self):
        self.calls = []

    def notify(self, receiver_id, message, booking_id, role=ActorRole.CUSTOMER):
        self.calls.append((role, receiver_id, message, booking_id))


class FailingPushRegistry:
    def notify(self, *args, **kwargs):
        raise RuntimeError("registry is broken")


class FailingEmailService:
    def send(self, template_kind, recipient, context):
        raise NotificationException("smtp down")


class RejectingPool:
    def submit(self, job, description="email"):
        raise RuntimeError("pool exploded")


class BrokenRepository:
    def get_booking_with_details(self, booking_id):
        raise RuntimeError("db gone")


def test_transition_messages():
    assert transition_message(BookingAction.REJECT, 5, "Mehendi") == (
        "Your booking #5 for Mehendi was not accepted by provider. You will get an email shortly. Thank you!"
    )
    assert transition_message(BookingAction.COMPLETE, 5, "Mehendi") == (
        "Your booking #5 for Mehendi was marked Completed by provider. Thank you!"
    )
    assert transition_message(BookingAction.CANCEL, 5, "Mehendi") == (
        "Your booking #5 for Mehendi was Cancelled by provider. You will get an email shortly. Thank you!"
    )


def test_email_context_snapshot(db, settings, seed, pending_booking_id):
    context = build_email_context(
        BookingRepository(db), pending_booking_id, settings.platform_timezone, original_status="Pending"
    )

    assert context.booking_id == pending_booking_id
    assert context.service_name == "Wedding Catering"
    assert context.customer_name == "Asha Verma"
    assert context.provider_email == "royal@example.com"
    assert context.provider_id == seed.provider.id
    assert context.original_status == "Pending"
    assert "10:00" in context.event_start_display

    template_context = context.template_context("Asha Verma", "https://app.example.test/customer/bookings")
    assert template_context["recipient_name"] == "Asha Verma"
    assert template_context["dashboard_url"].endswith("/customer/bookings")


def test_email_context_for_missing_booking(db, settings, seed):
    assert build_email_context(BookingRepository(db), 424242, settings.platform_timezone) is None


def test_customer_action_notifies_provider(db, settings, dispatcher, seed, pending_booking_id, email_transport, email_pool, connect):
    provider_socket = connect(ActorRole.PROVIDER, seed.provider.id)
    customer_socket = connect(ActorRole.CUSTOMER, seed.customer.id)

    dispatcher.booking_transitioned(
        BookingRepository(db), pending_booking_id, BookingAction.MARK_COMPLETE, ActorRole.CUSTOMER
    )
    assert email_pool.wait_for_pending(timeout=5)

    assert len(provider_socket.sent) == 1
    assert customer_socket.sent == []
    marked = [e for e in email_transport.messages if e.subject == "Booking Marked Complete on ShaadiSarthi"]
    assert [e.to for e in marked] == ["royal@example.com"]
    assert "https://app.example.test/provider" in marked[0].html


def test_push_failure_still_sends_email(db, settings, seed, pending_booking_id, email_transport, email_pool, dispatcher, caplog):
    failing = NotificationDispatcher(settings, FailingPushRegistry(), dispatcher.email_service, email_pool)

    with caplog.at_level(logging.ERROR):
        failing.booking_transitioned(
            BookingRepository(db), pending_booking_id, BookingAction.ACCEPT, ActorRole.PROVIDER
        )
    assert email_pool.wait_for_pending(timeout=5)

    assert "Push notification" in caplog.text
    assert [e.subject for e in email_transport.to("asha@example.com")] == ["Booking Accepted on ShaadiSarthi"]


def test_email_failure_is_logged_not_raised(db, settings, seed, pending_booking_id, email_pool, caplog):
    push = DummyPushRegistry()
    failing = NotificationDispatcher(settings, push, FailingEmailService(), email_pool)

    with caplog.at_level(logging.ERROR):
        failing.booking_transitioned(
            BookingRepository(db), pending_booking_id, BookingAction.ACCEPT, ActorRole.PROVIDER
        )
        assert email_pool.wait_for_pending(timeout=5)

    assert push.calls and push.calls[0][0] is ActorRole.CUSTOMER
    assert "failed" in caplog.text


def test_scheduling_failure_is_swallowed(db, settings, seed, pending_booking_id, dispatcher):
    push = DummyPushRegistry()
    failing = NotificationDispatcher(settings, push, dispatcher.email_service, RejectingPool())

    failing.booking_created(BookingRepository(db), pending_booking_id)

    assert len(push.calls) == 1


def test_context_failure_sends_nothing(settings, dispatcher, email_pool, email_transport):
    push = DummyPushRegistry()
    failing = NotificationDispatcher(settings, push, dispatcher.email_service, email_pool)

    failing.booking_transitioned(BrokenRepository(), 1, BookingAction.ACCEPT, ActorRole.PROVIDER)

    assert email_pool.wait_for_pending(timeout=5)
    assert push.calls == []
    assert email_transport.messages == []
