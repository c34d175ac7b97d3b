# backend/tests/conftest.py
"""
Shared fixtures for booking engine tests.

Every test gets a fresh in-memory SQLite database seeded with two
customers, two providers, a service owned by the first provider and a
service with no provider. Notification sinks are recording fakes and the
clock is pinned so "tomorrow" is deterministic.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import threading
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from booking_engine.core.config import Settings
from booking_engine.core.enums import ActorRole
from booking_engine.database import create_db_engine, create_session_factory, init_db
from booking_engine.models import Customer, Service, ServiceProvider
from booking_engine.principal import ActorPrincipal
from booking_engine.schemas.booking import BookingCreate
from booking_engine.services.booking_service import BookingService
from booking_engine.services.booking_transition_service import BookingTransitionService
from booking_engine.services.email import EmailMessage, EmailService
from booking_engine.services.email_worker_pool import EmailWorkerPool
from booking_engine.services.notification_dispatcher import NotificationDispatcher
from booking_engine.services.push_notification_service import PushConnectionRegistry
from booking_engine.services.template_service import TemplateService

# 2030-06-01 12:00 in Asia/Kolkata
FIXED_NOW = datetime(2030, 6, 1, 6, 30, tzinfo=timezone.utc)
TOMORROW = "2030-06-02"


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: Any) -> None:
        self.now = self.now + timedelta(**delta)


class RecordingPushConnection:
    def __init__(self) -> None:
        self.is_open = True
        self.sent: List[Dict[str, Any]] = []

    def send(self, payload: Dict[str, Any]) -> None:
        self.sent.append(payload)


class RecordingEmailTransport:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.messages: List[EmailMessage] = []

    def deliver(self, message: EmailMessage) -> None:
        with self._lock:
            self.messages.append(message)

    def to(self, address: str) -> List[EmailMessage]:
        with self._lock:
            return [m for m in self.messages if m.to == address]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite://",
        email_provider="console",
        email_worker_pool_size=2,
        email_worker_queue_limit=20,
        email_shutdown_timeout_seconds=5,
        frontend_url="https://app.example.test",
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    customer = Customer(full_name="Asha Verma", email="asha@example.com", phone="9876543210")
    other_customer = Customer(full_name="Ravi Kumar", email="ravi@example.com", phone=None)
    provider = ServiceProvider(business_name="Royal Caterers", email="royal@example.com")
    other_provider = ServiceProvider(business_name="Bloom Decor", email="bloom@example.com")
    db.add_all([customer, other_customer, provider, other_provider])
    db.flush()

    service = Service(provider_id=provider.id, service_name="Wedding Catering", price=Decimal("1500.00"))
    other_service = Service(provider_id=other_provider.id, service_name="Stage Decor", price=Decimal("800.00"))
    orphan_service = Service(provider_id=None, service_name="Unlisted Band", price=Decimal("500.00"))
    db.add_all([service, other_service, orphan_service])
    db.commit()

    return SimpleNamespace(
        customer=customer,
        other_customer=other_customer,
        provider=provider,
        other_provider=other_provider,
        service=service,
        other_service=other_service,
        orphan_service=orphan_service,
    )


@pytest.fixture
def customer(seed) -> ActorPrincipal:
    return ActorPrincipal(subject_id=seed.customer.id, role=ActorRole.CUSTOMER)


@pytest.fixture
def provider(seed) -> ActorPrincipal:
    return ActorPrincipal(subject_id=seed.provider.id, role=ActorRole.PROVIDER)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def push_registry() -> PushConnectionRegistry:
    return PushConnectionRegistry()


@pytest.fixture
def email_transport() -> RecordingEmailTransport:
    return RecordingEmailTransport()


@pytest.fixture
def email_pool():
    pool = EmailWorkerPool(max_workers=2, queue_limit=20)
    yield pool
    pool.shutdown(timeout=5)


@pytest.fixture
def dispatcher(settings, push_registry, email_transport, email_pool) -> NotificationDispatcher:
    email_service = EmailService(settings, TemplateService(settings), transport=email_transport)
    return NotificationDispatcher(settings, push_registry, email_service, email_pool)


@pytest.fixture
def booking_service(db, settings, dispatcher, clock) -> BookingService:
    return BookingService(db, settings, dispatcher=dispatcher, clock=clock)


@pytest.fixture
def transition_service(db, dispatcher, clock) -> BookingTransitionService:
    return BookingTransitionService(db, dispatcher=dispatcher, clock=clock)


def booking_request(service_id: int, **overrides: Any) -> BookingCreate:
    payload: Dict[str, Any] = {
        "service_id": service_id,
        "price": "1500.00",
        "event_address": "12 MG Road, Pune",
        "start_date": TOMORROW,
        "event_time": "10:00",
        "notes": "Vegetarian menu",
    }
    payload.update(overrides)
    return BookingCreate(**payload)


@pytest.fixture
def pending_booking_id(booking_service, customer, seed, email_pool) -> int:
    response = booking_service.create_booking(customer, booking_request(seed.service.id))
    assert email_pool.wait_for_pending(timeout=5)
    return response.booking_id


@pytest.fixture
def make_booking_request():
    return booking_request


@pytest.fixture
def connect(push_registry):
    """Register a recording push connection for (role, subject id)."""

    def _connect(role: ActorRole, subject_id: int) -> RecordingPushConnection:
        connection = RecordingPushConnection()
        push_registry.register(role, subject_id, connection)
        return connection

    return _connect
