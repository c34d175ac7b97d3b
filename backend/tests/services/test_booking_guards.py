"""
Ownership guard and service-window checker.
"""

from datetime import datetime, timedelta, timezone

import pytest

from booking_engine.core.enums import ActorRole
from booking_engine.core.exceptions import ForbiddenException
from booking_engine.principal import ActorPrincipal
from booking_engine.repositories.booking_repository import BookingRepository
from booking_engine.services.ownership_checker import OwnershipChecker
from booking_engine.services.temporal_rules import TemporalRuleChecker

EVENT_END = datetime(2030, 6, 2, 4, 30, tzinfo=timezone.utc)


@pytest.fixture
def checker(db) -> OwnershipChecker:
    return OwnershipChecker(BookingRepository(db))


class TestOwnershipChecker:
    def test_owners(self, checker, customer, provider, pending_booking_id):
        assert checker.owns(customer, pending_booking_id)
        assert checker.owns(provider, pending_booking_id)
        checker.ensure_owner(customer, pending_booking_id)
        checker.ensure_owner(provider, pending_booking_id)

    def test_strangers(self, checker, seed, pending_booking_id):
        other_customer = ActorPrincipal(subject_id=seed.other_customer.id, role=ActorRole.CUSTOMER)
        other_provider = ActorPrincipal(subject_id=seed.other_provider.id, role=ActorRole.PROVIDER)

        assert not checker.owns(other_customer, pending_booking_id)
        assert not checker.owns(other_provider, pending_booking_id)
        with pytest.raises(ForbiddenException) as exc_info:
            checker.ensure_owner(other_provider, pending_booking_id)
        assert exc_info.value.status_code == 403

    def test_missing_booking(self, checker, customer, provider):
        assert not checker.owns(customer, 424242)
        assert not checker.owns(provider, 424242)


class TestTemporalRuleChecker:
    @pytest.mark.parametrize(
        "now,elapsed",
        [
            (EVENT_END - timedelta(hours=1), False),
            (EVENT_END, False),
            (EVENT_END + timedelta(seconds=1), True),
            (EVENT_END + timedelta(days=30), True),
        ],
    )
    def test_window(self, db, pending_booking_id, now, elapsed):
        checker = TemporalRuleChecker(BookingRepository(db), clock=lambda: now)
        assert checker.is_service_window_elapsed(pending_booking_id) is elapsed

    def test_missing_booking_never_elapses(self, db, seed):
        checker = TemporalRuleChecker(BookingRepository(db), clock=lambda: EVENT_END + timedelta(days=365))
        assert checker.is_service_window_elapsed(424242) is False
