import pytest

from booking_engine.domain.booking_state import (
    TERMINAL_STATES,
    BookingState,
    BookingStatus,
    DetailStatus,
)


@pytest.mark.parametrize(
    "state,booking_status,detail_status",
    [
        (BookingState.PENDING, BookingStatus.PENDING, DetailStatus.PENDING),
        (BookingState.ACCEPTED, BookingStatus.ACCEPTED, DetailStatus.CONFIRMED),
        (BookingState.REJECTED, BookingStatus.REJECTED, DetailStatus.CANCELLED),
        (BookingState.COMPLETED, BookingStatus.COMPLETED, DetailStatus.COMPLETED),
        (BookingState.CANCELLED, BookingStatus.CANCELLED, DetailStatus.CANCELLED),
        (BookingState.CUSTOMER_COMPLETED, BookingStatus.ACCEPTED, DetailStatus.COMPLETED),
    ],
)
def test_projection(state, booking_status, detail_status):
    assert state.projection == (booking_status, detail_status)
    assert state.booking_status is booking_status
    assert state.detail_status is detail_status


def test_every_state_projects_to_a_distinct_pair():
    pairs = [state.projection for state in BookingState]
    assert len(pairs) == len(set(pairs))


def test_terminal_states():
    assert TERMINAL_STATES == {BookingState.REJECTED, BookingState.COMPLETED, BookingState.CANCELLED}
    assert not BookingState.PENDING.is_terminal
    assert not BookingState.ACCEPTED.is_terminal
    assert not BookingState.CUSTOMER_COMPLETED.is_terminal
    assert BookingState.CANCELLED.is_terminal
