# backend/booking_engine/api/dependencies/services.py
"""
Service dependencies.

Services are built per request around the request's session; the
dispatcher, clock and settings come from the application runtime.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...runtime import BookingRuntime
from ...services.booking_service import BookingService
from ...services.booking_transition_service import BookingTransitionService
from .database import get_db, get_runtime


def get_booking_service(
    db: Session = Depends(get_db),
    runtime: BookingRuntime = Depends(get_runtime),
) -> BookingService:
    return BookingService(
        db,
        runtime.settings,
        dispatcher=runtime.dispatcher,
        clock=runtime.clock,
    )


def get_booking_transition_service(
    db: Session = Depends(get_db),
    runtime: BookingRuntime = Depends(get_runtime),
) -> BookingTransitionService:
    return BookingTransitionService(db, dispatcher=runtime.dispatcher, clock=runtime.clock)
