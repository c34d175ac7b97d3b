"""FastAPI dependencies for the booking routes."""

from .auth import get_current_principal, principal_from_headers
from .database import get_db, get_runtime
from .services import get_booking_service, get_booking_transition_service

__all__ = [
    "get_booking_service",
    "get_booking_transition_service",
    "get_current_principal",
    "get_db",
    "get_runtime",
    "principal_from_headers",
]
