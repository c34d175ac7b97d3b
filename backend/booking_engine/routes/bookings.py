# backend/booking_engine/routes/bookings.py
"""
Booking routes.

Router Endpoints:
    POST / - Create a booking request (customers)
    POST /{booking_id}/actions - Apply a lifecycle action (owner only)
    GET /{booking_id} - Booking details (owner only)

Routes are plain `def` functions: FastAPI runs them on its worker thread
pool, and each call blocks until its transaction commits or fails.
Domain exceptions propagate to the handlers registered in main.py.
"""

import logging

from fastapi import APIRouter, Depends, Path, status

from ..api.dependencies import (
    get_booking_service,
    get_booking_transition_service,
    get_current_principal,
)
from ..core.constants import MAX_RECORD_ID
from ..principal import ActorPrincipal
from ..schemas.booking import (
    BookingActionRequest,
    BookingActionResponse,
    BookingCreate,
    BookingCreateResponse,
    BookingView,
    ErrorResponse,
)
from ..services.booking_service import BookingService
from ..services.booking_transition_service import BookingTransitionService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("", response_model=BookingCreateResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate,
    principal: ActorPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreateResponse:
    """Create a booking request; the provider is notified once it is stored."""
    return booking_service.create_booking(principal, booking_data)


@router.post("/{booking_id}/actions", response_model=BookingActionResponse)
def apply_booking_action(
    action_request: BookingActionRequest,
    booking_id: int = Path(..., gt=0, le=MAX_RECORD_ID),
    principal: ActorPrincipal = Depends(get_current_principal),
    transition_service: BookingTransitionService = Depends(get_booking_transition_service),
) -> BookingActionResponse:
    """
    Apply accept/reject/complete/cancel (providers) or cancel/markComplete
    (customers) to a booking the caller owns.
    """
    return transition_service.apply_action(
        principal, booking_id, action_request.action, action_request.reason
    )


@router.get("/{booking_id}", response_model=BookingView)
def get_booking(
    booking_id: int = Path(..., gt=0, le=MAX_RECORD_ID),
    principal: ActorPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingView:
    return booking_service.get_booking_view(principal, booking_id)
