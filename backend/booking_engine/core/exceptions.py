# backend/booking_engine/core/exceptions.py
"""
Domain-specific exceptions for the booking engine.

These exceptions carry business-focused messages that are safe to show to
callers. The API layer converts them into `{"error": message}` responses
with the status code each class declares.
"""

from typing import Any, Dict, Optional

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_response_body(self) -> Dict[str, str]:
        return {"error": self.message}


class ValidationException(DomainException):
    """Raised when input is missing or malformed, or an action is unknown."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedException(DomainException):
    """Raised when the caller identity is missing or unreadable."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when the caller does not own the booking it is acting on."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when the booking is not in a state that allows the action."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business timing rule is violated."""

    status_code = status.HTTP_400_BAD_REQUEST


class ServiceException(DomainException):
    """Raised when a service operation fails for internal reasons."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "An error occurred processing your request"

    def to_response_body(self) -> Dict[str, str]:
        # Internal failure details stay in the logs.
        return {"error": self.public_message}


# Specific business exceptions


class BookingStateConflictException(ConflictException):
    """Raised when a transition is requested from a state that does not permit it."""

    def __init__(self, action: str, current_status: str):
        super().__init__(
            message=f"Cannot {action} a booking that is {current_status}",
            code="BOOKING_STATE_CONFLICT",
            details={"action": action, "current_status": current_status},
        )


class ConcurrentModificationException(ConflictException):
    """Raised when another request changed the booking first."""

    def __init__(self, booking_id: int):
        super().__init__(
            message="Booking was modified by another request, please retry",
            code="BOOKING_CONCURRENT_MODIFICATION",
            details={"booking_id": booking_id},
        )


class ServiceWindowNotElapsedException(BusinessRuleException):
    """Raised when a provider tries to complete a booking before the event is over."""

    def __init__(self, booking_id: int):
        super().__init__(
            message="Cannot complete booking before service time has passed",
            code="SERVICE_WINDOW_NOT_ELAPSED",
            details={"booking_id": booking_id},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """


class NotificationException(Exception):
    """
    Raised by notification sinks (push, email) when delivery fails.

    Never reaches a caller: the dispatcher and the email worker pool catch
    and log it.
    """
