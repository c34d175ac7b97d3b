"""
Centralized email subject builders.

Subjects live in code (not templates) for versioning and logging. Bodies
remain in Jinja templates.
"""

from typing import Callable, Dict

from ..core.constants import BRAND_NAME
from .template_registry import TemplateRegistry


class EmailSubject:
    """Utility class with static builders for email subjects."""

    @staticmethod
    def booking_request() -> str:
        return f"New Booking Request on {BRAND_NAME}"

    @staticmethod
    def booking_accepted() -> str:
        return f"Booking Accepted on {BRAND_NAME}"

    @staticmethod
    def booking_rejected() -> str:
        return f"Booking Rejection on {BRAND_NAME}"

    @staticmethod
    def booking_completed() -> str:
        return f"Service Completed on {BRAND_NAME}"

    @staticmethod
    def booking_cancelled_by_provider() -> str:
        return f"Booking Cancelled by Provider on {BRAND_NAME}"

    @staticmethod
    def booking_cancelled_by_customer() -> str:
        return f"Booking Cancellation on {BRAND_NAME}"

    @staticmethod
    def booking_marked_complete() -> str:
        return f"Booking Marked Complete on {BRAND_NAME}"


_SUBJECTS: Dict[TemplateRegistry, Callable[[], str]] = {
    TemplateRegistry.BOOKING_REQUEST_PROVIDER: EmailSubject.booking_request,
    TemplateRegistry.BOOKING_ACCEPTED_CUSTOMER: EmailSubject.booking_accepted,
    TemplateRegistry.BOOKING_REJECTED_CUSTOMER: EmailSubject.booking_rejected,
    TemplateRegistry.BOOKING_COMPLETED_CUSTOMER: EmailSubject.booking_completed,
    TemplateRegistry.BOOKING_CANCELLED_BY_PROVIDER_CUSTOMER: EmailSubject.booking_cancelled_by_provider,
    TemplateRegistry.BOOKING_CANCELLED_BY_CUSTOMER_PROVIDER: EmailSubject.booking_cancelled_by_customer,
    TemplateRegistry.BOOKING_MARKED_COMPLETE_PROVIDER: EmailSubject.booking_marked_complete,
}


def subject_for(template: TemplateRegistry) -> str:
    return _SUBJECTS[template]()
