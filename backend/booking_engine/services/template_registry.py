"""
Template registry for strongly-typed access to Jinja templates.

Each member is one email kind the notification dispatcher can send. Use
with TemplateService to avoid stringly-typed paths.
"""

from enum import Enum


class TemplateRegistry(str, Enum):
    # Provider-facing
    BOOKING_REQUEST_PROVIDER = "email/booking/request_provider.html"
    BOOKING_CANCELLED_BY_CUSTOMER_PROVIDER = "email/booking/cancelled_by_customer_provider.html"
    BOOKING_MARKED_COMPLETE_PROVIDER = "email/booking/marked_complete_provider.html"

    # Customer-facing
    BOOKING_ACCEPTED_CUSTOMER = "email/booking/accepted_customer.html"
    BOOKING_REJECTED_CUSTOMER = "email/booking/rejected_customer.html"
    BOOKING_COMPLETED_CUSTOMER = "email/booking/completed_customer.html"
    BOOKING_CANCELLED_BY_PROVIDER_CUSTOMER = "email/booking/cancelled_by_provider_customer.html"
