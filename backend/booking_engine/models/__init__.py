"""
SQLAlchemy models for the booking engine.

Importing this package registers every mapper on `Base.metadata`.
"""

from .booking import Booking, BookingDetail, BookingServiceLink
from .notification import NotificationRecord
from .service import Service
from .user import Customer, ServiceProvider

__all__ = [
    "Booking",
    "BookingDetail",
    "BookingServiceLink",
    "Customer",
    "NotificationRecord",
    "Service",
    "ServiceProvider",
]
