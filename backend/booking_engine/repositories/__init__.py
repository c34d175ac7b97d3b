from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .notification_repository import NotificationRepository

__all__ = ["BaseRepository", "BookingRepository", "NotificationRepository"]
