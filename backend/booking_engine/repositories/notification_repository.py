"""Data access for the persisted notification audit trail."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import ActorRole
from ..core.exceptions import RepositoryException
from ..models.notification import NotificationRecord
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository[NotificationRecord]):
    def __init__(self, db: Session):
        super().__init__(db, NotificationRecord)

    def create_notification(
        self,
        receiver_id: int,
        receiver_role: ActorRole,
        message: str,
        booking_id: Optional[int] = None,
    ) -> NotificationRecord:
        return self.create(
            receiver_id=receiver_id,
            receiver_role=receiver_role.value,
            booking_id=booking_id,
            message=message,
            is_read=False,
        )

    def list_for_receiver(
        self, receiver_id: int, receiver_role: ActorRole, unread_only: bool = False
    ) -> List[NotificationRecord]:
        try:
            query = self.db.query(NotificationRecord).filter(
                NotificationRecord.receiver_id == receiver_id,
                NotificationRecord.receiver_role == receiver_role.value,
            )
            if unread_only:
                query = query.filter(NotificationRecord.is_read.is_(False))
            return query.order_by(NotificationRecord.id.desc()).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing notifications for {receiver_role.value}:{receiver_id}: {str(e)}")
            raise RepositoryException(f"Failed to list notifications: {str(e)}") from e

    def list_for_booking(self, booking_id: int) -> List[NotificationRecord]:
        try:
            return (
                self.db.query(NotificationRecord)
                .filter(NotificationRecord.booking_id == booking_id)
                .order_by(NotificationRecord.id)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing notifications for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to list notifications: {str(e)}") from e
