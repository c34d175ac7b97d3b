"""
Persisted notification audit trail.

Every booking event addressed to a customer or provider is written here in
the same transaction as the state change, independent of whether a live
push connection existed.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class NotificationRecord(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    receiver_id = Column(Integer, nullable=False)
    receiver_role = Column(String(20), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "receiver_role IN ('customer', 'provider')",
            name="ck_notifications_receiver_role",
        ),
        Index("ix_notifications_receiver", "receiver_role", "receiver_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<NotificationRecord {self.id}: {self.receiver_role}:{self.receiver_id} "
            f"booking={self.booking_id} read={self.is_read}>"
        )
