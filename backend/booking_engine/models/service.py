# backend/booking_engine/models/service.py
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


class Service(Base):
    """A bookable offering listed by one provider (e.g. catering, decor)."""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_id = Column(
        Integer, ForeignKey("service_providers.id", ondelete="CASCADE"), nullable=True, index=True
    )
    service_name = Column(String(150), nullable=False)
    category = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)

    provider = relationship("ServiceProvider", backref="services")

    __table_args__ = (CheckConstraint("price >= 0", name="ck_services_price_non_negative"),)

    def __repr__(self) -> str:
        return f"<Service {self.id}: {self.service_name} provider={self.provider_id}>"
