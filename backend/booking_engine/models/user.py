# backend/booking_engine/models/user.py
"""
Actor models.

Customers and service providers are managed by the account subsystem; the
booking engine only reads the contact fields it needs for notifications.
"""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ..database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Customer {self.id}: {self.email}>"


class ServiceProvider(Base):
    __tablename__ = "service_providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_name = Column(String(150), nullable=False)
    owner_name = Column(String(120), nullable=True)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<ServiceProvider {self.id}: {self.business_name}>"
