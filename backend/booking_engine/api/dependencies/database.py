# backend/booking_engine/api/dependencies/database.py
"""
Database-related dependencies.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from ...runtime import BookingRuntime


def get_runtime(request: Request) -> BookingRuntime:
    return request.app.state.runtime


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields:
        Database session that will be closed after use
    """
    db = get_runtime(request).session_factory()
    try:
        yield db
    finally:
        db.close()
