# backend/booking_engine/main.py
"""
Application factory for the booking engine.

`create_app()` wires routes and error handlers; the lifespan builds the
runtime collaborators (database engine, email worker pool, push registry,
notification dispatcher) at startup and drains/closes them at shutdown.
"""

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from . import __version__
from .core.config import Settings, get_settings
from .core.constants import BRAND_NAME
from .core.exceptions import DomainException, ServiceException
from .routes import bookings, monitoring, notifications_ws
from .runtime import build_runtime
from .services.email import EmailTransport
from .services.push_notification_service import PushConnectionRegistry
from .services.temporal_rules import Clock

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    missing = [
        ".".join(str(part) for part in error["loc"] if part != "body")
        for error in errors
        if error.get("type") == "missing"
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    first = errors[0] if errors else {}
    if first.get("type") == "json_invalid":
        return "Invalid request body"
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "path"))
    message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    if isinstance(exc, ServiceException):
        logger.error(f"Service error on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.code} on {request.method} {request.url.path}: {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _validation_message(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    session_factory: Optional[sessionmaker] = None,
    push_registry: Optional[PushConnectionRegistry] = None,
    email_transport: Optional[EmailTransport] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        runtime = build_runtime(
            settings,
            session_factory=session_factory,
            push_registry=push_registry,
            email_transport=email_transport,
            clock=clock,
        )
        app.state.runtime = runtime
        logger.info(f"{BRAND_NAME} booking engine started ({settings.environment})")
        try:
            yield
        finally:
            runtime.close()
            logger.info("Booking engine stopped")

    app = FastAPI(
        title=f"{BRAND_NAME} Booking Engine",
        version=__version__,
        lifespan=lifespan,
    )

    handlers: Any = {
        DomainException: domain_exception_handler,
        RequestValidationError: request_validation_handler,
        Exception: unhandled_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(bookings.router)
    app.include_router(notifications_ws.router)
    app.include_router(monitoring.router)
    return app
