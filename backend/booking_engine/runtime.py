"""
Process-wide collaborators with an explicit lifecycle.

The engine, the email worker pool and the push registry are built once at
application startup, stored on `app.state.runtime`, and closed at shutdown.
Tests build a runtime with their own collaborators injected.
"""

from dataclasses import dataclass, field
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .core.config import Settings
from .database import create_db_engine, create_session_factory, init_db
from .services.email import EmailService, EmailTransport
from .services.email_worker_pool import EmailWorkerPool
from .services.notification_dispatcher import NotificationDispatcher
from .services.push_notification_service import PushConnectionRegistry
from .services.temporal_rules import Clock, utc_now
from .services.template_service import TemplateService

logger = logging.getLogger(__name__)


@dataclass
class BookingRuntime:
    settings: Settings
    session_factory: sessionmaker
    push_registry: PushConnectionRegistry
    email_pool: EmailWorkerPool
    dispatcher: NotificationDispatcher
    clock: Clock = field(default=utc_now)
    engine: Optional[Engine] = None
    owns_engine: bool = False

    def close(self) -> None:
        self.email_pool.shutdown(timeout=self.settings.email_shutdown_timeout_seconds)
        if self.engine is not None and self.owns_engine:
            self.engine.dispose()
            logger.info("Database engine disposed")


def build_runtime(
    settings: Settings,
    *,
    session_factory: Optional[sessionmaker] = None,
    push_registry: Optional[PushConnectionRegistry] = None,
    email_transport: Optional[EmailTransport] = None,
    clock: Optional[Clock] = None,
) -> BookingRuntime:
    engine: Optional[Engine] = None
    owns_engine = False
    if session_factory is None:
        engine = create_db_engine(settings.database_url, echo=settings.database_echo)
        init_db(engine)
        session_factory = create_session_factory(engine)
        owns_engine = True

    push_registry = push_registry or PushConnectionRegistry()
    email_pool = EmailWorkerPool(
        max_workers=settings.email_worker_pool_size,
        queue_limit=settings.email_worker_queue_limit,
    )
    email_service = EmailService(settings, TemplateService(settings), transport=email_transport)
    dispatcher = NotificationDispatcher(settings, push_registry, email_service, email_pool)

    return BookingRuntime(
        settings=settings,
        session_factory=session_factory,
        push_registry=push_registry,
        email_pool=email_pool,
        dispatcher=dispatcher,
        clock=clock or utc_now,
        engine=engine,
        owns_engine=owns_engine,
    )
