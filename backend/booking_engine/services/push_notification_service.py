# backend/booking_engine/services/push_notification_service.py
"""
Real-time push delivery to connected customers and providers.

Delivery is at-most-once and best-effort: a receiver with no open
connection simply misses the push (the persisted NotificationRecord is the
durable copy). A connection that fails to send is dropped.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
import threading
from typing import Any, Dict, Optional, Protocol, Set, Tuple

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from ..core.enums import ActorRole, NotificationChannel
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

ConnectionKey = Tuple[ActorRole, int]


class PushConnection(Protocol):
    @property
    def is_open(self) -> bool: ...

    def send(self, payload: Dict[str, Any]) -> None: ...


class WebSocketPushConnection:
    """
    Adapts a FastAPI WebSocket for use from worker threads.

    `send` schedules the write on the WebSocket's event loop and returns
    immediately; the calling request thread never waits for socket I/O.
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self.websocket = websocket
        self.loop = loop

    @property
    def is_open(self) -> bool:
        return (
            not self.loop.is_closed()
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, payload: Dict[str, Any]) -> None:
        future = asyncio.run_coroutine_threadsafe(self.websocket.send_json(payload), self.loop)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Any) -> None:
        exc = future.exception() if not future.cancelled() else None
        if exc is not None:
            logger.debug("WebSocket push failed after scheduling: %s", exc)


class PushConnectionRegistry:
    """Thread-safe map of live connections keyed by (role, subject id)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: Dict[ConnectionKey, Set[PushConnection]] = {}

    def register(self, role: ActorRole, subject_id: int, connection: PushConnection) -> None:
        with self._lock:
            self._connections.setdefault((role, subject_id), set()).add(connection)
        logger.debug(
            "Push connection registered for %s:%s (%s open)", role.value, subject_id, self.connection_count()
        )

    def unregister(self, role: ActorRole, subject_id: int, connection: PushConnection) -> None:
        with self._lock:
            connections = self._connections.get((role, subject_id))
            if not connections:
                return
            connections.discard(connection)
            if not connections:
                del self._connections[(role, subject_id)]
        logger.debug("Push connection removed for %s:%s", role.value, subject_id)

    def connections_for(self, role: ActorRole, subject_id: int) -> Set[PushConnection]:
        with self._lock:
            return set(self._connections.get((role, subject_id), ()))

    def connection_count(self) -> int:
        with self._lock:
            return sum(len(connections) for connections in self._connections.values())

    def notify(
        self,
        receiver_id: int,
        message: str,
        booking_id: Optional[int],
        role: ActorRole = ActorRole.CUSTOMER,
    ) -> None:
        """
        Push a message to every open connection of the receiver.

        Never raises. Missing connections are ignored; connections that are
        closed or fail on send are removed.
        """
        connections = self.connections_for(role, receiver_id)
        if not connections:
            logger.debug("No live push connection for %s:%s", role.value, receiver_id)
            prometheus_metrics.record_notification(NotificationChannel.PUSH.value, "skipped")
            return

        payload = {
            "type": "booking_update",
            "booking_id": booking_id,
            "message": message,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        delivered = False
        for connection in connections:
            if not connection.is_open:
                self.unregister(role, receiver_id, connection)
                continue
            try:
                connection.send(payload)
                delivered = True
            except Exception as e:
                logger.warning(
                    "Push to %s:%s failed, dropping connection: %s", role.value, receiver_id, e
                )
                self.unregister(role, receiver_id, connection)

        prometheus_metrics.record_notification(
            NotificationChannel.PUSH.value, "sent" if delivered else "skipped"
        )
