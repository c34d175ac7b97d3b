"""
Live booking notifications over WebSocket.

The gateway authenticates the upgrade request and forwards the identity
headers. Messages flow server to client only; anything the client sends is
ignored and only keeps the connection alive.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from ..api.dependencies import principal_from_headers
from ..core.constants import SUBJECT_ID_HEADER, SUBJECT_ROLE_HEADER
from ..core.exceptions import UnauthorizedException
from ..services.push_notification_service import WebSocketPushConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.websocket("/ws/notifications")
async def booking_notifications(websocket: WebSocket) -> None:
    try:
        principal = principal_from_headers(
            websocket.headers.get(SUBJECT_ID_HEADER), websocket.headers.get(SUBJECT_ROLE_HEADER)
        )
    except UnauthorizedException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    registry = websocket.app.state.runtime.push_registry
    connection = WebSocketPushConnection(websocket, asyncio.get_running_loop())
    registry.register(principal.role, principal.subject_id, connection)
    logger.info("Notification socket opened for %s", principal.identifier)
    try:
        # Clients wait for this before relying on pushes
        await websocket.send_json(
            {"type": "connected", "role": principal.role.value, "subject_id": principal.subject_id}
        )
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Notification socket closed for %s", principal.identifier)
    finally:
        registry.unregister(principal.role, principal.subject_id, connection)
