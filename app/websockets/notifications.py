"""
==============================================================================
Notifications WebSocket Module
==============================================================================

Pushes the scan screen's toasts to connected clients.

Protocol:
---------
1. Client connects to /ws/notifications
2. Server replays recent notifications, oldest first
3. Server sends every new notification as it is published
4. Client may send {"type": "stop"} to close the stream

Message format:
    {"type": "notification", "code": "...", "level": "error",
     "message": "...", "timestamp": "..."}

==============================================================================
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.core.dependencies import get_scan_controller
from app.services import Notification, NotificationCenter, ScanController


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class NotificationWebSocketHandler:
    """
    Handler for one notification stream.

    Manages the lifecycle of the connection:
    - History replay
    - Forwarding new notifications
    - Client stop requests and disconnects
    """

    def __init__(self, websocket: WebSocket, notifications: NotificationCenter):
        self._websocket = websocket
        self._notifications = notifications

    async def send_notification(self, notification: Notification) -> None:
        """Send one notification to the client."""
        payload = notification.model_dump(mode="json")
        payload["type"] = "notification"
        await self._websocket.send_json(payload)

    async def _forward(self, queue: asyncio.Queue) -> None:
        while True:
            notification = await queue.get()
            await self.send_notification(notification)

    async def _listen(self) -> None:
        while True:
            data = await self._websocket.receive_json()
            if data.get("type") == "stop":
                logger.info("🛑 Client requested stop")
                return

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Notification WebSocket connected")

        queue = self._notifications.subscribe()
        forward = asyncio.create_task(self._forward(queue))

        try:
            for notification in self._notifications.recent():
                await self.send_notification(notification)

            await self._listen()

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        finally:
            forward.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await forward
            self._notifications.unsubscribe(queue)
            logger.info("✅ Notification WebSocket closed")


@router.websocket("/ws/notifications")
async def websocket_notifications(
    websocket: WebSocket,
    controller: ScanController = Depends(get_scan_controller)
):
    """Stream user-visible notifications."""
    handler = NotificationWebSocketHandler(websocket, controller.notifications)
    await handler.run()
