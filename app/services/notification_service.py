"""
==============================================================================
Notification Service Module
==============================================================================

Transient user-visible notifications ("toasts").

Every notification is kept in a bounded history and pushed to each live
subscriber queue (one per WebSocket connection).

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, List, Set

from pydantic import BaseModel, Field


# Module logger
logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    """One toast message."""

    message: str
    level: NotificationLevel = NotificationLevel.INFO
    code: str = "INFO"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationCenter:
    """
    Fan-out of notifications to subscribers.

    Attributes:
        _history: Most recent notifications, oldest first
        _subscribers: Queues of connected listeners
    """

    def __init__(self, history_size: int = 20) -> None:
        self._history: Deque[Notification] = deque(maxlen=history_size)
        self._subscribers: Set[asyncio.Queue] = set()

    def publish(
        self,
        message: str,
        level: NotificationLevel = NotificationLevel.INFO,
        code: str = "INFO"
    ) -> Notification:
        """Record a notification and deliver it to every subscriber."""
        notification = Notification(message=message, level=level, code=code)
        self._history.append(notification)

        for queue in self._subscribers:
            queue.put_nowait(notification)

        logger.debug(f"Notification [{code}]: {message}")
        return notification

    def subscribe(self) -> asyncio.Queue:
        """Register a listener queue."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    def recent(self) -> List[Notification]:
        """Recent notifications, oldest first."""
        return list(self._history)

    @property
    def latest(self):
        return self._history[-1] if self._history else None
