"""
User-facing notifications.

Every caught failure and every completed user action is surfaced here; the UI
drains the queue and shows each entry as a toast.
"""
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List, Optional

from pydantic import BaseModel

from grocerypos.core.config import settings

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    title: str
    description: str
    variant: str = "default"  # "default" | "destructive"
    created_at: datetime


class Notifier:
    """Bounded queue of pending notifications for the register's UI."""

    def __init__(self, maxlen: Optional[int] = None):
        self._queue: Deque[Notification] = deque(maxlen=maxlen or settings.notification_buffer_size)

    def notify(self, title: str, description: str, variant: str = "default") -> Notification:
        notification = Notification(
            title=title,
            description=description,
            variant=variant,
            created_at=datetime.now(timezone.utc),
        )
        self._queue.append(notification)
        if variant == "destructive":
            logger.warning(f"Notification: {title} - {description}")
        else:
            logger.info(f"Notification: {title} - {description}")
        return notification

    def success(self, description: str) -> Notification:
        return self.notify("Success", description)

    def error(self, description: str) -> Notification:
        return self.notify("Error", description, variant="destructive")

    def pending(self) -> List[Notification]:
        return list(self._queue)

    def drain(self) -> List[Notification]:
        """Return and clear all pending notifications."""
        items = list(self._queue)
        self._queue.clear()
        return items
