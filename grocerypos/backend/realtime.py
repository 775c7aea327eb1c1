"""
Row-change notifications over Redis pub/sub.

Every table write that should be observable publishes a JSON payload
``{"type", "table", "new", "old"}`` on a channel scoped to a single row.
"""
import asyncio
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from grocerypos.backend.errors import BackendError

logger = logging.getLogger(__name__)

RowChangeCallback = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]


def channel_for(table: str, row_id: str) -> str:
    return f"realtime:{table}:{row_id}"


class RealtimeSubscription:
    """Listener task for one row channel. ``unsubscribe`` is idempotent."""

    def __init__(self, redis_client, channel: str, callback: RowChangeCallback, poll_timeout: float = 1.0):
        self._redis = redis_client
        self.channel = channel
        self._callback = callback
        self._poll_timeout = poll_timeout
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        self._pubsub = self._redis.pubsub()
        await self._pubsub.subscribe(self.channel)
        self._task = asyncio.create_task(self._listen())
        logger.info(f"Subscribed to {self.channel}")

    async def _listen(self) -> None:
        try:
            while not self._closed:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=self._poll_timeout
                )
                if message is None:
                    continue
                await self.dispatch(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Realtime listener for {self.channel} stopped: {e}", exc_info=True)

    async def dispatch(self, message: Dict[str, Any]) -> None:
        """Decode one pub/sub message and hand the payload to the callback."""
        if self._closed or message.get("type") != "message":
            return
        try:
            payload = json.loads(message["data"])
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed payload on {self.channel}: {e}")
            return
        try:
            result = self._callback(payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Row change handler for {self.channel} failed: {e}", exc_info=True)

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True

        # Called from inside our own callback: the loop exits on its own
        if self._task is not None and self._task is not asyncio.current_task():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe(self.channel)
                await self._pubsub.aclose()
            except Exception as e:
                logger.warning(f"Failed to close subscription {self.channel}: {e}")
        logger.info(f"Unsubscribed from {self.channel}")


class RealtimeClient:
    """Publishes and subscribes to row-change notifications."""

    def __init__(self, redis_client):
        self._redis = redis_client

    async def publish_row_change(
        self,
        table: str,
        row_id: str,
        new: Optional[Dict[str, Any]],
        old: Optional[Dict[str, Any]] = None,
        event: str = "UPDATE",
    ) -> bool:
        payload = {"type": event, "table": table, "new": new, "old": old}
        try:
            await self._redis.publish(channel_for(table, row_id), json.dumps(payload, default=str))
            return True
        except Exception as e:
            logger.error(f"Failed to publish {event} for {table}:{row_id}: {e}")
            return False

    async def subscribe_row(self, table: str, row_id: str, callback: RowChangeCallback) -> RealtimeSubscription:
        subscription = RealtimeSubscription(self._redis, channel_for(table, row_id), callback)
        try:
            await subscription.start()
        except Exception as e:
            logger.error(f"Failed to subscribe to {table}:{row_id}: {e}")
            raise BackendError("Failed to subscribe to row changes") from e
        return subscription

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except Exception as e:
            logger.warning(f"Failed to close realtime client: {e}")
