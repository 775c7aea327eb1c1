"""
Tests for row-change notifications over Redis pub/sub.
"""
import asyncio
import json
from unittest.mock import AsyncMock, Mock

import pytest

from grocerypos.backend.errors import BackendError
from grocerypos.backend.realtime import RealtimeClient, RealtimeSubscription, channel_for


def make_redis(messages=()):
    """Redis double whose pubsub yields ``messages`` and then idles."""
    queue = list(messages)

    async def get_message(ignore_subscribe_messages=True, timeout=1.0):
        await asyncio.sleep(0.01)
        return queue.pop(0) if queue else None

    pubsub = Mock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()
    pubsub.get_message = get_message

    redis = Mock()
    redis.pubsub = Mock(return_value=pubsub)
    redis.publish = AsyncMock(return_value=1)
    redis.aclose = AsyncMock()
    return redis, pubsub


def message(payload):
    return {"type": "message", "channel": "realtime:profiles:u1", "data": json.dumps(payload)}


def test_channel_name():
    assert channel_for("profiles", "u1") == "realtime:profiles:u1"


@pytest.mark.asyncio
async def test_publish_row_change():
    redis, _ = make_redis()
    client = RealtimeClient(redis)

    assert await client.publish_row_change("profiles", "u1", new={"id": "u1"}, old={"id": "u1"})

    channel, data = redis.publish.await_args.args
    assert channel == "realtime:profiles:u1"
    assert json.loads(data) == {"type": "UPDATE", "table": "profiles", "new": {"id": "u1"}, "old": {"id": "u1"}}


@pytest.mark.asyncio
async def test_publish_failure_is_reported_not_raised():
    redis, _ = make_redis()
    redis.publish.side_effect = ConnectionError("redis down")

    assert await RealtimeClient(redis).publish_row_change("profiles", "u1", new={}) is False


@pytest.mark.asyncio
async def test_dispatch_decodes_payload():
    callback = AsyncMock()
    subscription = RealtimeSubscription(Mock(), "realtime:profiles:u1", callback)

    await subscription.dispatch(message({"type": "UPDATE", "new": {"id": "u1"}}))

    callback.assert_awaited_once_with({"type": "UPDATE", "new": {"id": "u1"}})


@pytest.mark.asyncio
async def test_dispatch_ignores_malformed_and_non_message_events():
    callback = AsyncMock()
    subscription = RealtimeSubscription(Mock(), "realtime:profiles:u1", callback)

    await subscription.dispatch({"type": "message", "data": "not json"})
    await subscription.dispatch({"type": "subscribe", "data": 1})

    callback.assert_not_awaited()


@pytest.mark.asyncio
async def test_callback_errors_do_not_escape():
    callback = AsyncMock(side_effect=RuntimeError("boom"))
    subscription = RealtimeSubscription(Mock(), "realtime:profiles:u1", callback)

    await subscription.dispatch(message({"type": "UPDATE"}))

    callback.assert_awaited_once()


@pytest.mark.asyncio
async def test_subscription_delivers_and_unsubscribes():
    received = asyncio.Event()
    payloads = []

    async def callback(payload):
        payloads.append(payload)
        received.set()

    redis, pubsub = make_redis([message({"type": "UPDATE", "new": {"id": "u1"}})])
    subscription = await RealtimeClient(redis).subscribe_row("profiles", "u1", callback)

    await asyncio.wait_for(received.wait(), timeout=2)
    await subscription.unsubscribe()
    await subscription.unsubscribe()

    assert payloads == [{"type": "UPDATE", "new": {"id": "u1"}}]
    pubsub.subscribe.assert_awaited_once_with("realtime:profiles:u1")
    pubsub.unsubscribe.assert_awaited_once_with("realtime:profiles:u1")
    assert subscription.closed


@pytest.mark.asyncio
async def test_unsubscribe_from_inside_callback():
    done = asyncio.Event()
    holder = {}

    async def callback(payload):
        await holder["subscription"].unsubscribe()
        done.set()

    redis, pubsub = make_redis([message({"type": "UPDATE"})])
    holder["subscription"] = await RealtimeClient(redis).subscribe_row("profiles", "u1", callback)

    await asyncio.wait_for(done.wait(), timeout=2)

    assert holder["subscription"].closed
    pubsub.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_subscribe_failure_raises_backend_error():
    redis, pubsub = make_redis()
    pubsub.subscribe.side_effect = ConnectionError("redis down")

    with pytest.raises(BackendError):
        await RealtimeClient(redis).subscribe_row("profiles", "u1", AsyncMock())
