"""
Redis client configuration for row-change notifications.
"""
import logging
from typing import Optional

import redis
import redis.asyncio as aioredis

from grocerypos.core.config import settings

logger = logging.getLogger(__name__)

# Sync client, used for health checks
redis_client = redis.Redis.from_url(
    settings.redis_url,
    db=settings.redis_db,
    decode_responses=True,
    socket_connect_timeout=5,
    socket_timeout=5,
    retry_on_timeout=True,
)


def check_redis_connection() -> bool:
    """Check if Redis connection is working."""
    if not settings.realtime_enabled:
        return True
    try:
        redis_client.ping()
        return True
    except Exception as e:
        logger.error(f"Redis connection check failed: {e}")
        return False


def create_async_redis() -> Optional[aioredis.Redis]:
    """Create the asyncio client used for pub/sub, or None when realtime is disabled."""
    if not settings.realtime_enabled:
        return None
    return aioredis.Redis.from_url(
        settings.redis_url,
        db=settings.redis_db,
        decode_responses=True,
        socket_connect_timeout=5,
    )
