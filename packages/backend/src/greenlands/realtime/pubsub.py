"""Redis connection and the live alert channel.

One client is opened at startup and shared by the rate limiter, the
health check and the support-desk feed. Published alerts are not
persisted here: each one is also written as a Notification row, so a
dashboard that was offline catches up through the notifications API.

Channels are named ``greenlands:events:<audience>``; new support tickets
go to the ``support`` audience, which admin and staff sockets subscribe to.
"""

import json
from typing import Any, Optional

import redis.asyncio as aioredis
import structlog

from greenlands.config import settings

logger = structlog.get_logger()

SUPPORT_AUDIENCE = "support"

_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Connect and ping; raises if the server cannot be reached."""
    global _redis
    client = aioredis.from_url(settings.redis_url, decode_responses=True)
    await client.ping()
    _redis = client
    return client


async def close_redis() -> None:
    global _redis
    client, _redis = _redis, None
    if client is not None:
        await client.aclose()


def get_redis() -> aioredis.Redis:
    if _redis is None:
        raise RuntimeError("Redis is not connected")
    return _redis


def channel_for(audience: str) -> str:
    return f"greenlands:events:{audience}"


async def publish_event(
    audience: str,
    event_type: str,
    data: dict[str, Any],
) -> bool:
    """Broadcast ``{"type": event_type, **data}`` to an audience.

    At-most-once: with no subscribers the message is simply dropped. A
    missing or failing Redis is logged and reported as False rather than
    failing the request that raised the alert.
    """
    message = json.dumps({"type": event_type, **data}, default=str)
    try:
        await get_redis().publish(channel_for(audience), message)
    except Exception as e:
        logger.warning("realtime.publish_skipped", event_type=event_type, error=str(e))
        return False
    return True
