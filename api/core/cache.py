"""
Redis client wiring.

The client owns its own connection pool and is safe to share between
concurrent requests.
"""

from __future__ import annotations

import redis.asyncio as redis

from . import settings


def create_client() -> redis.Redis:
    return redis.from_url(settings.redis_url(), decode_responses=True)


async def close_client(client: redis.Redis) -> None:
    await client.aclose()
