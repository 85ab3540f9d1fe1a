"""Redis connection — backs the rate limiter.

Redis is optional. The lifespan tries to connect when TASKFLOW_REDIS_URL is
set and stores the client on app.state.redis; when it is unset or
unreachable the attribute stays None and rate limiting is skipped.
"""

from typing import Optional

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger()


async def connect_redis(url: str) -> Optional[aioredis.Redis]:
    """Open a Redis client and verify it answers, or return None."""
    if not url:
        return None
    client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.warning("taskflow.redis_unavailable", url=url, error=str(e))
        await client.aclose()
        return None
    logger.info("taskflow.redis_connected", url=url)
    return client


async def close_redis(client: Optional[aioredis.Redis]) -> None:
    if client is not None:
        await client.aclose()
