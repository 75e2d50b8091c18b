"""Redis client for the comment-thread cache.

The cache is optional: when Redis is unreachable at startup the application
runs without it and every comment read goes to Cassandra.
"""

import redis.asyncio as redis

from src.config import get_settings
from src.core.logging import get_logger


logger = get_logger(__name__)


class RedisConnection:
    """Redis client lifecycle, shared by the application."""

    _client: redis.Redis | None = None

    @classmethod
    async def connect(cls) -> redis.Redis:
        """Create the client and check it answers a PING.

        Raises:
            redis.ConnectionError: If Redis is unreachable (no client is kept)
        """
        if cls._client is not None:
            return cls._client

        settings = get_settings()
        client = redis.from_url(
            settings.redis_url,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            retry_on_timeout=settings.redis_retry_on_timeout,
            decode_responses=True,
        )

        try:
            await client.ping()
        except redis.ConnectionError as e:
            logger.warning("comment_cache_unreachable", error=str(e))
            await client.aclose()
            raise

        logger.info("comment_cache_connected", url=settings.redis_url)
        cls._client = client
        return client

    @classmethod
    async def disconnect(cls) -> None:
        """Close the client if one is open."""
        if cls._client is None:
            return

        await cls._client.aclose()
        cls._client = None
        logger.info("comment_cache_disconnected")


async def init_redis() -> redis.Redis:
    """Connect the comment cache client."""
    return await RedisConnection.connect()


async def shutdown_redis() -> None:
    """Close the comment cache client."""
    await RedisConnection.disconnect()
