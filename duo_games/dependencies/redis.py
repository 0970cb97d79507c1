import logging

from upstash_redis.asyncio import Redis

from duo_games.config import Settings, get_settings

logger = logging.getLogger(__name__)

# One client per process; every GameStore shares it unless handed its own
_store_client: Redis | None = None


def build_redis_client(settings: Settings) -> Redis:
    """Create an Upstash REST client for the configured database."""
    logger.info("Connecting game store to Upstash Redis")
    logger.debug("Upstash REST URL: %s", settings.UPSTASH_REDIS_REST_URL)
    return Redis(
        url=settings.UPSTASH_REDIS_REST_URL,
        token=settings.UPSTASH_REDIS_REST_TOKEN,
    )


def get_redis_client(settings: Settings | None = None) -> Redis:
    """Get the shared async Redis client, creating it on first use."""
    global _store_client
    if _store_client is None:
        _store_client = build_redis_client(settings or get_settings())
    return _store_client


async def close_redis_client() -> None:
    """Close the shared client so the next caller starts a fresh one."""
    global _store_client
    client, _store_client = _store_client, None
    if client is not None:
        await client.close()
        logger.info("Game store Redis client closed")
