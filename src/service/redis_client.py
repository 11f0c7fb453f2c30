import redis.asyncio as aioredis
import logging

logger = logging.getLogger('session_auth.service.redis_client')

redis_clients: dict[str, aioredis.Redis] = {}


def get_redis_client(
    redis_url: str,
    socket_timeout: float = 2.0,
    socket_connect_timeout: float = 2.0,
) -> aioredis.Redis:
    """
    Return the shared client for ``redis_url``, creating it on first use.

    No connection is opened here; the pool connects lazily on the first
    command. Every command is bounded by the socket timeouts.
    """
    if redis_url not in redis_clients:
        logger.info(f"Creating new Redis client (timeout={socket_timeout}s, connect_timeout={socket_connect_timeout}s)")
        redis_clients[redis_url] = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_connect_timeout,
        )

    return redis_clients[redis_url]


async def close_redis_clients() -> None:
    while redis_clients:
        _, client = redis_clients.popitem()
        await client.aclose()
