from typing import NoReturn, Optional
import logging

import redis.asyncio as aioredis
from redis import RedisError, ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError
from fastapi_sessions.backends.session_backend import BackendError
from pydantic import ValidationError

from .base import TTLSessionBackend
from ..errors import StoreUnavailable
from ..models import SessionData, dump_session_data, load_session_data

logger = logging.getLogger(__name__)


class RedisBackend(TTLSessionBackend):
    def __init__(self, redis_client: aioredis.Redis, key_prefix: str = "sess"):
        """Initialize the Redis backend with an async Redis client."""
        super().__init__(key_prefix=key_prefix)
        self.redis_client = redis_client

    def _handle_redis_error(self, operation: str, session_id: str, error: Exception) -> NoReturn:
        """Centralized error handling for Redis operations."""
        if isinstance(error, RedisTimeoutError):
            logger.error(f"Redis timed out during {operation} for session {session_id[:8]}...: {error}")
            raise StoreUnavailable(operation) from error
        elif isinstance(error, RedisConnectionError):
            logger.error(f"Redis connection failed during {operation} for session {session_id[:8]}...: {error}")
            raise StoreUnavailable(operation) from error
        elif isinstance(error, RedisError):
            logger.error(f"Redis error during {operation} for session {session_id[:8]}...: {error}")
            raise StoreUnavailable(operation) from error
        else:
            logger.error(f"Unexpected error during {operation} for session {session_id[:8]}...: {error}")
            raise BackendError(f"Unexpected error during {operation}") from error

    async def create(self, session_id: str, data: SessionData, ttl: int) -> None:
        try:
            await self.redis_client.set(self.key_for(session_id), dump_session_data(data), ex=max(int(ttl), 1))
            logger.debug(f"Session {session_id[:8]}... created with ttl={ttl}s")
        except Exception as e:
            self._handle_redis_error("session creation", session_id, e)

    async def update(self, session_id: str, data: SessionData, ttl: int) -> None:
        try:
            # xx=True: never resurrect a record that expired since it was read
            written = await self.redis_client.set(
                self.key_for(session_id), dump_session_data(data), ex=max(int(ttl), 1), xx=True
            )
        except Exception as e:
            self._handle_redis_error("session update", session_id, e)

        if not written:
            raise BackendError("Session does not exist, cannot update")
        logger.debug(f"Session {session_id[:8]}... updated with ttl={ttl}s")

    async def read(self, session_id: str) -> Optional[SessionData]:
        try:
            raw = await self.redis_client.get(self.key_for(session_id))
        except Exception as e:
            self._handle_redis_error("session read", session_id, e)

        if not raw:
            return None

        try:
            return load_session_data(raw)
        except ValidationError as e:
            logger.error(f"Invalid session data format for session {session_id[:8]}...: {e}")
            raise BackendError("Corrupted session data")

    async def delete(self, session_id: str) -> bool:
        try:
            deleted_count = await self.redis_client.delete(self.key_for(session_id))
        except Exception as e:
            self._handle_redis_error("session deletion", session_id, e)

        if deleted_count == 0:
            logger.debug(f"Session {session_id[:8]}... was already gone")
            return False
        logger.debug(f"Session {session_id[:8]}... deleted successfully")
        return True

    async def touch(self, session_id: str, ttl: int) -> bool:
        try:
            return bool(await self.redis_client.expire(self.key_for(session_id), max(int(ttl), 1)))
        except Exception as e:
            self._handle_redis_error("session touch", session_id, e)

    async def ping(self) -> bool:
        try:
            return bool(await self.redis_client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
