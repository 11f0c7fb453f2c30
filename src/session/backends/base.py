from abc import abstractmethod
from typing import Optional

from fastapi_sessions.backends.session_backend import SessionBackend

from ..models import SessionData


class TTLSessionBackend(SessionBackend[str, SessionData]):
    """
    Session backend whose records expire on their own.

    Extends the fastapi-sessions contract with a per-write ``ttl`` and a
    ``touch`` operation. Every record lives under ``<prefix>:<session_id>``.
    """

    def __init__(self, key_prefix: str = "sess"):
        self.key_prefix = key_prefix

    def key_for(self, session_id: str) -> str:
        return f"{self.key_prefix}:{session_id}"

    @abstractmethod
    async def create(self, session_id: str, data: SessionData, ttl: int) -> None:
        """Store ``data`` with an absolute expiry ``ttl`` seconds from now, overwriting."""

    @abstractmethod
    async def read(self, session_id: str) -> Optional[SessionData]:
        """Return the record, or None when it is absent or expired."""

    @abstractmethod
    async def update(self, session_id: str, data: SessionData, ttl: int) -> None:
        """Write ``data`` through, expiring ``ttl`` seconds from now."""

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove the record. Returns False if there was nothing to remove."""

    @abstractmethod
    async def touch(self, session_id: str, ttl: int) -> bool:
        """Renew the expiry of an existing record."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    # Names used by the lifecycle manager
    async def load(self, session_id: str) -> Optional[SessionData]:
        return await self.read(session_id)

    async def save(self, session_id: str, data: SessionData, ttl: int) -> None:
        await self.update(session_id, data, ttl)

    async def destroy(self, session_id: str) -> bool:
        return await self.delete(session_id)
