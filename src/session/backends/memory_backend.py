import logging
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi_sessions.backends.session_backend import BackendError

from .base import TTLSessionBackend
from ..models import SessionData

logger = logging.getLogger(__name__)


class InMemoryBackend(TTLSessionBackend):
    """
    Process-local TTL store for development and tests.

    Mirrors Redis expiry semantics: each key carries its own deadline and an
    expired key is indistinguishable from one that never existed. Expired
    entries are evicted lazily when they are next accessed.
    """

    def __init__(self, key_prefix: str = "sess", clock: Callable[[], float] = time.time):
        super().__init__(key_prefix=key_prefix)
        self.clock = clock
        self.data: Dict[str, Tuple[SessionData, float]] = {}

    def _live_entry(self, key: str) -> Optional[Tuple[SessionData, float]]:
        entry = self.data.get(key)
        if entry is None:
            return None
        if entry[1] <= self.clock():
            self.data.pop(key, None)
            logger.debug(f"Evicted expired key {key[:len(self.key_prefix) + 9]}...")
            return None
        return entry

    def ttl(self, session_id: str) -> Optional[float]:
        entry = self._live_entry(self.key_for(session_id))
        if entry is None:
            return None
        return entry[1] - self.clock()

    async def create(self, session_id: str, data: SessionData, ttl: int) -> None:
        self.data[self.key_for(session_id)] = (data, self.clock() + max(int(ttl), 1))

    async def read(self, session_id: str) -> Optional[SessionData]:
        entry = self._live_entry(self.key_for(session_id))
        return entry[0] if entry else None

    async def update(self, session_id: str, data: SessionData, ttl: int) -> None:
        key = self.key_for(session_id)
        if self._live_entry(key) is None:
            raise BackendError("Session does not exist, cannot update")
        self.data[key] = (data, self.clock() + max(int(ttl), 1))

    async def delete(self, session_id: str) -> bool:
        key = self.key_for(session_id)
        existed = self._live_entry(key) is not None
        self.data.pop(key, None)
        return existed

    async def touch(self, session_id: str, ttl: int) -> bool:
        key = self.key_for(session_id)
        entry = self._live_entry(key)
        if entry is None:
            return False
        self.data[key] = (entry[0], self.clock() + max(int(ttl), 1))
        return True
