from .base import TTLSessionBackend
from .memory_backend import InMemoryBackend
from .redis_backend import RedisBackend

__all__ = [
    "TTLSessionBackend",
    "InMemoryBackend",
    "RedisBackend",
]
