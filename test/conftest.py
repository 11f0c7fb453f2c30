import sys
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
import pytest
import pytest_asyncio
import logging

from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

# Add the source directory to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key")

from auth.users import StaticUserDirectory
from session.backends import InMemoryBackend
from session.codec import SessionTokenCodec
from session.manager import SessionLifecycleManager
from session.transport import SessionCookieTransport
from service.config import AppConfig
from service.service import create_app

TEST_SECRET = "test-secret-key"
TEST_TTL = 3600


class FakeClock:
    """Manually advanced time source shared by the store and the manager."""

    def __init__(self, start: float = None):
        self.now = float(int(time.time())) if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.INFO)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_backend(clock):
    return InMemoryBackend(clock=clock)


@pytest.fixture
def directory():
    return StaticUserDirectory()


@pytest.fixture
def app_config():
    return AppConfig(secret_key=TEST_SECRET, session_backend="memory", session_ttl_seconds=TEST_TTL)


@pytest.fixture
def session_manager(app_config, memory_backend, directory, clock):
    return SessionLifecycleManager(
        codec=SessionTokenCodec(TEST_SECRET, salt=app_config.cookie_name, max_age=TEST_TTL),
        backend=memory_backend,
        directory=directory,
        transport=SessionCookieTransport(app_config.cookie_name, app_config.cookie_params()),
        ttl_seconds=TEST_TTL,
        clock=clock,
    )


@pytest.fixture
def app(app_config, memory_backend, clock):
    return create_app(app_config, backend=memory_backend, clock=clock)


@asynccontextmanager
async def _running(app):
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            yield client


@pytest.fixture
def client_for():
    """Factory for tests that need an app built with non-default settings."""
    return _running


@pytest_asyncio.fixture
async def client(app):
    async with _running(app) as client:
        yield client
