"""
Composition root of the session service.

Everything with process-wide lifetime (config, Redis client, session store,
token codec, user directory, lifecycle manager) is built here and hung off
``app.state``. Redis clients are shared through ``redis_client``.
"""
import logging
from typing import Callable, Optional
import time

from fastapi import FastAPI

from auth.users import StaticUserDirectory, UserDirectory
from session.backends import InMemoryBackend, RedisBackend, TTLSessionBackend
from session.codec import SessionTokenCodec
from session.manager import SessionLifecycleManager
from session.transport import SessionCookieTransport

from .config import AppConfig, load_config
from .lifecycle import lifespan
from .middleware import setup_middleware
from .redis_client import get_redis_client
from .routers import auth_router, misc_router, protected_router

logger = logging.getLogger('session_auth.service')


def create_backend(config: AppConfig, clock: Callable[[], float] = time.time) -> TTLSessionBackend:
    if config.session_backend == "memory":
        logger.warning("Using InMemoryBackend for sessions (sessions are lost on restart, not shared between workers)")
        return InMemoryBackend(key_prefix=config.session_key_prefix, clock=clock)

    redis_client = get_redis_client(
        config.redis_url,
        socket_timeout=config.redis_socket_timeout,
        socket_connect_timeout=config.redis_connect_timeout,
    )
    return RedisBackend(redis_client=redis_client, key_prefix=config.session_key_prefix)


def create_session_manager(
    config: AppConfig,
    backend: TTLSessionBackend,
    directory: UserDirectory,
    clock: Callable[[], float] = time.time,
) -> SessionLifecycleManager:
    codec = SessionTokenCodec(
        config.secret_key,
        salt=config.cookie_name,
        max_age=config.session_ttl_seconds,
    )
    transport = SessionCookieTransport(config.cookie_name, config.cookie_params())
    return SessionLifecycleManager(
        codec=codec,
        backend=backend,
        directory=directory,
        transport=transport,
        ttl_seconds=config.session_ttl_seconds,
        sliding_expiration=config.sliding_expiration,
        clock=clock,
    )


def create_app(
    config: Optional[AppConfig] = None,
    backend: Optional[TTLSessionBackend] = None,
    directory: Optional[UserDirectory] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration, read from the environment when omitted
        backend: Session store, built from ``config`` when omitted
        directory: User directory, the demo users when omitted
        clock: Time source shared by the store and the manager
    """
    config = config or load_config()
    backend = backend or create_backend(config, clock=clock)
    directory = directory or StaticUserDirectory()

    app = FastAPI(
        title="Session Auth",
        description="Cookie-based session authentication backed by a TTL key-value store.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.session_backend = backend
    app.state.session_manager = create_session_manager(config, backend, directory, clock=clock)

    setup_middleware(app, config)

    app.include_router(auth_router)
    app.include_router(protected_router)
    app.include_router(misc_router)

    logger.info(
        f"Session service configured: cookie='{config.cookie_name}', ttl={config.session_ttl_seconds}s, "
        f"sliding={config.sliding_expiration}, backend={config.session_backend}, secure_cookies={config.secure_cookies}"
    )
    return app
