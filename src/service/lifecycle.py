import logging
from typing import AsyncGenerator
from fastapi import FastAPI
from contextlib import asynccontextmanager

from .redis_client import close_redis_clients

logger = logging.getLogger("session_auth.service.lifecycle")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    backend = app.state.session_backend

    # Startup continues without the store: reads fail closed, writes answer 503
    if await backend.ping():
        logger.info(f"Session store reachable ({type(backend).__name__})")
    else:
        logger.warning(f"Session store not reachable at startup ({type(backend).__name__}); sessions will fail closed until it is")

    yield

    # Cleanup during shutdown; the Redis client is owned by the shared registry
    await backend.close()
    await close_redis_clients()
    logger.info("Session store connections closed")
