import logging as log
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging import RequestResponseLoggingMiddleware
from .error_handling import ErrorHandlingMiddleware
from .session import SessionResolutionMiddleware
from .cors_debug import CORSDebugMiddleware
from .exception_handlers import register_exception_handlers
from ..config import AppConfig

logger = log.getLogger('session_auth.service.middleware')


def setup_middleware(app: FastAPI, config: AppConfig):
    """
    Setup all middleware for the FastAPI application.

    Middleware are added in reverse order (last added = first executed).
    Current order of execution:
    1. CORSDebugMiddleware (optional, only when DEBUG_CORS=true)
    2. CORSMiddleware (credentialed CORS for the browser client)
    3. ErrorHandlingMiddleware (catches unhandled errors)
    4. RequestResponseLoggingMiddleware (logs requests/responses)
    5. SessionResolutionMiddleware (resolves the session cookie for handlers)

    Args:
        app: FastAPI application instance
        config: Application configuration
    """
    register_exception_handlers(app)

    # Resolve the session before handlers run (executed last)
    app.add_middleware(SessionResolutionMiddleware)

    app.add_middleware(RequestResponseLoggingMiddleware, cookie_name=config.cookie_name)

    app.add_middleware(ErrorHandlingMiddleware)

    # Cookies only cross origins with allow_credentials and an explicit origin list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=config.cors_allowed_methods,
        allow_headers=config.cors_allowed_headers,
    )

    logger.info(f"CORS configured with origins: {config.cors_allowed_origins}")

    if config.debug_cors:
        app.add_middleware(
            CORSDebugMiddleware,
            cors_allowed_origins=config.cors_allowed_origins,
            cookie_name=config.cookie_name,
        )
        logger.info("CORS debug middleware enabled")


__all__ = [
    'setup_middleware',
    'RequestResponseLoggingMiddleware',
    'ErrorHandlingMiddleware',
    'SessionResolutionMiddleware',
    'CORSDebugMiddleware',
    'register_exception_handlers',
]
