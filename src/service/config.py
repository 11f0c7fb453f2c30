"""
Configuration setup for the session service.

This module handles all configuration initialization including:
- Session signing and lifetime settings
- Cookie security attributes
- Session store connection
- CORS settings
"""
import os
import logging
from typing import Literal, Optional, Tuple

from fastapi_sessions.frontends.implementations import CookieParameters
from fastapi_sessions.frontends.implementations.cookie import SameSiteEnum
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger('session_auth.service.config')

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"
DEFAULT_CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
DEFAULT_CORS_HEADERS = "Content-Type,Authorization"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class AppConfig(BaseModel):
    secret_key: str = Field(min_length=1, repr=False)
    cookie_name: str = "connect.sid"
    session_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    sliding_expiration: bool = False
    session_key_prefix: str = "sess"

    secure_cookies: bool = False
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    cookie_domain: Optional[str] = None

    session_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379"
    redis_socket_timeout: float = Field(default=2.0, gt=0)
    redis_connect_timeout: float = Field(default=2.0, gt=0)

    cors_allowed_origins: list[str] = Field(default_factory=lambda: _split_csv(DEFAULT_CORS_ORIGINS))
    cors_allowed_methods: list[str] = Field(default_factory=lambda: _split_csv(DEFAULT_CORS_METHODS))
    cors_allowed_headers: list[str] = Field(default_factory=lambda: _split_csv(DEFAULT_CORS_HEADERS))
    debug_cors: bool = False

    @field_validator("cookie_samesite", mode="before")
    @classmethod
    def normalize_samesite(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    def cookie_params(self) -> CookieParameters:
        if self.cookie_samesite == "none" and not self.secure_cookies:
            logger.warning("COOKIE_SAMESITE=none without SECURE_COOKIES=true; browsers will drop the cookie")
        return CookieParameters(
            max_age=self.session_ttl_seconds,
            path="/",
            domain=self.cookie_domain,
            secure=self.secure_cookies,
            httponly=True,
            samesite=SameSiteEnum(self.cookie_samesite),
        )


def get_cors_config() -> Tuple[list[str], list[str], list[str]]:
    """
    Parse and return CORS configuration from environment variables.

    Returns:
        Tuple containing (origins, methods, headers) lists
    """
    cors_allowed_origins = _split_csv(os.getenv("CORS_ALLOWED_ORIGINS", ""))

    # Development fallback
    if not cors_allowed_origins:
        logger.warning("CORS_ALLOWED_ORIGINS not set, using development defaults")
        cors_allowed_origins = _split_csv(DEFAULT_CORS_ORIGINS)

    cors_allowed_methods = _split_csv(os.getenv("CORS_ALLOWED_METHODS", DEFAULT_CORS_METHODS))
    cors_allowed_headers = _split_csv(os.getenv("CORS_ALLOWED_HEADERS", DEFAULT_CORS_HEADERS))

    return cors_allowed_origins, cors_allowed_methods, cors_allowed_headers


def load_config() -> AppConfig:
    """
    Build the application configuration from environment variables.

    Raises:
        ValueError: if SESSION_SECRET_KEY is missing or a value is malformed.
    """
    if not (secret_key := os.getenv("SESSION_SECRET_KEY")):
        raise ValueError("SESSION_SECRET_KEY environment variable must be set")

    origins, methods, headers = get_cors_config()

    return AppConfig(
        secret_key=secret_key,
        cookie_name=os.getenv("SESSION_COOKIE_NAME", "connect.sid"),
        session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", 24 * 60 * 60)),
        sliding_expiration=_env_bool("SESSION_SLIDING_EXPIRATION"),
        session_key_prefix=os.getenv("SESSION_KEY_PREFIX", "sess"),
        secure_cookies=_env_bool("SECURE_COOKIES"),
        cookie_samesite=os.getenv("COOKIE_SAMESITE", "lax"),
        cookie_domain=os.getenv("COOKIE_DOMAIN") or None,
        session_backend=os.getenv("SESSION_BACKEND", "redis").strip().lower(),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
        redis_socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", 2.0)),
        redis_connect_timeout=float(os.getenv("REDIS_CONNECT_TIMEOUT", 2.0)),
        cors_allowed_origins=origins,
        cors_allowed_methods=methods,
        cors_allowed_headers=headers,
        debug_cors=_env_bool("DEBUG_CORS"),
    )


__all__ = [
    'AppConfig',
    'get_cors_config',
    'load_config',
]
