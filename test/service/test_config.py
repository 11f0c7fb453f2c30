import pytest
from pydantic import ValidationError
from fastapi_sessions.frontends.implementations.cookie import SameSiteEnum

from service.config import AppConfig, get_cors_config, load_config

CONFIG_VARS = [
    "SESSION_COOKIE_NAME",
    "SESSION_TTL_SECONDS",
    "SESSION_SLIDING_EXPIRATION",
    "SESSION_KEY_PREFIX",
    "SECURE_COOKIES",
    "COOKIE_SAMESITE",
    "COOKIE_DOMAIN",
    "SESSION_BACKEND",
    "REDIS_URL",
    "CORS_ALLOWED_ORIGINS",
    "CORS_ALLOWED_METHODS",
    "CORS_ALLOWED_HEADERS",
    "DEBUG_CORS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SESSION_SECRET_KEY", "s3cret")
    return monkeypatch


def test_defaults(clean_env):
    config = load_config()

    assert config.cookie_name == "connect.sid"
    assert config.session_ttl_seconds == 86400
    assert config.sliding_expiration is False
    assert config.session_key_prefix == "sess"
    assert config.session_backend == "redis"
    assert config.redis_url == "redis://localhost:6379"
    assert config.cors_allowed_origins == ["http://localhost:5173", "http://127.0.0.1:5173"]


def test_missing_secret_is_fatal(clean_env):
    clean_env.delenv("SESSION_SECRET_KEY")

    with pytest.raises(ValueError, match="SESSION_SECRET_KEY"):
        load_config()


def test_values_from_environment(clean_env):
    clean_env.setenv("SESSION_COOKIE_NAME", "sid")
    clean_env.setenv("SESSION_TTL_SECONDS", "600")
    clean_env.setenv("SESSION_SLIDING_EXPIRATION", "true")
    clean_env.setenv("SECURE_COOKIES", "1")
    clean_env.setenv("COOKIE_SAMESITE", " Strict ")
    clean_env.setenv("SESSION_BACKEND", "Memory")
    clean_env.setenv("CORS_ALLOWED_ORIGINS", "https://app.example, https://admin.example")

    config = load_config()

    assert config.cookie_name == "sid"
    assert config.session_ttl_seconds == 600
    assert config.sliding_expiration is True
    assert config.secure_cookies is True
    assert config.cookie_samesite == "strict"
    assert config.session_backend == "memory"
    assert config.cors_allowed_origins == ["https://app.example", "https://admin.example"]


@pytest.mark.parametrize("name, value", [
    ("SESSION_TTL_SECONDS", "0"),
    ("SESSION_TTL_SECONDS", "soon"),
    ("COOKIE_SAMESITE", "sometimes"),
    ("SESSION_BACKEND", "postgres"),
])
def test_malformed_values_are_rejected(clean_env, name, value):
    clean_env.setenv(name, value)

    with pytest.raises((ValueError, ValidationError)):
        load_config()


def test_cookie_params():
    config = AppConfig(secret_key="s3cret", session_ttl_seconds=600, secure_cookies=True, cookie_samesite="strict")

    params = config.cookie_params()

    assert params.max_age == 600
    assert params.path == "/"
    assert params.httponly is True
    assert params.secure is True
    assert params.samesite == SameSiteEnum.strict


def test_secret_is_not_in_repr():
    assert "s3cret" not in repr(AppConfig(secret_key="s3cret"))


def test_cors_config_defaults(clean_env):
    origins, methods, headers = get_cors_config()

    assert origins == ["http://localhost:5173", "http://127.0.0.1:5173"]
    assert "OPTIONS" in methods
    assert "Content-Type" in headers
