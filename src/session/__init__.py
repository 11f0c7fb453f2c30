"""Server-side session lifecycle: codec, stores, cookie transport and manager."""

from .codec import SessionTokenCodec
from .errors import InvalidToken, SessionDestroyFailure, StoreUnavailable
from .manager import LogoutResult, SessionLifecycleManager
from .models import (
    AnonymousSession,
    AuthenticatedSession,
    SessionContext,
    SessionData,
    SessionState,
)
from .transport import SessionCookieTransport

__all__ = [
    "SessionTokenCodec",
    "InvalidToken",
    "SessionDestroyFailure",
    "StoreUnavailable",
    "LogoutResult",
    "SessionLifecycleManager",
    "AnonymousSession",
    "AuthenticatedSession",
    "SessionContext",
    "SessionData",
    "SessionState",
    "SessionCookieTransport",
]
