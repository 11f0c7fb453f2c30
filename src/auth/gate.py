"""
Authentication gate for protected operations.

``authorize`` is a pure predicate over the resolved session context. Every
denial looks the same to the client; ``denial_reason`` exists so server logs
can still tell "no session" from "expired" from "not authenticated".
"""
import logging
from enum import Enum

from session.models import SessionContext, SessionState

logger = logging.getLogger('session_auth.auth.gate')


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


def authorize(context: SessionContext) -> Decision:
    if context.state is SessionState.VALID and context.data is not None and context.data.is_authenticated:
        return Decision.ALLOW
    return Decision.DENY


def denial_reason(context: SessionContext) -> str:
    if context.state is SessionState.VALID:
        return "session_not_authenticated"
    return context.reason or context.state.value
