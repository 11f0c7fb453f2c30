"""
FastAPI dependencies for the session service.

This module provides reusable dependency functions that can be injected
into route handlers throughout the application.
"""
import logging

from fastapi import Depends, Request

from auth.errors import Unauthorized
from auth.gate import Decision, authorize, denial_reason
from session.manager import SessionLifecycleManager
from session.models import SessionContext

logger = logging.getLogger('session_auth.service.dependencies')


def get_session_manager(request: Request) -> SessionLifecycleManager:
    """Returns the lifecycle manager composed at application startup."""
    return request.app.state.session_manager


def get_session_context(request: Request) -> SessionContext:
    """
    Returns the SessionContext resolved by SessionResolutionMiddleware.

    Falls back to an anonymous context if the middleware did not run, so a
    misconfigured app fails closed.
    """
    context = getattr(request.state, "session_context", None)
    if context is None:
        logger.warning(f"No resolved session for {request.url.path}, treating request as anonymous")
        return SessionContext.absent("unresolved")
    return context


def require_authenticated(
    request: Request,
    context: SessionContext = Depends(get_session_context),
) -> SessionContext:
    """Gate for protected routes. Every denial raises the same Unauthorized."""
    if authorize(context) is Decision.ALLOW:
        logger.debug(f"Gate allowed '{context.username}' on {request.url.path}")
        return context

    reason = denial_reason(context)
    logger.info(f"Gate denied access to {request.url.path} (reason={reason})")
    raise Unauthorized(reason)
