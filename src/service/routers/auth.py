from typing import Optional
import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from schema import (
    CheckSessionResponse,
    FailureResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    UserInfo,
)
from session.manager import SessionLifecycleManager
from session.models import SessionContext
from ..dependencies import get_session_context, get_session_manager
from ..middleware.exception_handlers import store_unavailable_response

logger = logging.getLogger('session_auth.service.routers.auth')

router = APIRouter(
    prefix="/api",
    tags=["auth"],
)


@router.post(
    "/login",
    responses={
        401: {"model": FailureResponse, "description": "Incorrect username or password"},
        503: {"model": FailureResponse, "description": "Session store unavailable, retry later"},
    },
)
async def login(
    response: Response,
    body: Optional[LoginRequest] = None,
    context: SessionContext = Depends(get_session_context),
    manager: SessionLifecycleManager = Depends(get_session_manager),
) -> LoginResponse:
    """
    Check credentials and start a new session.

    On success the signed session cookie is set on the response. On failure no
    session is created and the cookie is left untouched.
    """
    body = body or LoginRequest()
    logger.info(f"LOGIN ATTEMPT - username: '{body.username}'")

    new_context = await manager.login(body.username, body.password, response, previous=context)

    return LoginResponse(
        success=True,
        user=UserInfo(id=new_context.user_id, username=new_context.username),
    )


@router.get("/check-session")
async def check_session(
    context: SessionContext = Depends(get_session_context),
    manager: SessionLifecycleManager = Depends(get_session_manager),
) -> CheckSessionResponse:
    """Report the caller's session state. Does not require authentication."""
    if context.is_valid:
        session_id = context.session_id
    else:
        # Anonymous callers get a throwaway id that is never stored
        session_id = manager.codec.new_session_id()

    return CheckSessionResponse(
        authenticated=context.authenticated,
        username=context.username,
        session_id=session_id,
    )


@router.post(
    "/logout",
    responses={
        500: {"model": FailureResponse, "description": "The session cookie could not be cleared"},
        503: {"model": FailureResponse, "description": "Cookie cleared but the session store was unavailable, retry later"},
    },
)
async def logout(
    response: Response,
    context: SessionContext = Depends(get_session_context),
    manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """Destroy the session and clear the cookie. Safe to call repeatedly."""
    result = await manager.logout(context, response)

    if not result.cookie_cleared:
        body = FailureResponse(message="Could not log out. Please try again.")
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    if result.store_unavailable:
        # A returned response drops headers set on `response`, so clear the cookie on it too
        failure = store_unavailable_response()
        manager.transport.delete_from_response(failure)
        return failure

    if not result.store_cleared:
        logger.warning("Logout reported success with the server-side record left for TTL cleanup")
    return LogoutResponse()
