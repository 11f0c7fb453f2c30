import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger('session_auth.service.middleware')


class SessionResolutionMiddleware(BaseHTTPMiddleware):
    """
    Resolve the session cookie before any handler runs.

    The resulting SessionContext is attached to ``request.state.session_context``.
    Under sliding expiry the re-signed cookie is sent back, unless the handler
    already set or cleared it (login/logout).
    """

    async def dispatch(self, request: Request, call_next):
        manager = request.app.state.session_manager
        context = await manager.resolve(manager.transport.read(request))
        request.state.session_context = context
        logger.debug(f"Session resolved for {request.url.path}: state={context.state.value} reason={context.reason}")

        refreshed_cookie = await manager.refresh(context)

        response = await call_next(request)

        if refreshed_cookie:
            cookie_prefix = f"{manager.transport.cookie_name}="
            already_written = any(
                header.startswith(cookie_prefix) for header in response.headers.getlist("set-cookie")
            )
            if not already_written:
                manager.transport.attach_to_response(response, refreshed_cookie)

        return response
