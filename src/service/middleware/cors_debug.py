import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger('session_auth.service.middleware')


class CORSDebugMiddleware(BaseHTTPMiddleware):
    """
    Explain why a frontend on another origin is not getting its session.

    Enabled with DEBUG_CORS=true. The session cookie only travels cross-origin
    when the origin is allowed, the browser sends credentials and the response
    carries ``Access-Control-Allow-Credentials: true``.
    """

    def __init__(self, app, cors_allowed_origins: list[str], cookie_name: str):
        super().__init__(app)
        self.cors_allowed_origins = cors_allowed_origins
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if not origin:
            return await call_next(request)

        allowed = origin in self.cors_allowed_origins
        preflight = request.method == "OPTIONS"
        has_session_cookie = self.cookie_name in request.cookies
        logger.debug(
            f"CORS {request.method} {request.url.path} from {origin}: "
            f"allowed={allowed} session_cookie={has_session_cookie}"
        )

        if not allowed:
            logger.warning(f"Request from non-allowed origin: {origin}; the browser will not expose the response or keep cookies")
        elif not preflight and not has_session_cookie:
            logger.info(
                f"No '{self.cookie_name}' cookie from {origin} on {request.url.path}; "
                f"the client must send requests with credentials included"
            )

        response = await call_next(request)

        if allowed and response.headers.get("access-control-allow-credentials") != "true":
            logger.warning(f"Response to {origin} lacks Access-Control-Allow-Credentials; the session cookie will be ignored")

        return response
