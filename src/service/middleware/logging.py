import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, HTTPException

logger = logging.getLogger('session_auth.service.middleware')

# Never logged verbatim
REDACTED_HEADERS = {"cookie", "set-cookie", "authorization"}


def _redact(headers) -> dict:
    return {k: ("<redacted>" if k.lower() in REDACTED_HEADERS else v) for k, v in headers.items()}


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses for debugging session issues"""

    def __init__(self, app, cookie_name: str):
        super().__init__(app)
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        # Log incoming request details
        logger.debug(f"REQUEST_DEBUG: {request.method} {request.url.path}")
        logger.debug(f"REQUEST_DEBUG: Headers: {_redact(request.headers)}")

        # Check for session cookie specifically
        session_cookie_value = request.cookies.get(self.cookie_name)
        logger.debug(f"REQUEST_DEBUG: Session cookie present: {bool(session_cookie_value)}")
        if session_cookie_value:
            logger.debug(f"REQUEST_DEBUG: Session cookie length: {len(session_cookie_value)}")

        try:
            response = await call_next(request)

            # Log response details
            logger.debug(f"RESPONSE_DEBUG: Status {response.status_code}")
            logger.debug(f"RESPONSE_DEBUG: Headers: {_redact(response.headers)}")

            if response.status_code >= 500:
                logger.error(f"ERROR_RESPONSE_DEBUG: Status {response.status_code} for {request.method} {request.url.path}")
            elif response.status_code >= 400:
                logger.info(f"CLIENT_ERROR_DEBUG: Status {response.status_code} for {request.method} {request.url.path}")

            return response

        except HTTPException as exc:
            logger.error(f"HTTP_EXCEPTION_DEBUG: Status {exc.status_code}, Detail: {exc.detail}")
            raise
        except Exception as exc:
            logger.error(f"UNEXPECTED_EXCEPTION_DEBUG: {type(exc)}: {str(exc)}")
            raise
