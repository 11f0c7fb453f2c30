import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger('session_auth.service.middleware')


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn unexpected errors into a coarse 500 body with no internal detail"""

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException:
            # Http Exceptions are rendered by the registered exception handlers
            raise
        except Exception as exc:
            logger.error(f"Unexpected error for {request.method} {request.url.path}: {str(exc)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error occurred",
                    "error_code": "internal_error",
                    "message": "An unexpected error occurred. Please try again later.",
                }
            )
