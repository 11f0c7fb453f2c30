import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exception_handlers import http_exception_handler

from auth.errors import InvalidCredentials, Unauthorized
from schema import FailureResponse, UnauthorizedResponse
from session.errors import StoreUnavailable

logger = logging.getLogger('session_auth.service.middleware')


async def invalid_credentials_handler(request: Request, exc: InvalidCredentials) -> JSONResponse:
    """Bad username/password: 401 with a message that never says which field was wrong"""
    body = FailureResponse(message=InvalidCredentials.message)
    return JSONResponse(status_code=401, content=body.model_dump(exclude_none=True))


async def unauthorized_handler(request: Request, exc: Unauthorized) -> JSONResponse:
    """Gate denial: identical body whatever the internal reason was"""
    body = UnauthorizedResponse(error=Unauthorized.message)
    return JSONResponse(status_code=401, content=body.model_dump())


def store_unavailable_response() -> JSONResponse:
    body = FailureResponse(
        message="The session service is temporarily unavailable. Please try again.",
        error_code="store_unavailable",
    )
    return JSONResponse(status_code=503, content=body.model_dump(), headers={"Retry-After": "1"})


async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    """Session store outage on a write path: retryable 503, distinct from bad credentials"""
    logger.error(f"STORE_UNAVAILABLE: {request.method} {request.url.path} during {exc.operation}")
    return store_unavailable_response()


async def custom_http_exception_handler(request: Request, exc: HTTPException):
    """Log HTTPExceptions before handing them to FastAPI's default rendering"""
    logger.error(f"OTHER_HTTP_EXCEPTION: {exc.status_code} - {exc.detail}")
    return await http_exception_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidCredentials, invalid_credentials_handler)
    app.add_exception_handler(Unauthorized, unauthorized_handler)
    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)
    app.add_exception_handler(HTTPException, custom_http_exception_handler)
