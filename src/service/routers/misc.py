from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
import logging

from schema import HealthResponse, StatusResponse

logger = logging.getLogger('session_auth.service.routers.misc')

router = APIRouter(tags=["misc"])


@router.get("/status")
async def get_status() -> StatusResponse:
    """Liveness check."""
    return StatusResponse()


@router.get("/health", responses={503: {"model": HealthResponse}})
async def get_health(request: Request):
    """Readiness check: can the session store be reached?"""
    store_ok = await request.app.state.session_backend.ping()
    if not store_ok:
        logger.warning("Health check: session store unreachable")
    body = HealthResponse(status="healthy" if store_ok else "degraded", session_store=store_ok)
    return JSONResponse(status_code=200 if store_ok else 503, content=body.model_dump())
