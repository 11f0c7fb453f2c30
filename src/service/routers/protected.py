from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends

from schema import (
    ProfileResponse,
    ProfileUser,
    SecretDataResponse,
    SessionInfo,
    UnauthorizedResponse,
)
from session.models import SessionContext
from ..dependencies import require_authenticated

logger = logging.getLogger('session_auth.service.routers.protected')

router = APIRouter(
    prefix="/api",
    tags=["protected"],
    responses={401: {"model": UnauthorizedResponse, "description": "No authenticated session"}},
)


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


@router.get("/profile")
async def get_profile(context: SessionContext = Depends(require_authenticated)) -> ProfileResponse:
    """Profile of the logged in user, served straight from the session record."""
    logger.info(f"PROFILE - served to '{context.username}'")
    return ProfileResponse(
        user=ProfileUser(
            id=context.user_id,
            username=context.username,
            login_time=_isoformat(context.data.created_at),
        ),
        session=SessionInfo(id=context.session_id, authenticated=context.authenticated),
    )


@router.get("/secret-data")
async def get_secret_data(context: SessionContext = Depends(require_authenticated)) -> SecretDataResponse:
    logger.info(f"SECRET DATA - served to '{context.username}'")
    return SecretDataResponse(
        secret_data=f"Super secret data for {context.username}!",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
