from fastapi import APIRouter, Request

from api.dependencies.rate_limits import SYSTEM_LIMIT, get_limiter
from infrastructure.services import SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


@router.get("/version")
@limiter.limit(SYSTEM_LIMIT)
def get_version(
    request: Request, settings: SettingsDep
):  # pylint: disable=unused-argument
    """Deployed git SHA."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit(SYSTEM_LIMIT)
def get_health(request: Request):  # pylint: disable=unused-argument
    """Liveness check."""
    return {"status": "ok"}
