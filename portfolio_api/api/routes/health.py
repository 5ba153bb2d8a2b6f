from __future__ import annotations

from fastapi import APIRouter

from portfolio_api.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for the hosting platform.

    Returns:
        dict: ``{"status": "ok", "env": <APP_ENV>}``.
    """

    return {"status": "ok", "env": settings.app_env}
