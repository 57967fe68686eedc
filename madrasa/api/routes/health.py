"""GET /health: liveness check plus email delivery mode."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from madrasa.core.settings import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Basic health check")
def health_check(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "email": "enabled" if settings.email_enabled else "preview",
    }
