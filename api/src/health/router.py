"""Health check endpoints."""

from fastapi import APIRouter, Request

from src.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness check - reports if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness check - reports whether the forum services are wired.

    Redis is optional; without it the comment cache is bypassed.
    """
    settings = get_settings()
    app_state = request.app.state
    services_ready = bool(
        getattr(app_state, "post_service", None)
        and getattr(app_state, "comment_service", None)
    )
    return {
        "status": "ready" if services_ready else "degraded",
        "database": services_ready,
        "cache": getattr(app_state, "redis", None) is not None,
        "environment": settings.environment,
        "debug": settings.debug,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
