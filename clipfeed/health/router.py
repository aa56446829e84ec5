"""Health check endpoints."""

from fastapi import APIRouter, Request, Response, status

from clipfeed.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request, response: Response) -> dict[str, str | bool]:
    """Readiness probe - ready once the engine services are wired.

    Redis only backs rate limits, so its absence is reported but not fatal.
    """
    settings = get_settings()
    app_state = request.app.state
    services_ready = getattr(app_state, "engagement_service", None) is not None
    redis_connected = getattr(app_state, "redis", None) is not None

    if not services_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "ready" if services_ready else "starting",
        "environment": settings.environment,
        "services": services_ready,
        "redis": redis_connected,
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
