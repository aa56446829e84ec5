"""Creator dashboard API endpoint."""

from fastapi import APIRouter

from clipfeed.auth.dependencies import CurrentUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import AnalyticsServiceDep
from .schemas import CreatorDashboardResponse


router = APIRouter(prefix="/v1/dashboard", tags=["analytics"])


@router.get("", response_model=CreatorDashboardResponse, summary="Creator dashboard")
async def get_dashboard(
    analytics_service: AnalyticsServiceDep,
    user: CurrentUser,
) -> CreatorDashboardResponse:
    """Engagement totals and top videos of the caller."""
    try:
        dashboard = await analytics_service.get_dashboard(user.id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return CreatorDashboardResponse.from_dashboard(dashboard)
