"""Feed API endpoint."""

from fastapi import APIRouter, Query

from clipfeed.auth.dependencies import OptionalUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import FeedServiceDep
from .schemas import FeedItemResponse, FeedResponse


router = APIRouter(prefix="/v1/feed", tags=["feed"])


@router.get("", response_model=FeedResponse, summary="Ranked feed")
async def get_feed(
    feed_service: FeedServiceDep,
    user: OptionalUser,
    page: int = Query(0, description="Zero-based page index"),
    size: int | None = Query(None, description="Items per page"),
) -> FeedResponse:
    """Active videos ranked for the caller; anonymous callers get no like/follow flags."""
    try:
        items = await feed_service.get_feed(
            viewer_id=user.id if user else None,
            page=page,
            page_size=size,
        )
    except EngineError as e:
        raise handle_engine_error(e) from e

    page_size = size if size is not None else feed_service.settings.feed_default_page_size
    return FeedResponse(
        items=[FeedItemResponse.from_item(item) for item in items],
        page=page,
        size=page_size,
        has_more=len(items) == page_size,
    )
