"""FastAPI dependencies for the feed."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import FeedService


async def get_feed_service(request: Request) -> FeedService:
    """Get feed service from app state."""
    app_state = request.app.state
    if not hasattr(app_state, "feed_service") or not app_state.feed_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Feed service not available",
        )
    return app_state.feed_service


FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
