"""FastAPI dependencies for video records."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import VideoService


async def get_video_service(request: Request) -> VideoService:
    """Get video service from app state."""
    app_state = request.app.state
    if not hasattr(app_state, "video_service") or not app_state.video_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Video service not available",
        )
    return app_state.video_service


VideoServiceDep = Annotated[VideoService, Depends(get_video_service)]
