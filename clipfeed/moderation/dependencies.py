"""FastAPI dependencies for moderation."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ModerationService


async def get_moderation_service(request: Request) -> ModerationService:
    """Get moderation service from app state."""
    app_state = request.app.state
    if (
        not hasattr(app_state, "moderation_service")
        or not app_state.moderation_service
    ):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Moderation service not available",
        )
    return app_state.moderation_service


ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service)]
