"""Social interaction API endpoints.

Provides routes for:
- Like toggle and status
- Follow toggle and status
- Shares and views
"""

from uuid import UUID

from fastapi import APIRouter

from clipfeed.auth.dependencies import CurrentUser, OptionalUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import EngagementServiceDep
from .schemas import (
    FollowResponse,
    FollowStatusResponse,
    LikeResponse,
    RecordViewRequest,
    ShareResponse,
    ViewResponse,
)


router = APIRouter(prefix="/v1/social", tags=["social"])


# ==============================================================================
# Likes
# ==============================================================================


@router.post("/like/{video_id}", response_model=LikeResponse, summary="Toggle like")
async def toggle_like(
    video_id: UUID,
    engagement_service: EngagementServiceDep,
    user: CurrentUser,
) -> LikeResponse:
    try:
        result = await engagement_service.toggle_like(user.id, video_id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return LikeResponse(
        liked=result.liked,
        message="Video liked" if result.liked else "Video unliked",
    )


@router.get(
    "/like/{video_id}/status", response_model=LikeResponse, summary="Like status"
)
async def get_like_status(
    video_id: UUID,
    engagement_service: EngagementServiceDep,
    user: OptionalUser,
) -> LikeResponse:
    liked = await engagement_service.is_liked(user.id if user else None, video_id)
    return LikeResponse(liked=liked)


# ==============================================================================
# Follows
# ==============================================================================


@router.post(
    "/follow/{account_id}", response_model=FollowResponse, summary="Toggle follow"
)
async def toggle_follow(
    account_id: UUID,
    engagement_service: EngagementServiceDep,
    user: CurrentUser,
) -> FollowResponse:
    try:
        result = await engagement_service.toggle_follow(user.id, account_id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return FollowResponse(
        following=result.following,
        message="Now following" if result.following else "Unfollowed",
    )


@router.get(
    "/follow/{account_id}/status",
    response_model=FollowStatusResponse,
    summary="Follow status",
)
async def get_follow_status(
    account_id: UUID,
    engagement_service: EngagementServiceDep,
    user: OptionalUser,
) -> FollowStatusResponse:
    following = await engagement_service.is_following(
        user.id if user else None, account_id
    )
    follower_count = await engagement_service.count_followers(account_id)
    return FollowStatusResponse(following=following, follower_count=follower_count)


# ==============================================================================
# Shares and views
# ==============================================================================


@router.post("/share/{video_id}", response_model=ShareResponse, summary="Share video")
async def share_video(
    video_id: UUID,
    engagement_service: EngagementServiceDep,
) -> ShareResponse:
    try:
        share_link = await engagement_service.increment_share(video_id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return ShareResponse(share_link=share_link)


@router.post("/view/{video_id}", response_model=ViewResponse, summary="Record view")
async def record_view(
    video_id: UUID,
    data: RecordViewRequest,
    engagement_service: EngagementServiceDep,
    user: OptionalUser,
) -> ViewResponse:
    try:
        view_count = await engagement_service.increment_view(
            video_id,
            watch_duration_seconds=data.watch_duration_seconds,
            completed=data.completed,
            viewer_id=user.id if user else None,
        )
    except EngineError as e:
        raise handle_engine_error(e) from e
    return ViewResponse(view_count=view_count)
