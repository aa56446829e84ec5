"""Video API endpoints.

Provides routes for:
- Registering an uploaded video (pending)
- Publishing it to the feed
- Reading its record
"""

from uuid import UUID

from fastapi import APIRouter, status

from clipfeed.auth.dependencies import CurrentUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import VideoServiceDep
from .schemas import RegisterVideoRequest, VideoResponse


router = APIRouter(prefix="/v1/videos", tags=["videos"])


@router.post(
    "",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register video",
)
async def register_video(
    data: RegisterVideoRequest,
    video_service: VideoServiceDep,
    user: CurrentUser,
) -> VideoResponse:
    try:
        video = await video_service.register_video(
            owner_id=user.id,
            title=data.title,
            blob_key=data.blob_key,
            description=data.description,
            thumbnail_url=data.thumbnail_url,
            duration_seconds=data.duration_seconds,
        )
    except EngineError as e:
        raise handle_engine_error(e) from e
    return VideoResponse.from_video(video)


@router.post(
    "/{video_id}/publish", response_model=VideoResponse, summary="Publish video"
)
async def publish_video(
    video_id: UUID,
    video_service: VideoServiceDep,
    user: CurrentUser,
) -> VideoResponse:
    try:
        video = await video_service.publish_video(video_id, user.id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return VideoResponse.from_video(video)


@router.get("/{video_id}", response_model=VideoResponse, summary="Get video")
async def get_video(video_id: UUID, video_service: VideoServiceDep) -> VideoResponse:
    try:
        video = await video_service.get_video(video_id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return VideoResponse.from_video(video)
