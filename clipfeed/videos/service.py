"""Video lifecycle service layer.

Registration stores metadata for bytes already uploaded to the blob store
and opens the video's counter row; publishing makes it eligible for the
feed. Moderation owns every transition into and out of ``banned``.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.core.errors import ForbiddenError, InvalidOperationError, NotFoundError

from .models import Video, VideoStatus, create_video


if TYPE_CHECKING:
    from clipfeed.accounts.repository import AccountRepository
    from clipfeed.engagement.service import EngagementService

    from .repository import VideoRepository


logger = structlog.get_logger(__name__)


class VideoService:
    """Service for video records."""

    def __init__(
        self,
        repository: "VideoRepository",
        accounts: "AccountRepository",
        engagement: "EngagementService",
    ):
        self.repository = repository
        self.accounts = accounts
        self.engagement = engagement

    async def register_video(
        self,
        owner_id: UUID,
        title: str,
        blob_key: str,
        description: str | None = None,
        thumbnail_url: str | None = None,
        duration_seconds: int | None = None,
    ) -> Video:
        """Create a pending video with zeroed counters.

        Raises:
            NotFoundError: If the owner does not exist
            ForbiddenError: If the owner is banned
        """
        owner = await self.accounts.get(owner_id)
        if owner is None:
            raise NotFoundError(f"Account not found: {owner_id}")
        if owner.is_banned:
            raise ForbiddenError("Banned accounts cannot upload videos")

        video = create_video(
            owner_id=owner_id,
            title=title.strip(),
            blob_key=blob_key,
            description=description,
            thumbnail_url=thumbnail_url,
            duration_seconds=duration_seconds,
        )
        await self.repository.insert(video)
        await self.engagement.init_stats(video.video_id)

        logger.info(
            "video_registered",
            video_id=str(video.video_id),
            owner_id=str(owner_id),
        )
        return video

    async def get_video(self, video_id: UUID) -> Video:
        video = await self.repository.get(video_id)
        if video is None:
            raise NotFoundError(f"Video not found: {video_id}")
        return video

    async def publish_video(self, video_id: UUID, requester_id: UUID) -> Video:
        """Move a pending video to active. Publishing twice is a no-op.

        Raises:
            NotFoundError: If the video does not exist
            ForbiddenError: If the requester does not own the video
            InvalidOperationError: If the video is banned
        """
        video = await self.get_video(video_id)
        if video.owner_id != requester_id:
            raise ForbiddenError("Only the owner can publish this video")
        if video.status == VideoStatus.BANNED:
            raise InvalidOperationError("Banned videos cannot be published")

        if video.status == VideoStatus.PENDING:
            await self.repository.set_status(video_id, VideoStatus.ACTIVE)
            video.status = VideoStatus.ACTIVE
            logger.info("video_published", video_id=str(video_id))
        return video
