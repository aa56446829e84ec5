"""Creator analytics service layer."""

import asyncio
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.core.errors import NotFoundError

from .models import CreatorDashboard, VideoPerformance, engagement_rate


if TYPE_CHECKING:
    from clipfeed.accounts.repository import AccountRepository
    from clipfeed.engagement.service import EngagementService
    from clipfeed.videos.repository import VideoRepository


logger = structlog.get_logger(__name__)

TOP_VIDEOS_LIMIT = 10


class AnalyticsService:
    """Rolls per-video counters up to the creator."""

    def __init__(
        self,
        videos: "VideoRepository",
        accounts: "AccountRepository",
        engagement: "EngagementService",
    ):
        self.videos = videos
        self.accounts = accounts
        self.engagement = engagement

    async def get_dashboard(self, owner_id: UUID) -> CreatorDashboard:
        """Totals over every video the creator owns, whatever its status.

        Raises:
            NotFoundError: If the account does not exist
        """
        if not await self.accounts.exists(owner_id):
            raise NotFoundError(f"Account not found: {owner_id}")

        videos = await self.videos.list_by_owner(owner_id)
        stats = await asyncio.gather(
            *(self.engagement.get_stats(video.video_id) for video in videos)
        )

        dashboard = CreatorDashboard(
            owner_id=owner_id,
            total_videos=len(videos),
            follower_count=await self.engagement.count_followers(owner_id),
        )

        performances = []
        for video, video_stats in zip(videos, stats, strict=True):
            dashboard.total_views += video_stats.view_count
            dashboard.total_likes += video_stats.like_count
            dashboard.total_comments += video_stats.comment_count
            dashboard.total_shares += video_stats.share_count
            performances.append(
                VideoPerformance(
                    video_id=video.video_id,
                    title=video.title,
                    views=video_stats.view_count,
                    likes=video_stats.like_count,
                    comments=video_stats.comment_count,
                    shares=video_stats.share_count,
                    engagement_rate=engagement_rate(
                        video_stats.like_count,
                        video_stats.comment_count,
                        video_stats.view_count,
                    ),
                )
            )

        dashboard.engagement_rate = engagement_rate(
            dashboard.total_likes, dashboard.total_comments, dashboard.total_views
        )
        performances.sort(key=lambda p: (-p.views, str(p.video_id)))
        dashboard.top_videos = performances[:TOP_VIDEOS_LIMIT]

        logger.debug(
            "dashboard_computed",
            owner_id=str(owner_id),
            total_videos=dashboard.total_videos,
        )
        return dashboard
