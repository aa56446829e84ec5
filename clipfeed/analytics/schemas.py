"""Pydantic schemas for the creator dashboard."""

from uuid import UUID

from pydantic import BaseModel, Field

from .models import CreatorDashboard


class VideoPerformanceResponse(BaseModel):
    video_id: UUID
    title: str
    views: int
    likes: int
    comments: int
    shares: int
    engagement_rate: float


class CreatorDashboardResponse(BaseModel):
    """Engagement totals across the creator's videos."""

    total_videos: int
    total_views: int
    total_likes: int
    total_comments: int
    total_shares: int
    follower_count: int
    engagement_rate: float = Field(description="(likes + comments) / views * 100")
    top_videos: list[VideoPerformanceResponse]

    @classmethod
    def from_dashboard(cls, dashboard: CreatorDashboard) -> "CreatorDashboardResponse":
        return cls(
            total_videos=dashboard.total_videos,
            total_views=dashboard.total_views,
            total_likes=dashboard.total_likes,
            total_comments=dashboard.total_comments,
            total_shares=dashboard.total_shares,
            follower_count=dashboard.follower_count,
            engagement_rate=round(dashboard.engagement_rate, 2),
            top_videos=[
                VideoPerformanceResponse(
                    video_id=perf.video_id,
                    title=perf.title,
                    views=perf.views,
                    likes=perf.likes,
                    comments=perf.comments,
                    shares=perf.shares,
                    engagement_rate=round(perf.engagement_rate, 2),
                )
                for perf in dashboard.top_videos
            ],
        )
