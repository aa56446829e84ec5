"""Pydantic schemas for the ranked feed."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from clipfeed.engagement.models import VideoStats

from .models import FeedItem


class UserSummaryResponse(BaseModel):
    """Author of a feed item."""

    id: UUID
    username: str
    avatar_url: str | None = None
    followed_by_current_user: bool = False


class VideoStatsResponse(BaseModel):
    """Engagement counters of a video."""

    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0

    @classmethod
    def from_stats(cls, stats: VideoStats) -> "VideoStatsResponse":
        return cls(
            view_count=stats.view_count,
            like_count=stats.like_count,
            comment_count=stats.comment_count,
            share_count=stats.share_count,
        )


class FeedItemResponse(BaseModel):
    """One ranked video."""

    id: UUID
    title: str
    description: str | None = None
    video_url: str
    thumbnail_url: str | None = None
    duration_seconds: int | None = None
    user: UserSummaryResponse | None = None
    stats: VideoStatsResponse
    liked_by_current_user: bool = False
    created_at: datetime
    score: float = Field(description="Ranking score drawn for this request")

    @classmethod
    def from_item(cls, item: FeedItem) -> "FeedItemResponse":
        video = item.video
        user = None
        if item.author is not None:
            user = UserSummaryResponse(
                id=item.author.account_id,
                username=item.author.username,
                avatar_url=item.author.avatar_url,
                followed_by_current_user=item.followed_by_current_user,
            )
        return cls(
            id=video.video_id,
            title=video.title,
            description=video.description,
            video_url=item.stream_url,
            thumbnail_url=video.thumbnail_url,
            duration_seconds=video.duration_seconds,
            user=user,
            stats=VideoStatsResponse.from_stats(item.stats),
            liked_by_current_user=item.liked_by_current_user,
            created_at=video.created_at,
            score=item.score,
        )


class FeedResponse(BaseModel):
    """One page of the feed."""

    items: list[FeedItemResponse]
    page: int
    size: int
    has_more: bool
