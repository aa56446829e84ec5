"""Creator analytics entities.

Dashboards are computed on demand from ``video_stats``; nothing is stored.
"""

from dataclasses import dataclass, field
from uuid import UUID


def engagement_rate(likes: int, comments: int, views: int) -> float:
    """(likes + comments) / views as a percentage, 0 when there are no views."""
    if views <= 0:
        return 0.0
    return (likes + comments) / views * 100


@dataclass
class VideoPerformance:
    video_id: UUID
    title: str
    views: int
    likes: int
    comments: int
    shares: int
    engagement_rate: float


@dataclass
class CreatorDashboard:
    """Engagement totals of one creator."""

    owner_id: UUID
    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    follower_count: int = 0
    engagement_rate: float = 0.0
    top_videos: list[VideoPerformance] = field(default_factory=list)
