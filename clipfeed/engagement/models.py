"""Database models for engagement edges and per-video counters.

Cassandra table definitions for:
- video_likes: Like edges, one row per (video, account)
- follows / follows_by_following: Follow edges and their reverse lookup
- video_stats: Denormalized counters, authoritative for reads

Edge existence is decided by lightweight transactions (IF NOT EXISTS /
IF EXISTS) so concurrent toggles on one key serialize. Counters are plain
bigints mutated only through compare-and-set (``IF <column> = ?``), which
lets decrements floor at zero; COUNTER columns cannot do that.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID


class CounterName(str, Enum):
    """Counter columns of ``video_stats``."""

    VIEWS = "view_count"
    LIKES = "like_count"
    COMMENTS = "comment_count"
    SHARES = "share_count"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

VIDEO_LIKES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.video_likes (
    video_id UUID,
    account_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((video_id), account_id)
)
"""

FOLLOWS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.follows (
    follower_id UUID,
    following_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((follower_id), following_id)
)
"""

# Reverse lookup for follower counts
FOLLOWS_BY_FOLLOWING_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.follows_by_following (
    following_id UUID,
    follower_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((following_id), follower_id)
)
"""

VIDEO_STATS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.video_stats (
    video_id UUID PRIMARY KEY,
    view_count BIGINT,
    like_count BIGINT,
    comment_count BIGINT,
    share_count BIGINT
)
"""

ENGAGEMENT_TABLES_CQL = [
    VIDEO_LIKES_TABLE_CQL,
    FOLLOWS_TABLE_CQL,
    FOLLOWS_BY_FOLLOWING_TABLE_CQL,
    VIDEO_STATS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class VideoStats:
    """Aggregate counters of one video."""

    video_id: UUID
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0

    @classmethod
    def from_row(cls, row: Any) -> "VideoStats":
        """Create VideoStats from Cassandra row."""
        return cls(
            video_id=row.video_id,
            view_count=row.view_count or 0,
            like_count=row.like_count or 0,
            comment_count=row.comment_count or 0,
            share_count=row.share_count or 0,
        )

    def get(self, counter: CounterName) -> int:
        return getattr(self, counter.value)
