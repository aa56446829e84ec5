"""Database models for content items (videos).

Cassandra table definitions for:
- videos: Main record, one row per video
- videos_by_owner: Owner lookup used by ban sweeps, dashboards and profiles

The raw bytes live in the blob store; only the opaque ``blob_key`` is kept.
Lifecycle: pending -> active on publish, active <-> banned via moderation.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class VideoStatus(str, Enum):
    """Lifecycle state of a video."""

    PENDING = "pending"
    ACTIVE = "active"
    BANNED = "banned"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

VIDEO_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.videos (
    video_id UUID PRIMARY KEY,
    owner_id UUID,
    title TEXT,
    description TEXT,
    blob_key TEXT,
    thumbnail_url TEXT,
    duration_seconds INT,
    status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Feed candidate selection reads videos by status
VIDEO_STATUS_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS videos_status_idx
ON {keyspace}.videos (status)
"""

VIDEOS_BY_OWNER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.videos_by_owner (
    owner_id UUID,
    video_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((owner_id), video_id)
)
"""

VIDEOS_TABLES_CQL = [
    VIDEO_TABLE_CQL,
    VIDEO_STATUS_INDEX_CQL,
    VIDEOS_BY_OWNER_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Video:
    """Video entity."""

    video_id: UUID
    owner_id: UUID
    title: str
    description: str | None
    blob_key: str
    thumbnail_url: str | None
    duration_seconds: int | None
    status: VideoStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Video":
        """Create Video from Cassandra row."""
        return cls(
            video_id=row.video_id,
            owner_id=row.owner_id,
            title=row.title or "",
            description=row.description,
            blob_key=row.blob_key,
            thumbnail_url=row.thumbnail_url,
            duration_seconds=row.duration_seconds,
            status=VideoStatus(row.status),
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at or row.created_at),
        )

    @property
    def is_active(self) -> bool:
        return self.status == VideoStatus.ACTIVE


def _as_utc(value: datetime) -> datetime:
    # cassandra-driver returns naive UTC datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def create_video(
    owner_id: UUID,
    title: str,
    blob_key: str,
    description: str | None = None,
    thumbnail_url: str | None = None,
    duration_seconds: int | None = None,
) -> Video:
    """Create a new pending video."""
    now = datetime.now(UTC)
    return Video(
        video_id=uuid4(),
        owner_id=owner_id,
        title=title,
        description=description,
        blob_key=blob_key,
        thumbnail_url=thumbnail_url,
        duration_seconds=duration_seconds,
        status=VideoStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
