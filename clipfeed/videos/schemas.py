"""Pydantic schemas for video records."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .models import Video, VideoStatus


class RegisterVideoRequest(BaseModel):
    """Metadata for bytes already stored in the blob store."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    blob_key: str = Field(..., min_length=1, max_length=500)
    thumbnail_url: str | None = Field(None, max_length=2000)
    duration_seconds: int | None = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip whitespace and validate title."""
        v = v.strip()
        if not v:
            msg = "Title cannot be empty"
            raise ValueError(msg)
        return v


class VideoResponse(BaseModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = None
    status: VideoStatus
    created_at: datetime

    @classmethod
    def from_video(cls, video: Video) -> "VideoResponse":
        return cls(
            id=video.video_id,
            owner_id=video.owner_id,
            title=video.title,
            description=video.description,
            thumbnail_url=video.thumbnail_url,
            duration_seconds=video.duration_seconds,
            status=video.status,
            created_at=video.created_at,
        )
