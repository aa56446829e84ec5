"""Pydantic schemas for reports and moderator actions."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clipfeed.videos.models import VideoStatus

from .models import ModerationAction, Report, ReportStatus


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateReportRequest(BaseModel):
    """Request to report a video."""

    video_id: UUID
    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        """Strip whitespace and validate reason."""
        v = v.strip()
        if not v:
            msg = "Reason cannot be empty"
            raise ValueError(msg)
        return v


# ==============================================================================
# Response Schemas
# ==============================================================================


class ReportResponse(BaseModel):
    """Response for a single report."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reporter_id: UUID
    video_id: UUID
    reason: str
    status: ReportStatus
    action: ModerationAction | None = None
    moderator_id: UUID | None = None
    created_at: datetime
    resolved_at: datetime | None = None

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        return cls(
            id=report.report_id,
            reporter_id=report.reporter_id,
            video_id=report.video_id,
            reason=report.reason,
            status=report.status,
            action=report.action,
            moderator_id=report.moderator_id,
            created_at=report.created_at,
            resolved_at=report.resolved_at,
        )


class ReportListResponse(BaseModel):
    """List of reports for moderation."""

    items: list[ReportResponse]
    total: int


class VideoModerationResponse(BaseModel):
    """Video status after a hide or unhide."""

    video_id: UUID
    status: VideoStatus


class BanAccountResponse(BaseModel):
    """Outcome of an account ban sweep."""

    account_id: UUID
    videos_banned: int
