"""Moderation API endpoints.

Provides routes for:
- Filing reports (members)
- Moderation queue and report resolution (moderators)
- Hide / unhide videos and ban accounts (moderators)
"""

from uuid import UUID

import structlog
from fastapi import APIRouter, Query, status

from clipfeed.auth.dependencies import CurrentUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import ModerationServiceDep
from .models import ReportStatus
from .schemas import (
    BanAccountResponse,
    CreateReportRequest,
    ReportListResponse,
    ReportResponse,
    VideoModerationResponse,
)


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/reports", tags=["reports"])
admin_router = APIRouter(prefix="/v1/admin", tags=["admin"])


# ==============================================================================
# Reports
# ==============================================================================


@router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report video",
)
async def create_report(
    data: CreateReportRequest,
    moderation_service: ModerationServiceDep,
    user: CurrentUser,
) -> ReportResponse:
    """Report a video. Each account can report a given video once."""
    try:
        report = await moderation_service.create_report(
            reporter_id=user.id,
            video_id=data.video_id,
            reason=data.reason,
        )
    except EngineError as e:
        raise handle_engine_error(e) from e
    return ReportResponse.from_report(report)


# ==============================================================================
# Admin: queue and resolution
# ==============================================================================


@admin_router.get(
    "/reports",
    response_model=ReportListResponse,
    summary="List reports (moderator)",
)
async def list_reports(
    moderation_service: ModerationServiceDep,
    user: CurrentUser,
    report_status: ReportStatus | None = Query(None, alias="status"),
) -> ReportListResponse:
    try:
        reports = await moderation_service.list_reports(user.role, report_status)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return ReportListResponse(
        items=[ReportResponse.from_report(report) for report in reports],
        total=len(reports),
    )


@admin_router.post(
    "/reports/{report_id}/resolve",
    response_model=ReportResponse,
    summary="Resolve report (moderator)",
)
async def resolve_report(
    report_id: UUID,
    moderation_service: ModerationServiceDep,
    user: CurrentUser,
    action: str = Query(..., description="dismiss, hide or ban"),
) -> ReportResponse:
    """Dismiss a report, hide the video, or ban its owner."""
    try:
        report = await moderation_service.resolve_report(
            report_id=report_id,
            action=action,
            actor_role=user.role,
            moderator_id=user.id,
        )
    except EngineError as e:
        raise handle_engine_error(e) from e
    return ReportResponse.from_report(report)


# ==============================================================================
# Admin: direct actions
# ==============================================================================


@admin_router.post(
    "/videos/{video_id}/hide",
    response_model=VideoModerationResponse,
    summary="Hide video (moderator)",
)
async def hide_video(
    video_id: UUID,
    moderation_service: ModerationServiceDep,
    user: CurrentUser,
) -> VideoModerationResponse:
    try:
        video = await moderation_service.hide_video(video_id, user.role)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return VideoModerationResponse(video_id=video.video_id, status=video.status)


@admin_router.post(
    "/videos/{video_id}/unhide",
    response_model=VideoModerationResponse,
    summary="Unhide video (moderator)",
)
async def unhide_video(
    video_id: UUID,
    moderation_service: ModerationServiceDep,
    user: CurrentUser,
) -> VideoModerationResponse:
    try:
        video = await moderation_service.unhide_video(video_id, user.role)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return VideoModerationResponse(video_id=video.video_id, status=video.status)


@admin_router.post(
    "/accounts/{account_id}/ban",
    response_model=BanAccountResponse,
    summary="Ban account (moderator)",
)
async def ban_account(
    account_id: UUID,
    moderation_service: ModerationServiceDep,
    user: CurrentUser,
) -> BanAccountResponse:
    """Ban an account and every video it owns."""
    try:
        swept = await moderation_service.ban_account(account_id, user.role)
    except EngineError as e:
        raise handle_engine_error(e) from e
    logger.info("account_ban_requested", account_id=str(account_id), by=str(user.id))
    return BanAccountResponse(account_id=account_id, videos_banned=swept)
