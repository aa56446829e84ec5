"""Moderation service layer.

Business logic for:
- Filing reports (one per reporter and video, ever)
- Resolving reports with dismiss / hide / ban
- Direct moderator actions: hide, unhide, ban an account

Resolution claims the status transition first with a conditional update, so
of several concurrent resolutions of one report only the winner runs its
cascade. A cascade that fails reopens the report; every cascade step is
idempotent, so a retry re-applies it.
"""

import dataclasses
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.accounts.models import AccountStatus
from clipfeed.auth.permissions import AccountRole, is_moderator
from clipfeed.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidOperationError,
    NotFoundError,
)
from clipfeed.core.redis import enforce_rate_limit
from clipfeed.videos.models import Video, VideoStatus

from .models import ModerationAction, Report, ReportStatus, create_report


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from clipfeed.accounts.repository import AccountRepository
    from clipfeed.config.settings import Settings
    from clipfeed.videos.repository import VideoRepository

    from .repository import ReportRepository


logger = structlog.get_logger(__name__)


class ModerationService:
    """Service for reports and moderator actions."""

    def __init__(
        self,
        repository: "ReportRepository",
        videos: "VideoRepository",
        accounts: "AccountRepository",
        settings: "Settings",
        redis: "Redis | None" = None,
    ):
        self.repository = repository
        self.videos = videos
        self.accounts = accounts
        self.settings = settings
        self.redis = redis

    @staticmethod
    def _require_moderator(actor_role: AccountRole | str) -> None:
        if not is_moderator(actor_role):
            raise ForbiddenError("Moderator role required")

    async def _get_video(self, video_id: UUID) -> Video:
        video = await self.videos.get(video_id)
        if video is None:
            raise NotFoundError(f"Video not found: {video_id}")
        return video

    # ==========================================================================
    # Reports
    # ==========================================================================

    async def create_report(
        self, reporter_id: UUID, video_id: UUID, reason: str
    ) -> Report:
        """File a report against a video.

        Raises:
            NotFoundError: If the video does not exist
            ConflictError: If this reporter already reported this video
            RateLimitExceededError: If the reporter is over the hourly limit
        """
        await self._get_video(video_id)

        await enforce_rate_limit(
            self.redis,
            f"reports:rate:{reporter_id}:hour",
            self.settings.reports_per_hour,
            3600,
            "Hourly report limit exceeded.",
        )

        report = create_report(reporter_id, video_id, reason.strip())
        claimed = await self.repository.claim_reporter_pair(
            reporter_id, video_id, report.report_id, report.created_at
        )
        if not claimed:
            raise ConflictError("You have already reported this video")

        try:
            await self.repository.insert(report)
        except Exception:
            await self.repository.release_reporter_pair(
                reporter_id, video_id, report.report_id
            )
            raise

        logger.info(
            "report_created",
            report_id=str(report.report_id),
            video_id=str(video_id),
            reporter_id=str(reporter_id),
        )
        return report

    async def list_reports(
        self, actor_role: AccountRole | str, status: ReportStatus | None = None
    ) -> list[Report]:
        """Reports in one status, or in every status when none is given."""
        self._require_moderator(actor_role)
        statuses = [status] if status else list(ReportStatus)
        reports: list[Report] = []
        for item in statuses:
            reports.extend(await self.repository.list_by_status(item))
        reports.sort(key=lambda r: (r.created_at, str(r.report_id)), reverse=True)
        return reports

    async def resolve_report(
        self,
        report_id: UUID,
        action: str,
        actor_role: AccountRole | str,
        moderator_id: UUID,
    ) -> Report:
        """Apply a moderation action to an open report.

        - dismiss: report -> dismissed
        - hide: reported video -> banned, report -> resolved
        - ban: every video of the owner -> banned, owner account -> banned,
          report -> resolved

        Raises:
            InvalidArgumentError: If the action is unknown
            ForbiddenError: If the actor is not a moderator
            NotFoundError: If the report or its video does not exist
            InvalidOperationError: If the report is already closed
        """
        parsed = ModerationAction.parse(action)
        self._require_moderator(actor_role)

        report = await self.repository.get(report_id)
        if report is None:
            raise NotFoundError(f"Report not found: {report_id}")
        if report.status.is_terminal:
            raise InvalidOperationError(f"Report already {report.status.value}")

        video = None
        if parsed is not ModerationAction.DISMISS:
            video = await self._get_video(report.video_id)

        resolved_at = datetime.now(UTC)
        if not await self.repository.resolve(report, parsed, moderator_id, resolved_at):
            raise InvalidOperationError("Report was resolved concurrently")

        try:
            if parsed is ModerationAction.HIDE:
                await self._ban_video(video)
            elif parsed is ModerationAction.BAN:
                await self._ban_owner(video.owner_id)
        except Exception:
            await self.repository.reopen(report, parsed)
            raise

        logger.info(
            "report_resolved",
            report_id=str(report_id),
            action=parsed.value,
            moderator_id=str(moderator_id),
        )
        return dataclasses.replace(
            report,
            status=parsed.resulting_status,
            action=parsed,
            moderator_id=moderator_id,
            resolved_at=resolved_at,
        )

    # ==========================================================================
    # Cascades
    # ==========================================================================

    async def _ban_video(self, video: Video) -> Video:
        if video.status != VideoStatus.BANNED:
            await self.videos.set_status(video.video_id, VideoStatus.BANNED)
            logger.info("video_banned", video_id=str(video.video_id))
        return dataclasses.replace(video, status=VideoStatus.BANNED)

    async def _ban_owner(self, owner_id: UUID) -> int:
        video_ids = await self.videos.list_owner_video_ids(owner_id)
        batches = await self.videos.set_status_many(
            video_ids, VideoStatus.BANNED, self.settings.moderation_batch_size
        )
        await self.accounts.set_status(owner_id, AccountStatus.BANNED)
        logger.info(
            "ban_sweep_applied",
            owner_id=str(owner_id),
            videos=len(video_ids),
            batches=batches,
        )
        return len(video_ids)

    # ==========================================================================
    # Direct moderator actions
    # ==========================================================================

    async def hide_video(self, video_id: UUID, actor_role: AccountRole | str) -> Video:
        self._require_moderator(actor_role)
        video = await self._get_video(video_id)
        return await self._ban_video(video)

    async def unhide_video(
        self, video_id: UUID, actor_role: AccountRole | str
    ) -> Video:
        """Restore a banned video. Active videos are left as they are.

        Banned videos always come back as active, including ones that were
        still pending when they were hidden: lifting a ban counts as approval.

        Raises:
            InvalidOperationError: If the video was never published
        """
        self._require_moderator(actor_role)
        video = await self._get_video(video_id)

        if video.status == VideoStatus.PENDING:
            raise InvalidOperationError("Pending videos cannot be unhidden")
        if video.status == VideoStatus.BANNED:
            await self.videos.set_status(video_id, VideoStatus.ACTIVE)
            logger.info("video_unhidden", video_id=str(video_id))
        return dataclasses.replace(video, status=VideoStatus.ACTIVE)

    async def ban_account(
        self, account_id: UUID, actor_role: AccountRole | str
    ) -> int:
        """Ban an account and every video it owns.

        Returns:
            Number of videos swept
        """
        self._require_moderator(actor_role)
        if not await self.accounts.exists(account_id):
            raise NotFoundError(f"Account not found: {account_id}")
        return await self._ban_owner(account_id)
