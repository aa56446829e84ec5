"""Tests for the moderation state machine.

Covers:
- One report per reporter and video, regardless of later resolution
- dismiss / hide / ban transitions and their cascades
- Role checks and terminal-state rejection
- Direct hide, unhide and account ban
"""

import asyncio
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from clipfeed.accounts.models import AccountStatus
from clipfeed.auth.permissions import AccountRole
from clipfeed.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    RateLimitExceededError,
)
from clipfeed.moderation.models import ModerationAction, ReportStatus
from clipfeed.moderation.service import ModerationService
from clipfeed.videos.models import VideoStatus


MOD = AccountRole.MODERATOR


class TestCreateReport:
    """Tests for create_report."""

    @pytest.mark.asyncio
    async def test_creates_open_report(self, moderation_service, reports_repo, viewer, video):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "  spam  "
        )

        assert report.status == ReportStatus.OPEN
        assert report.reason == "spam"
        assert report.action is None
        assert report.report_id in reports_repo.reports

    @pytest.mark.asyncio
    async def test_duplicate_rejected(self, moderation_service, viewer, video):
        await moderation_service.create_report(viewer.account_id, video.video_id, "spam")

        with pytest.raises(ConflictError):
            await moderation_service.create_report(viewer.account_id, video.video_id, "again")

    @pytest.mark.asyncio
    async def test_duplicate_rejected_after_dismissal(
        self, moderation_service, moderator, viewer, video
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )
        await moderation_service.resolve_report(
            report.report_id, "dismiss", MOD, moderator.account_id
        )

        with pytest.raises(ConflictError):
            await moderation_service.create_report(viewer.account_id, video.video_id, "spam")

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_single_winner(
        self, moderation_service, reports_repo, viewer, video
    ):
        results = await asyncio.gather(
            *(
                moderation_service.create_report(viewer.account_id, video.video_id, "spam")
                for _ in range(5)
            ),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        assert len(conflicts) == 4
        assert len(reports_repo.reports) == 1

    @pytest.mark.asyncio
    async def test_other_reporter_allowed(
        self, moderation_service, reports_repo, viewer, creator, video
    ):
        await moderation_service.create_report(viewer.account_id, video.video_id, "a")
        await moderation_service.create_report(creator.account_id, video.video_id, "b")
        assert len(reports_repo.reports) == 2

    @pytest.mark.asyncio
    async def test_unknown_video(self, moderation_service, viewer):
        with pytest.raises(NotFoundError):
            await moderation_service.create_report(viewer.account_id, uuid4(), "spam")

    @pytest.mark.asyncio
    async def test_insert_failure_releases_claim(
        self, moderation_service, reports_repo, viewer, video
    ):
        original_insert = reports_repo.insert
        reports_repo.insert = AsyncMock(side_effect=ConnectionError("write timeout"))

        with pytest.raises(ConnectionError):
            await moderation_service.create_report(viewer.account_id, video.video_id, "spam")
        assert reports_repo.claims == {}

        reports_repo.insert = original_insert
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )
        assert report.status == ReportStatus.OPEN

    @pytest.mark.asyncio
    async def test_rate_limited(
        self, reports_repo, videos_repo, accounts_repo, settings, viewer, video
    ):
        redis_mock = AsyncMock()
        pipe = Mock()
        pipe.execute = AsyncMock(return_value=[settings.reports_per_hour + 1, True])
        redis_mock.pipeline = Mock(return_value=pipe)
        service = ModerationService(
            reports_repo, videos_repo, accounts_repo, settings, redis=redis_mock
        )

        with pytest.raises(RateLimitExceededError):
            await service.create_report(viewer.account_id, video.video_id, "spam")
        assert reports_repo.claims == {}


class TestResolveReport:
    """Tests for resolve_report."""

    @pytest.mark.asyncio
    async def test_dismiss(self, moderation_service, videos_repo, moderator, viewer, video):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )

        resolved = await moderation_service.resolve_report(
            report.report_id, "dismiss", MOD, moderator.account_id
        )

        assert resolved.status == ReportStatus.DISMISSED
        assert resolved.action == ModerationAction.DISMISS
        assert resolved.moderator_id == moderator.account_id
        assert resolved.resolved_at is not None
        assert videos_repo.videos[video.video_id].status == VideoStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_hide_bans_only_reported_video(
        self, moderation_service, videos_repo, accounts_repo, moderator, viewer, creator, video
    ):
        sibling = videos_repo.add(creator.account_id)
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )

        resolved = await moderation_service.resolve_report(
            report.report_id, " HIDE ", MOD, moderator.account_id
        )

        assert resolved.status == ReportStatus.RESOLVED
        assert videos_repo.videos[video.video_id].status == VideoStatus.BANNED
        assert videos_repo.videos[sibling.video_id].status == VideoStatus.ACTIVE
        assert accounts_repo.accounts[creator.account_id].status == AccountStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_ban_sweeps_every_owner_video(
        self, moderation_service, videos_repo, accounts_repo, moderator, viewer, creator, video
    ):
        owned = [video.video_id]
        owned += [
            videos_repo.add(creator.account_id, status=status).video_id
            for status in (
                VideoStatus.ACTIVE,
                VideoStatus.ACTIVE,
                VideoStatus.PENDING,
                VideoStatus.BANNED,
                VideoStatus.ACTIVE,
                VideoStatus.ACTIVE,
            )
        ]
        bystander = videos_repo.add(viewer.account_id)
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "abuse"
        )

        resolved = await moderation_service.resolve_report(
            report.report_id, "ban", AccountRole.ADMINISTRATOR, moderator.account_id
        )

        assert resolved.status == ReportStatus.RESOLVED
        assert all(videos_repo.videos[v].status == VideoStatus.BANNED for v in owned)
        assert videos_repo.videos[bystander.video_id].status == VideoStatus.ACTIVE
        assert accounts_repo.accounts[creator.account_id].status == AccountStatus.BANNED
        # moderation_batch_size is 3 in tests
        assert videos_repo.batch_sizes == [3, 3, 1]

    @pytest.mark.asyncio
    async def test_invalid_action_leaves_state(
        self, moderation_service, reports_repo, videos_repo, moderator, viewer, video
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )

        with pytest.raises(InvalidArgumentError):
            await moderation_service.resolve_report(
                report.report_id, "delete", MOD, moderator.account_id
            )

        assert reports_repo.reports[report.report_id].status == ReportStatus.OPEN
        assert videos_repo.videos[video.video_id].status == VideoStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_member_forbidden(
        self, moderation_service, reports_repo, viewer, video
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )

        with pytest.raises(ForbiddenError):
            await moderation_service.resolve_report(
                report.report_id, "hide", AccountRole.MEMBER, viewer.account_id
            )

        assert reports_repo.reports[report.report_id].status == ReportStatus.OPEN

    @pytest.mark.asyncio
    async def test_unknown_report(self, moderation_service, moderator):
        with pytest.raises(NotFoundError):
            await moderation_service.resolve_report(
                uuid4(), "dismiss", MOD, moderator.account_id
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("first", ["dismiss", "hide"])
    async def test_terminal_report_rejected(
        self, moderation_service, moderator, viewer, video, first
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )
        await moderation_service.resolve_report(
            report.report_id, first, MOD, moderator.account_id
        )

        with pytest.raises(InvalidOperationError):
            await moderation_service.resolve_report(
                report.report_id, "ban", MOD, moderator.account_id
            )

    @pytest.mark.asyncio
    async def test_concurrent_dismiss_and_ban_apply_one_outcome(
        self, moderation_service, reports_repo, videos_repo, accounts_repo,
        moderator, viewer, creator, video,
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )

        results = await asyncio.gather(
            moderation_service.resolve_report(
                report.report_id, "dismiss", MOD, moderator.account_id
            ),
            moderation_service.resolve_report(
                report.report_id, "ban", MOD, moderator.account_id
            ),
            return_exceptions=True,
        )

        assert sum(isinstance(r, InvalidOperationError) for r in results) == 1
        stored = reports_repo.reports[report.report_id]
        if stored.action is ModerationAction.DISMISS:
            assert videos_repo.videos[video.video_id].status == VideoStatus.ACTIVE
            assert accounts_repo.accounts[creator.account_id].status == AccountStatus.ACTIVE
        else:
            assert stored.action is ModerationAction.BAN
            assert videos_repo.videos[video.video_id].status == VideoStatus.BANNED
            assert accounts_repo.accounts[creator.account_id].status == AccountStatus.BANNED

    @pytest.mark.asyncio
    async def test_concurrent_bans_sweep_once(
        self, moderation_service, videos_repo, moderator, viewer, video
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "spam"
        )

        results = await asyncio.gather(
            *(
                moderation_service.resolve_report(
                    report.report_id, "ban", MOD, moderator.account_id
                )
                for _ in range(3)
            ),
            return_exceptions=True,
        )

        assert sum(isinstance(r, InvalidOperationError) for r in results) == 2
        assert videos_repo.batch_sizes == [1]

    @pytest.mark.asyncio
    async def test_cascade_failure_reopens_report(
        self, moderation_service, reports_repo, videos_repo, moderator, viewer, video
    ):
        report = await moderation_service.create_report(
            viewer.account_id, video.video_id, "abuse"
        )
        videos_repo.set_status_many = AsyncMock(side_effect=ConnectionError("timeout"))

        with pytest.raises(ConnectionError):
            await moderation_service.resolve_report(
                report.report_id, "ban", MOD, moderator.account_id
            )

        stored = reports_repo.reports[report.report_id]
        assert stored.status == ReportStatus.OPEN
        assert stored.action is None
        assert stored.moderator_id is None

        del videos_repo.set_status_many
        resolved = await moderation_service.resolve_report(
            report.report_id, "ban", MOD, moderator.account_id
        )
        assert resolved.status == ReportStatus.RESOLVED
        assert videos_repo.videos[video.video_id].status == VideoStatus.BANNED

    @pytest.mark.asyncio
    async def test_listing_by_status(self, moderation_service, moderator, viewer, creator, video):
        kept = await moderation_service.create_report(viewer.account_id, video.video_id, "a")
        closed = await moderation_service.create_report(
            creator.account_id, video.video_id, "b"
        )
        await moderation_service.resolve_report(
            closed.report_id, "dismiss", MOD, moderator.account_id
        )

        open_reports = await moderation_service.list_reports(MOD, ReportStatus.OPEN)
        every_report = await moderation_service.list_reports(MOD)

        assert [r.report_id for r in open_reports] == [kept.report_id]
        assert {r.report_id for r in every_report} == {kept.report_id, closed.report_id}

    @pytest.mark.asyncio
    async def test_listing_requires_moderator(self, moderation_service):
        with pytest.raises(ForbiddenError):
            await moderation_service.list_reports(AccountRole.MEMBER)


class TestDirectActions:
    """Tests for hide_video, unhide_video and ban_account."""

    @pytest.mark.asyncio
    async def test_hide_is_idempotent(self, moderation_service, videos_repo, video):
        first = await moderation_service.hide_video(video.video_id, MOD)
        second = await moderation_service.hide_video(video.video_id, MOD)

        assert first.status == second.status == VideoStatus.BANNED
        assert videos_repo.videos[video.video_id].status == VideoStatus.BANNED

    @pytest.mark.asyncio
    async def test_hide_requires_moderator(self, moderation_service, video):
        with pytest.raises(ForbiddenError):
            await moderation_service.hide_video(video.video_id, AccountRole.MEMBER)

    @pytest.mark.asyncio
    async def test_unhide_restores(self, moderation_service, videos_repo, video):
        await moderation_service.hide_video(video.video_id, MOD)

        restored = await moderation_service.unhide_video(video.video_id, MOD)

        assert restored.status == VideoStatus.ACTIVE
        assert videos_repo.videos[video.video_id].status == VideoStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_unhide_active_is_noop(self, moderation_service, videos_repo, video):
        restored = await moderation_service.unhide_video(video.video_id, MOD)
        assert restored.status == VideoStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_unhide_pending_rejected(self, moderation_service, videos_repo, creator):
        pending = videos_repo.add(creator.account_id, status=VideoStatus.PENDING)

        with pytest.raises(InvalidOperationError):
            await moderation_service.unhide_video(pending.video_id, MOD)

    @pytest.mark.asyncio
    async def test_unhide_after_hiding_pending_activates(
        self, moderation_service, videos_repo, creator
    ):
        pending = videos_repo.add(creator.account_id, status=VideoStatus.PENDING)
        await moderation_service.hide_video(pending.video_id, MOD)

        restored = await moderation_service.unhide_video(pending.video_id, MOD)

        assert restored.status == VideoStatus.ACTIVE
        assert videos_repo.videos[pending.video_id].status == VideoStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_ban_account(
        self, moderation_service, videos_repo, accounts_repo, creator, video
    ):
        videos_repo.add(creator.account_id)

        swept = await moderation_service.ban_account(creator.account_id, MOD)

        assert swept == 2
        assert accounts_repo.accounts[creator.account_id].status == AccountStatus.BANNED
        assert all(
            v.status == VideoStatus.BANNED
            for v in videos_repo.videos.values()
            if v.owner_id == creator.account_id
        )

    @pytest.mark.asyncio
    async def test_ban_unknown_account(self, moderation_service):
        with pytest.raises(NotFoundError):
            await moderation_service.ban_account(uuid4(), MOD)


class TestModerationAction:
    """Tests for ModerationAction.parse."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("dismiss", ModerationAction.DISMISS),
            ("Hide", ModerationAction.HIDE),
            (" BAN ", ModerationAction.BAN),
        ],
    )
    def test_parse(self, raw, expected):
        assert ModerationAction.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(InvalidArgumentError):
            ModerationAction.parse("delete")

    def test_resulting_status(self):
        assert ModerationAction.DISMISS.resulting_status == ReportStatus.DISMISSED
        assert ModerationAction.HIDE.resulting_status == ReportStatus.RESOLVED
        assert ModerationAction.BAN.resulting_status == ReportStatus.RESOLVED
