"""Tests for the comment tree.

Covers:
- One-level nesting and reply-to-reply flattening
- Nested and flat listing order
- Cascade deletion and comment_count bookkeeping
- Author, parent and content validation
- Redis rate limiting
"""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from clipfeed.comments.models import CommentThread
from clipfeed.comments.service import CommentService, sanitize_content
from clipfeed.core.errors import (
    ConcurrentUpdateError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    RateLimitExceededError,
)


@pytest.fixture
def mock_redis():
    """Mock Redis client whose pipeline reports ``count`` hits."""
    redis_mock = AsyncMock()
    mock_pipe = Mock()
    mock_pipe.incr = Mock()
    mock_pipe.expire = Mock()
    mock_pipe.execute = AsyncMock(return_value=[1, True])
    redis_mock.pipeline = Mock(return_value=mock_pipe)
    return redis_mock


def _age(comments_repo, comment, minutes_ago: int) -> None:
    """Pin a stored comment's timestamp so ordering is deterministic."""
    comments_repo.comments[comment.comment_id].created_at = datetime.now(UTC) - timedelta(
        minutes=minutes_ago
    )


class TestAddComment:
    """Tests for add_comment."""

    @pytest.mark.asyncio
    async def test_top_level_comment(self, comment_service, engagement_repo, viewer, video):
        comment = await comment_service.add_comment(
            viewer.account_id, video.video_id, "  nice clip  "
        )

        assert comment.parent_id is None
        assert comment.reply_to_id is None
        assert comment.content == "nice clip"
        assert comment.author_name == "viewer"
        assert engagement_repo.stats[video.video_id].comment_count == 1

    @pytest.mark.asyncio
    async def test_content_is_escaped(self, comment_service, viewer, video):
        comment = await comment_service.add_comment(
            viewer.account_id, video.video_id, "<b>hi</b>"
        )
        assert comment.content == "&lt;b&gt;hi&lt;/b&gt;"

    @pytest.mark.asyncio
    async def test_reply_attaches_to_parent(self, comment_service, viewer, creator, video):
        parent = await comment_service.add_comment(creator.account_id, video.video_id, "first")
        reply = await comment_service.add_comment(
            viewer.account_id, video.video_id, "reply", parent_id=parent.comment_id
        )

        assert reply.parent_id == parent.comment_id
        assert reply.reply_to_id == parent.comment_id

    @pytest.mark.asyncio
    async def test_reply_to_reply_is_flattened(
        self, comment_service, engagement_repo, viewer, creator, video
    ):
        root = await comment_service.add_comment(creator.account_id, video.video_id, "root")
        reply = await comment_service.add_comment(
            viewer.account_id, video.video_id, "reply", parent_id=root.comment_id
        )
        nested = await comment_service.add_comment(
            creator.account_id, video.video_id, "answer", parent_id=reply.comment_id
        )

        assert nested.parent_id == root.comment_id
        assert nested.reply_to_id == reply.comment_id
        assert engagement_repo.stats[video.video_id].comment_count == 3

    @pytest.mark.asyncio
    async def test_unknown_video(self, comment_service, viewer):
        with pytest.raises(NotFoundError):
            await comment_service.add_comment(viewer.account_id, uuid4(), "hello")

    @pytest.mark.asyncio
    async def test_unknown_author(self, comment_service, video):
        with pytest.raises(NotFoundError):
            await comment_service.add_comment(uuid4(), video.video_id, "hello")

    @pytest.mark.asyncio
    async def test_unknown_parent(self, comment_service, viewer, video):
        with pytest.raises(NotFoundError):
            await comment_service.add_comment(
                viewer.account_id, video.video_id, "hello", parent_id=uuid4()
            )

    @pytest.mark.asyncio
    async def test_parent_on_other_video(
        self, comment_service, videos_repo, engagement_repo, viewer, creator, video
    ):
        other = videos_repo.add(creator.account_id)
        engagement_repo.set_stats(other.video_id)
        parent = await comment_service.add_comment(viewer.account_id, other.video_id, "x")

        with pytest.raises(NotFoundError):
            await comment_service.add_comment(
                viewer.account_id, video.video_id, "y", parent_id=parent.comment_id
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_blank_content(self, comment_service, comments_repo, viewer, video, content):
        with pytest.raises(InvalidArgumentError):
            await comment_service.add_comment(viewer.account_id, video.video_id, content)
        assert comments_repo.comments == {}

    @pytest.mark.asyncio
    async def test_counter_failure_removes_comment(
        self, comment_service, comments_repo, engagement_repo, viewer, video
    ):
        engagement_repo.cas_always_conflicts = True

        with pytest.raises(ConcurrentUpdateError):
            await comment_service.add_comment(viewer.account_id, video.video_id, "hello")

        assert comments_repo.comments == {}


class TestRateLimit:
    """Tests for the per-author comment limits."""

    @pytest.mark.asyncio
    async def test_under_limit(
        self, comments_repo, videos_repo, accounts_repo, engagement_service, settings,
        mock_redis, viewer, video,
    ):
        service = CommentService(
            comments_repo, videos_repo, accounts_repo, engagement_service, settings,
            redis=mock_redis,
        )

        await service.add_comment(viewer.account_id, video.video_id, "hello")

        pipe = mock_redis.pipeline.return_value
        keys = [call.args[0] for call in pipe.incr.call_args_list]
        assert keys == [
            f"comments:rate:{viewer.account_id}:minute",
            f"comments:rate:{viewer.account_id}:hour",
        ]

    @pytest.mark.asyncio
    async def test_over_limit(
        self, comments_repo, videos_repo, accounts_repo, engagement_service, settings,
        engagement_repo, mock_redis, viewer, video,
    ):
        mock_redis.pipeline.return_value.execute = AsyncMock(
            return_value=[settings.comments_per_minute + 1, True]
        )
        service = CommentService(
            comments_repo, videos_repo, accounts_repo, engagement_service, settings,
            redis=mock_redis,
        )

        with pytest.raises(RateLimitExceededError):
            await service.add_comment(viewer.account_id, video.video_id, "hello")

        assert comments_repo.comments == {}
        assert engagement_repo.stats[video.video_id].comment_count == 0


class TestListComments:
    """Tests for list_comments."""

    @pytest.mark.asyncio
    async def test_nested_order(self, comment_service, comments_repo, viewer, creator, video):
        older = await comment_service.add_comment(creator.account_id, video.video_id, "older")
        newer = await comment_service.add_comment(viewer.account_id, video.video_id, "newer")
        late_reply = await comment_service.add_comment(
            viewer.account_id, video.video_id, "late", parent_id=older.comment_id
        )
        early_reply = await comment_service.add_comment(
            creator.account_id, video.video_id, "early", parent_id=older.comment_id
        )
        _age(comments_repo, older, 60)
        _age(comments_repo, newer, 30)
        _age(comments_repo, early_reply, 20)
        _age(comments_repo, late_reply, 10)

        threads = await comment_service.list_comments(video.video_id)

        assert all(isinstance(t, CommentThread) for t in threads)
        assert [t.comment.comment_id for t in threads] == [
            newer.comment_id,
            older.comment_id,
        ]
        assert threads[0].replies == []
        assert [r.comment_id for r in threads[1].replies] == [
            early_reply.comment_id,
            late_reply.comment_id,
        ]

    @pytest.mark.asyncio
    async def test_flat_newest_first(self, comment_service, comments_repo, viewer, video):
        first = await comment_service.add_comment(viewer.account_id, video.video_id, "a")
        second = await comment_service.add_comment(
            viewer.account_id, video.video_id, "b", parent_id=first.comment_id
        )
        _age(comments_repo, first, 5)
        _age(comments_repo, second, 1)

        comments = await comment_service.list_comments(video.video_id, nested=False)

        assert [c.comment_id for c in comments] == [second.comment_id, first.comment_id]

    @pytest.mark.asyncio
    async def test_unknown_video(self, comment_service):
        with pytest.raises(NotFoundError):
            await comment_service.list_comments(uuid4())


class TestDeleteComment:
    """Tests for delete_comment."""

    @pytest.mark.asyncio
    async def test_cascade_removes_replies(
        self, comment_service, comments_repo, engagement_repo, viewer, creator, video
    ):
        root = await comment_service.add_comment(viewer.account_id, video.video_id, "root")
        for text in ("r1", "r2"):
            await comment_service.add_comment(
                creator.account_id, video.video_id, text, parent_id=root.comment_id
            )
        keep = await comment_service.add_comment(creator.account_id, video.video_id, "keep")
        assert engagement_repo.stats[video.video_id].comment_count == 4

        removed = await comment_service.delete_comment(root.comment_id, viewer.account_id)

        assert removed == 3
        assert list(comments_repo.comments) == [keep.comment_id]
        assert engagement_repo.stats[video.video_id].comment_count == 1

    @pytest.mark.asyncio
    async def test_delete_reply_only(
        self, comment_service, comments_repo, engagement_repo, viewer, creator, video
    ):
        root = await comment_service.add_comment(creator.account_id, video.video_id, "root")
        reply = await comment_service.add_comment(
            viewer.account_id, video.video_id, "reply", parent_id=root.comment_id
        )

        removed = await comment_service.delete_comment(reply.comment_id, viewer.account_id)

        assert removed == 1
        assert set(comments_repo.comments) == {root.comment_id}
        assert engagement_repo.stats[video.video_id].comment_count == 1

    @pytest.mark.asyncio
    async def test_only_author_may_delete(
        self, comment_service, comments_repo, viewer, creator, video
    ):
        comment = await comment_service.add_comment(viewer.account_id, video.video_id, "mine")

        with pytest.raises(ForbiddenError):
            await comment_service.delete_comment(comment.comment_id, creator.account_id)

        assert comment.comment_id in comments_repo.comments

    @pytest.mark.asyncio
    async def test_unknown_comment(self, comment_service, viewer):
        with pytest.raises(NotFoundError):
            await comment_service.delete_comment(uuid4(), viewer.account_id)

    @pytest.mark.asyncio
    async def test_concurrent_deletes_count_once(
        self, comment_service, comments_repo, engagement_repo, viewer, video
    ):
        gone = await comment_service.add_comment(viewer.account_id, video.video_id, "gone")
        kept = await comment_service.add_comment(viewer.account_id, video.video_id, "kept")
        assert engagement_repo.stats[video.video_id].comment_count == 2

        results = await asyncio.gather(
            comment_service.delete_comment(gone.comment_id, viewer.account_id),
            comment_service.delete_comment(gone.comment_id, viewer.account_id),
            return_exceptions=True,
        )

        assert 1 in results
        assert sum(isinstance(r, NotFoundError) for r in results) == 1
        assert list(comments_repo.comments) == [kept.comment_id]
        assert engagement_repo.stats[video.video_id].comment_count == 1

    @pytest.mark.asyncio
    async def test_root_and_reply_deleted_concurrently(
        self, comment_service, comments_repo, engagement_repo, viewer, creator, video
    ):
        root = await comment_service.add_comment(viewer.account_id, video.video_id, "root")
        reply = await comment_service.add_comment(
            creator.account_id, video.video_id, "reply", parent_id=root.comment_id
        )

        await asyncio.gather(
            comment_service.delete_comment(root.comment_id, viewer.account_id),
            comment_service.delete_comment(reply.comment_id, creator.account_id),
            return_exceptions=True,
        )

        assert comments_repo.comments == {}
        assert engagement_repo.stats[video.video_id].comment_count == 0

    @pytest.mark.asyncio
    async def test_counter_failure_restores_thread(
        self, comment_service, comments_repo, engagement_repo, viewer, creator, video
    ):
        root = await comment_service.add_comment(viewer.account_id, video.video_id, "root")
        reply = await comment_service.add_comment(
            creator.account_id, video.video_id, "reply", parent_id=root.comment_id
        )
        engagement_repo.cas_always_conflicts = True

        with pytest.raises(ConcurrentUpdateError):
            await comment_service.delete_comment(root.comment_id, viewer.account_id)

        assert set(comments_repo.comments) == {root.comment_id, reply.comment_id}
        assert comments_repo.comments[reply.comment_id].parent_id == root.comment_id
        assert engagement_repo.stats[video.video_id].comment_count == 2


class TestSanitizeContent:
    """Tests for sanitize_content."""

    def test_strips_and_escapes(self):
        assert sanitize_content('  "a" & <b>  ') == "&quot;a&quot; &amp; &lt;b&gt;"

    def test_blank(self):
        assert sanitize_content("   ") == ""
