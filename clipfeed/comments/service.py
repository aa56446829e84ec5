"""Comment tree service layer.

Business logic for:
- Posting comments and replies (replies never nest past one level)
- Listing a video's comments flat or as threads
- Cascade deletion of a comment and its replies
- Per-author rate limiting (Redis-based)

Every structural change is mirrored on the video's ``comment_count``.
"""

import html
from collections import defaultdict
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.core.errors import ForbiddenError, InvalidArgumentError, NotFoundError
from clipfeed.core.redis import enforce_rate_limit

from .models import Comment, CommentThread, create_comment


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from clipfeed.accounts.repository import AccountRepository
    from clipfeed.config.settings import Settings
    from clipfeed.engagement.service import EngagementService
    from clipfeed.videos.repository import VideoRepository

    from .repository import CommentRepository


logger = structlog.get_logger(__name__)


def sanitize_content(content: str) -> str:
    """Trim surrounding whitespace and escape HTML entities."""
    return html.escape(content.strip())


class CommentService:
    """Service for comment management."""

    def __init__(
        self,
        repository: "CommentRepository",
        videos: "VideoRepository",
        accounts: "AccountRepository",
        engagement: "EngagementService",
        settings: "Settings",
        redis: "Redis | None" = None,
    ):
        self.repository = repository
        self.videos = videos
        self.accounts = accounts
        self.engagement = engagement
        self.settings = settings
        self.redis = redis

    async def _check_rate_limit(self, author_id: UUID) -> None:
        await enforce_rate_limit(
            self.redis,
            f"comments:rate:{author_id}:minute",
            self.settings.comments_per_minute,
            60,
            "Too many comments per minute. Wait a moment.",
        )
        await enforce_rate_limit(
            self.redis,
            f"comments:rate:{author_id}:hour",
            self.settings.comments_per_hour,
            3600,
            "Hourly comment limit exceeded.",
        )

    async def _require_video(self, video_id: UUID) -> None:
        if await self.videos.get(video_id) is None:
            raise NotFoundError(f"Video not found: {video_id}")

    async def add_comment(
        self,
        author_id: UUID,
        video_id: UUID,
        content: str,
        parent_id: UUID | None = None,
    ) -> Comment:
        """Post a comment, or a reply when ``parent_id`` is given.

        A reply to a reply is attached to the top-level ancestor and keeps
        the answered comment in ``reply_to_id``.

        Raises:
            NotFoundError: If the video, author or parent does not resolve
            InvalidArgumentError: If the content is blank
            RateLimitExceededError: If the author is over the comment limits
        """
        await self._require_video(video_id)

        author = await self.accounts.get(author_id)
        if author is None:
            raise NotFoundError(f"Account not found: {author_id}")

        root_id = None
        reply_to_id = None
        if parent_id is not None:
            parent = await self.repository.get(parent_id)
            if parent is None or parent.video_id != video_id:
                raise NotFoundError(f"Parent comment not found: {parent_id}")
            root_id = parent.parent_id or parent.comment_id
            reply_to_id = parent.comment_id

        text = sanitize_content(content)
        if not text:
            raise InvalidArgumentError("Comment content cannot be empty")

        await self._check_rate_limit(author_id)

        comment = create_comment(
            video_id=video_id,
            author_id=author_id,
            author_name=author.username,
            content=text,
            parent_id=root_id,
            reply_to_id=reply_to_id,
            author_avatar=author.avatar_url,
        )
        await self.repository.insert(comment)

        try:
            await self.engagement.record_comment_count_delta(video_id, 1)
        except Exception:
            await self.repository.delete_thread(comment, [])
            raise

        logger.info(
            "comment_created",
            comment_id=str(comment.comment_id),
            video_id=str(video_id),
            author_id=str(author_id),
            is_reply=root_id is not None,
        )
        return comment

    async def list_comments(
        self, video_id: UUID, nested: bool = True
    ) -> list[CommentThread] | list[Comment]:
        """List a video's comments.

        Nested: top-level comments newest first, each with its replies oldest
        first. Flat: every comment newest first.
        """
        await self._require_video(video_id)
        comments = await self.repository.list_by_video(video_id)
        comments.sort(key=lambda c: (c.created_at, str(c.comment_id)))
        comments.reverse()
        if not nested:
            return comments

        replies: dict[UUID, list[Comment]] = defaultdict(list)
        for comment in comments:
            if comment.parent_id is not None:
                replies[comment.parent_id].append(comment)

        return [
            CommentThread(
                comment=comment,
                replies=sorted(
                    replies.get(comment.comment_id, []),
                    key=lambda c: (c.created_at, str(c.comment_id)),
                ),
            )
            for comment in comments
            if comment.is_top_level
        ]

    async def delete_comment(self, comment_id: UUID, requester_id: UUID) -> int:
        """Delete a comment with all of its replies.

        Each comment is claimed with a conditional delete before it is
        counted, so concurrent deletes of the same comment or of one of its
        replies decrement ``comment_count`` once per comment. If the counter
        cannot be updated the removed comments are restored.

        Returns:
            Number of comments removed

        Raises:
            NotFoundError: If the comment does not exist
            ForbiddenError: If the requester is not the author
        """
        comment = await self.repository.get(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment not found: {comment_id}")

        if comment.author_id != requester_id:
            raise ForbiddenError("Only the author can delete this comment")

        replies = (
            await self.repository.list_replies(comment_id) if comment.is_top_level else []
        )

        if not await self.repository.claim_delete(comment_id):
            raise NotFoundError(f"Comment not found: {comment_id}")

        claimed = [
            reply
            for reply in replies
            if await self.repository.claim_delete(reply.comment_id)
        ]
        await self.repository.delete_thread(comment, claimed)

        removed = 1 + len(claimed)
        try:
            await self.engagement.record_comment_count_delta(
                comment.video_id, -removed
            )
        except Exception:
            for item in [comment, *claimed]:
                await self.repository.insert(item)
            raise

        logger.info(
            "comment_deleted",
            comment_id=str(comment_id),
            video_id=str(comment.video_id),
            removed=removed,
        )
        return removed
