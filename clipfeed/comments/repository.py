"""Cassandra access for the comment tables."""

from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from clipfeed.core.database import was_applied

from .models import Comment


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CommentRepository:
    """Keeps comments, comments_by_id and comments_by_parent in step."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (video_id, created_at, comment_id, parent_id, reply_to_id, author_id,
             author_name, author_avatar, content)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_comment_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_id
            (comment_id, video_id, parent_id, reply_to_id, author_id,
             author_name, author_avatar, content, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_comment_by_parent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_parent
            (parent_id, created_at, comment_id, video_id, reply_to_id, author_id,
             author_name, author_avatar, content)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_comment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
        """)

        self._get_comments_by_video = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
            WHERE video_id = ?
        """)

        self._get_replies = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments_by_parent
            WHERE parent_id = ?
        """)

        self._delete_comment = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments
            WHERE video_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_comment_by_id = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
        """)

        self._claim_comment = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
            IF EXISTS
        """)

        self._delete_comment_by_parent = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_parent
            WHERE parent_id = ? AND created_at = ? AND comment_id = ?
        """)

    async def insert(self, comment: Comment) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._insert_comment,
            [
                comment.video_id,
                comment.created_at,
                comment.comment_id,
                comment.parent_id,
                comment.reply_to_id,
                comment.author_id,
                comment.author_name,
                comment.author_avatar,
                comment.content,
            ],
        )
        batch.add(
            self._insert_comment_by_id,
            [
                comment.comment_id,
                comment.video_id,
                comment.parent_id,
                comment.reply_to_id,
                comment.author_id,
                comment.author_name,
                comment.author_avatar,
                comment.content,
                comment.created_at,
            ],
        )
        if comment.parent_id is not None:
            batch.add(
                self._insert_comment_by_parent,
                [
                    comment.parent_id,
                    comment.created_at,
                    comment.comment_id,
                    comment.video_id,
                    comment.reply_to_id,
                    comment.author_id,
                    comment.author_name,
                    comment.author_avatar,
                    comment.content,
                ],
            )
        await self.session.aexecute(batch)

    async def get(self, comment_id: UUID) -> Comment | None:
        result = await self.session.aexecute(self._get_comment, [comment_id])
        row = result.one()
        return Comment.from_row(row) if row else None

    async def list_by_video(self, video_id: UUID) -> list[Comment]:
        """All comments of a video, newest first."""
        result = await self.session.aexecute(self._get_comments_by_video, [video_id])
        return [Comment.from_row(row) for row in result]

    async def list_replies(self, parent_id: UUID) -> list[Comment]:
        """Direct replies of a top-level comment, oldest first."""
        result = await self.session.aexecute(self._get_replies, [parent_id])
        return [Comment.from_row(row) for row in result]

    async def claim_delete(self, comment_id: UUID) -> bool:
        """Remove the lookup row of a comment if it is still there.

        Only one of several concurrent deletes of the same comment sees this
        applied; the others find it gone.
        """
        result = await self.session.aexecute(self._claim_comment, [comment_id])
        return was_applied(result)

    async def delete_thread(self, comment: Comment, replies: list[Comment]) -> None:
        """Remove a comment and the given replies in one logged batch."""
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        for item in [*replies, comment]:
            batch.add(
                self._delete_comment,
                [item.video_id, item.created_at, item.comment_id],
            )
            batch.add(self._delete_comment_by_id, [item.comment_id])
            if item.parent_id is not None:
                batch.add(
                    self._delete_comment_by_parent,
                    [item.parent_id, item.created_at, item.comment_id],
                )
        await self.session.aexecute(batch)
