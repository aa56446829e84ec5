"""Database models for threaded video comments.

Cassandra table definitions for:
- comments: Per-video timeline, newest first
- comments_by_id: O(1) lookup by comment id
- comments_by_parent: Replies of a top-level comment, oldest first

Architecture: two-level adjacency list
- parent_id is NULL for top-level comments
- a reply always points at its top-level ancestor; reply_to_id keeps the
  comment that was actually answered, so threads never nest deeper
- author name/avatar are denormalized for read-heavy listing
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COMMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    video_id UUID,
    created_at TIMESTAMP,
    comment_id UUID,
    parent_id UUID,
    reply_to_id UUID,
    author_id UUID,
    author_name TEXT,
    author_avatar TEXT,
    content TEXT,
    PRIMARY KEY ((video_id), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at DESC, comment_id ASC)
"""

COMMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_id (
    comment_id UUID PRIMARY KEY,
    video_id UUID,
    parent_id UUID,
    reply_to_id UUID,
    author_id UUID,
    author_name TEXT,
    author_avatar TEXT,
    content TEXT,
    created_at TIMESTAMP
)
"""

COMMENTS_BY_PARENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_parent (
    parent_id UUID,
    created_at TIMESTAMP,
    comment_id UUID,
    video_id UUID,
    reply_to_id UUID,
    author_id UUID,
    author_name TEXT,
    author_avatar TEXT,
    content TEXT,
    PRIMARY KEY ((parent_id), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at ASC, comment_id ASC)
"""

COMMENTS_TABLES_CQL = [
    COMMENT_TABLE_CQL,
    COMMENTS_BY_ID_TABLE_CQL,
    COMMENTS_BY_PARENT_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Comment:
    """Comment entity."""

    comment_id: UUID
    video_id: UUID
    parent_id: UUID | None
    reply_to_id: UUID | None
    author_id: UUID
    author_name: str
    author_avatar: str | None
    content: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment from Cassandra row."""
        created_at = row.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return cls(
            comment_id=row.comment_id,
            video_id=row.video_id,
            parent_id=row.parent_id,
            reply_to_id=row.reply_to_id,
            author_id=row.author_id,
            author_name=row.author_name or "user",
            author_avatar=row.author_avatar,
            content=row.content,
            created_at=created_at,
        )

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None


@dataclass
class CommentThread:
    """A top-level comment with its direct replies, oldest first."""

    comment: Comment
    replies: list[Comment] = field(default_factory=list)


def create_comment(
    video_id: UUID,
    author_id: UUID,
    author_name: str,
    content: str,
    parent_id: UUID | None = None,
    reply_to_id: UUID | None = None,
    author_avatar: str | None = None,
) -> Comment:
    """Create a new comment entity."""
    return Comment(
        comment_id=uuid4(),
        video_id=video_id,
        parent_id=parent_id,
        reply_to_id=reply_to_id,
        author_id=author_id,
        author_name=author_name,
        author_avatar=author_avatar,
        content=content,
        created_at=datetime.now(UTC),
    )
