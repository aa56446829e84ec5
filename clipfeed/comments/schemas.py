"""Pydantic schemas for comments.

Request/Response models with validation for:
- Posting comments and replies
- Flat and threaded listings
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Comment, CommentThread


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to create a new comment."""

    video_id: UUID
    parent_id: UUID | None = None
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and validate content."""
        v = v.strip()
        if not v:
            msg = "Content cannot be empty"
            raise ValueError(msg)
        return v


# ==============================================================================
# Response Schemas
# ==============================================================================


class AuthorResponse(BaseModel):
    """Author information in comment response."""

    id: UUID
    name: str
    avatar: str | None = None


class CommentResponse(BaseModel):
    """Response for a single comment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    video_id: UUID
    parent_id: UUID | None = None
    reply_to_id: UUID | None = None
    author: AuthorResponse
    content: str
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.comment_id,
            video_id=comment.video_id,
            parent_id=comment.parent_id,
            reply_to_id=comment.reply_to_id,
            author=AuthorResponse(
                id=comment.author_id,
                name=comment.author_name,
                avatar=comment.author_avatar,
            ),
            content=comment.content,
            created_at=comment.created_at,
        )


class CommentWithRepliesResponse(CommentResponse):
    """Comment with nested replies."""

    replies: list[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_thread(cls, thread: CommentThread) -> "CommentWithRepliesResponse":
        base = CommentResponse.from_comment(thread.comment)
        return cls(
            **base.model_dump(),
            replies=[CommentResponse.from_comment(reply) for reply in thread.replies],
        )


class CommentListResponse(BaseModel):
    """Comments of a video, threaded or flat."""

    items: list[CommentWithRepliesResponse]
    total: int


class DeleteCommentResponse(BaseModel):
    """Result of a cascade delete."""

    removed: int
