"""Pydantic schemas for likes, follows, shares and views."""

from pydantic import BaseModel, Field


# ==============================================================================
# Request Schemas
# ==============================================================================


class RecordViewRequest(BaseModel):
    """Watch report sent by the player. Every report counts as one view."""

    watch_duration_seconds: float = Field(0, ge=0)
    completed: bool = False


# ==============================================================================
# Response Schemas
# ==============================================================================


class LikeResponse(BaseModel):
    """Like state after a toggle or status check."""

    liked: bool
    message: str | None = None


class FollowResponse(BaseModel):
    """Follow state after a toggle."""

    following: bool
    message: str | None = None


class FollowStatusResponse(BaseModel):
    """Follow state with the target's follower count."""

    following: bool
    follower_count: int


class ShareResponse(BaseModel):
    """Deep link handed out for a share."""

    share_link: str


class ViewResponse(BaseModel):
    view_count: int
