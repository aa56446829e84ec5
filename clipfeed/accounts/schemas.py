"""Pydantic schemas for accounts and profiles."""

from uuid import UUID

from pydantic import BaseModel, Field

from clipfeed.auth.permissions import AccountRole

from .models import Account, AccountStatus, UserProfile


class ChangeRoleRequest(BaseModel):
    """Request to assign a role. Validated by the service."""

    role: str = Field(..., min_length=1, max_length=50)


class AccountResponse(BaseModel):
    id: UUID
    username: str
    role: AccountRole
    status: AccountStatus

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.account_id,
            username=account.username,
            role=account.role,
            status=account.status,
        )


class UserProfileResponse(BaseModel):
    """Public profile of an account."""

    id: UUID
    username: str
    avatar_url: str | None = None
    bio: str | None = None
    follower_count: int
    following_count: int
    video_count: int
    total_likes: int
    followed_by_current_user: bool

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileResponse":
        account = profile.account
        return cls(
            id=account.account_id,
            username=account.username,
            avatar_url=account.avatar_url,
            bio=account.bio,
            follower_count=profile.follower_count,
            following_count=profile.following_count,
            video_count=profile.video_count,
            total_likes=profile.total_likes,
            followed_by_current_user=profile.followed_by_current_user,
        )
