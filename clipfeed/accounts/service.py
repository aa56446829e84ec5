"""Account service layer.

Business logic for:
- Public profiles (follower/following counts, videos, total likes)
- Role escalation by administrators
"""

import asyncio
import dataclasses
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.auth.permissions import AccountRole, is_administrator
from clipfeed.core.errors import ForbiddenError, InvalidArgumentError, NotFoundError

from .models import Account, UserProfile


if TYPE_CHECKING:
    from clipfeed.engagement.service import EngagementService
    from clipfeed.videos.repository import VideoRepository

    from .repository import AccountRepository


logger = structlog.get_logger(__name__)


class AccountService:
    """Service for account profiles and roles."""

    def __init__(
        self,
        repository: "AccountRepository",
        videos: "VideoRepository",
        engagement: "EngagementService",
    ):
        self.repository = repository
        self.videos = videos
        self.engagement = engagement

    async def get_account(self, account_id: UUID) -> Account:
        account = await self.repository.get(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")
        return account

    async def get_user_profile(
        self, account_id: UUID, viewer_id: UUID | None = None
    ) -> UserProfile:
        """Build the profile of ``account_id`` as seen by ``viewer_id``.

        ``video_count`` counts active videos only; ``total_likes`` sums likes
        over every video the account owns.
        """
        account = await self.get_account(account_id)

        videos = await self.videos.list_by_owner(account_id)
        stats = await asyncio.gather(
            *(self.engagement.get_stats(video.video_id) for video in videos)
        )

        return UserProfile(
            account=account,
            follower_count=await self.engagement.count_followers(account_id),
            following_count=await self.engagement.count_following(account_id),
            video_count=sum(1 for video in videos if video.is_active),
            total_likes=sum(item.like_count for item in stats),
            followed_by_current_user=await self.engagement.is_following(
                viewer_id, account_id
            ),
        )

    async def change_role(
        self, actor_role: AccountRole | str, account_id: UUID, new_role: str
    ) -> Account:
        """Assign ``new_role`` to an account.

        Raises:
            ForbiddenError: If the actor is not an administrator
            NotFoundError: If the account does not exist
            InvalidArgumentError: If the role is unknown
        """
        if not is_administrator(actor_role):
            raise ForbiddenError("Administrator role required")

        account = await self.get_account(account_id)

        try:
            role = AccountRole(new_role.strip().lower())
        except (ValueError, AttributeError) as e:
            raise InvalidArgumentError(f"Invalid role: {new_role}") from e

        if role != account.role:
            await self.repository.set_role(account_id, role)
            logger.info(
                "role_changed",
                account_id=str(account_id),
                old_role=account.role.value,
                new_role=role.value,
            )
        return dataclasses.replace(account, role=role)
