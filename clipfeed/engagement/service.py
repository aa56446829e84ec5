"""Engagement store service layer.

Business logic for:
- Like and follow toggles (lightweight-transaction edges)
- View, share and comment counters (compare-and-set, floored at zero)
- Edge and counter reads used by feed, profile and analytics

Each toggle pairs an edge mutation with its counter side effect. When the
counter side cannot be applied the edge change is reverted before the error
propagates, so a toggle is all-or-nothing.

Toggles on the same edge are serialized within the process: the edge write
and its counter update run under one lock, so an unlike can never apply its
decrement before the matching like applied its increment.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.core.errors import (
    ConcurrentUpdateError,
    InvalidOperationError,
    NotFoundError,
)

from .models import CounterName, VideoStats


if TYPE_CHECKING:
    from clipfeed.accounts.repository import AccountRepository
    from clipfeed.config.settings import Settings
    from clipfeed.videos.repository import VideoRepository

    from .repository import EngagementRepository


logger = structlog.get_logger(__name__)


@dataclass
class ToggleLikeResult:
    liked: bool


@dataclass
class ToggleFollowResult:
    following: bool


class KeyedLocks:
    """asyncio locks created per key and dropped once nobody holds or awaits them."""

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._holders: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class EngagementService:
    """Service for engagement edges and counters."""

    def __init__(
        self,
        repository: "EngagementRepository",
        videos: "VideoRepository",
        accounts: "AccountRepository",
        settings: "Settings",
    ):
        self.repository = repository
        self.videos = videos
        self.accounts = accounts
        self.settings = settings
        self._edge_locks = KeyedLocks()

    # ==========================================================================
    # Counters
    # ==========================================================================

    async def _apply_delta(
        self, video_id: UUID, counter: CounterName, delta: int
    ) -> int:
        """Add ``delta`` to a counter with a compare-and-set retry loop.

        The stored value never drops below zero; a delta that would only push
        it further down leaves it untouched.

        Returns:
            The counter value after the update

        Raises:
            ConcurrentUpdateError: If every attempt lost the race
        """
        attempts = self.settings.counter_cas_max_attempts
        for _ in range(attempts):
            stats = await self.repository.get_stats(video_id)
            if stats is None:
                await self.repository.init_stats(video_id)
                continue

            current = stats.get(counter)
            target = max(0, current + delta)
            if target == current:
                return current

            if await self.repository.compare_and_set_counter(
                video_id, counter, current, target
            ):
                return target

        raise ConcurrentUpdateError(
            f"Could not update {counter.value} for video {video_id} "
            f"after {attempts} attempts"
        )

    async def _require_video(self, video_id: UUID) -> None:
        if await self.videos.get(video_id) is None:
            raise NotFoundError(f"Video not found: {video_id}")

    # ==========================================================================
    # Toggles
    # ==========================================================================

    async def toggle_like(self, account_id: UUID, video_id: UUID) -> ToggleLikeResult:
        """Flip the like edge between ``account_id`` and ``video_id``.

        Raises:
            NotFoundError: If the video does not exist
            ConcurrentUpdateError: If the like counter could not be updated
        """
        await self._require_video(video_id)

        async with self._edge_locks.hold(("like", video_id, account_id)):
            liked, count = await self._flip_like(account_id, video_id)

        logger.info(
            "like_toggled",
            video_id=str(video_id),
            account_id=str(account_id),
            liked=liked,
            like_count=count,
        )
        return ToggleLikeResult(liked=liked)

    async def _flip_like(self, account_id: UUID, video_id: UUID) -> tuple[bool, int]:
        for _ in range(self.settings.counter_cas_max_attempts):
            if await self.repository.insert_like_if_absent(video_id, account_id):
                try:
                    count = await self._apply_delta(video_id, CounterName.LIKES, 1)
                except Exception:
                    await self.repository.delete_like_if_present(video_id, account_id)
                    raise
                return True, count

            if await self.repository.delete_like_if_present(video_id, account_id):
                try:
                    count = await self._apply_delta(video_id, CounterName.LIKES, -1)
                except Exception:
                    await self.repository.insert_like_if_absent(video_id, account_id)
                    raise
                return False, count

            # Edge changed hands between the two statements, start over

        raise ConcurrentUpdateError(f"Could not toggle like on video {video_id}")

    async def toggle_follow(
        self, follower_id: UUID, following_id: UUID
    ) -> ToggleFollowResult:
        """Flip the follow edge from ``follower_id`` to ``following_id``.

        Raises:
            InvalidOperationError: If an account tries to follow itself
            NotFoundError: If the followed account does not exist
        """
        if follower_id == following_id:
            raise InvalidOperationError("Accounts cannot follow themselves")

        if not await self.accounts.exists(following_id):
            raise NotFoundError(f"Account not found: {following_id}")

        async with self._edge_locks.hold(("follow", follower_id, following_id)):
            following = await self._flip_follow(follower_id, following_id)

        logger.info(
            "follow_toggled",
            follower_id=str(follower_id),
            following_id=str(following_id),
            following=following,
        )
        return ToggleFollowResult(following=following)

    async def _flip_follow(self, follower_id: UUID, following_id: UUID) -> bool:
        for _ in range(self.settings.counter_cas_max_attempts):
            if await self.repository.insert_follow_if_absent(follower_id, following_id):
                try:
                    await self.repository.add_follow_reverse(follower_id, following_id)
                except Exception:
                    await self.repository.delete_follow_if_present(
                        follower_id, following_id
                    )
                    raise
                return True

            if await self.repository.delete_follow_if_present(follower_id, following_id):
                try:
                    await self.repository.remove_follow_reverse(
                        follower_id, following_id
                    )
                except Exception:
                    await self.repository.insert_follow_if_absent(
                        follower_id, following_id
                    )
                    raise
                return False

        raise ConcurrentUpdateError(f"Could not toggle follow on {following_id}")

    # ==========================================================================
    # Counter operations
    # ==========================================================================

    async def increment_view(
        self,
        video_id: UUID,
        watch_duration_seconds: float = 0,
        completed: bool = False,
        viewer_id: UUID | None = None,
    ) -> int:
        """Count one view. Every call counts, whatever was watched.

        Returns:
            The new view count
        """
        await self._require_video(video_id)
        count = await self._apply_delta(video_id, CounterName.VIEWS, 1)
        logger.info(
            "view_recorded",
            video_id=str(video_id),
            viewer_id=str(viewer_id) if viewer_id else None,
            watch_duration_seconds=watch_duration_seconds,
            completed=completed,
            view_count=count,
        )
        return count

    async def increment_share(self, video_id: UUID) -> str:
        """Count one share and return the deep link to hand out."""
        await self._require_video(video_id)
        count = await self._apply_delta(video_id, CounterName.SHARES, 1)
        logger.info("share_recorded", video_id=str(video_id), share_count=count)
        return f"{self.settings.share_link_prefix}{video_id}"

    async def record_comment_count_delta(self, video_id: UUID, delta: int) -> int:
        return await self._apply_delta(video_id, CounterName.COMMENTS, delta)

    async def init_stats(self, video_id: UUID) -> None:
        await self.repository.init_stats(video_id)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get_stats(self, video_id: UUID) -> VideoStats:
        """Counters of a video; all zero if none were recorded yet."""
        stats = await self.repository.get_stats(video_id)
        return stats or VideoStats(video_id=video_id)

    async def is_liked(self, account_id: UUID | None, video_id: UUID) -> bool:
        if account_id is None:
            return False
        return await self.repository.like_exists(video_id, account_id)

    async def is_following(self, follower_id: UUID | None, following_id: UUID) -> bool:
        if follower_id is None or follower_id == following_id:
            return False
        return await self.repository.follow_exists(follower_id, following_id)

    async def count_followers(self, account_id: UUID) -> int:
        return await self.repository.count_followers(account_id)

    async def count_following(self, account_id: UUID) -> int:
        return await self.repository.count_following(account_id)
