"""Cassandra access for like/follow edges and video counters.

Every edge mutation is a lightweight transaction and reports whether it was
applied; callers build toggles on top of that answer.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from clipfeed.core.database import was_applied

from .models import CounterName, VideoStats


if TYPE_CHECKING:
    from cassandra.cluster import Session


class EngagementRepository:
    """Edges, reverse lookups and compare-and-set counters."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        # Likes
        self._insert_like = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.video_likes
            (video_id, account_id, created_at)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)

        self._delete_like = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.video_likes
            WHERE video_id = ? AND account_id = ?
            IF EXISTS
        """)

        self._get_like = self.session.prepare(f"""
            SELECT account_id FROM {self.keyspace}.video_likes
            WHERE video_id = ? AND account_id = ?
        """)

        # Follows
        self._insert_follow = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.follows
            (follower_id, following_id, created_at)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)

        self._delete_follow = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.follows
            WHERE follower_id = ? AND following_id = ?
            IF EXISTS
        """)

        self._get_follow = self.session.prepare(f"""
            SELECT following_id FROM {self.keyspace}.follows
            WHERE follower_id = ? AND following_id = ?
        """)

        self._insert_follow_reverse = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.follows_by_following
            (following_id, follower_id, created_at)
            VALUES (?, ?, ?)
        """)

        self._delete_follow_reverse = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.follows_by_following
            WHERE following_id = ? AND follower_id = ?
        """)

        self._count_followers = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.follows_by_following
            WHERE following_id = ?
        """)

        self._count_following = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.follows
            WHERE follower_id = ?
        """)

        # Counters
        self._init_stats = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.video_stats
            (video_id, view_count, like_count, comment_count, share_count)
            VALUES (?, 0, 0, 0, 0)
            IF NOT EXISTS
        """)

        self._get_stats = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.video_stats
            WHERE video_id = ?
        """)

        # Column names cannot be bound, one statement per counter
        self._cas_counter = {
            counter: self.session.prepare(f"""
                UPDATE {self.keyspace}.video_stats
                SET {counter.value} = ?
                WHERE video_id = ?
                IF {counter.value} = ?
            """)
            for counter in CounterName
        }

    # ==========================================================================
    # Likes
    # ==========================================================================

    async def insert_like_if_absent(self, video_id: UUID, account_id: UUID) -> bool:
        result = await self.session.aexecute(
            self._insert_like, [video_id, account_id, datetime.now(UTC)]
        )
        return was_applied(result)

    async def delete_like_if_present(self, video_id: UUID, account_id: UUID) -> bool:
        result = await self.session.aexecute(self._delete_like, [video_id, account_id])
        return was_applied(result)

    async def like_exists(self, video_id: UUID, account_id: UUID) -> bool:
        result = await self.session.aexecute(self._get_like, [video_id, account_id])
        return result.one() is not None

    # ==========================================================================
    # Follows
    # ==========================================================================

    async def insert_follow_if_absent(
        self, follower_id: UUID, following_id: UUID
    ) -> bool:
        result = await self.session.aexecute(
            self._insert_follow, [follower_id, following_id, datetime.now(UTC)]
        )
        return was_applied(result)

    async def delete_follow_if_present(
        self, follower_id: UUID, following_id: UUID
    ) -> bool:
        result = await self.session.aexecute(
            self._delete_follow, [follower_id, following_id]
        )
        return was_applied(result)

    async def add_follow_reverse(self, follower_id: UUID, following_id: UUID) -> None:
        await self.session.aexecute(
            self._insert_follow_reverse, [following_id, follower_id, datetime.now(UTC)]
        )

    async def remove_follow_reverse(
        self, follower_id: UUID, following_id: UUID
    ) -> None:
        await self.session.aexecute(
            self._delete_follow_reverse, [following_id, follower_id]
        )

    async def follow_exists(self, follower_id: UUID, following_id: UUID) -> bool:
        result = await self.session.aexecute(
            self._get_follow, [follower_id, following_id]
        )
        return result.one() is not None

    async def count_followers(self, account_id: UUID) -> int:
        result = await self.session.aexecute(self._count_followers, [account_id])
        row = result.one()
        return row[0] if row else 0

    async def count_following(self, account_id: UUID) -> int:
        result = await self.session.aexecute(self._count_following, [account_id])
        row = result.one()
        return row[0] if row else 0

    # ==========================================================================
    # Counters
    # ==========================================================================

    async def init_stats(self, video_id: UUID) -> bool:
        """Create the zeroed counter row unless it already exists."""
        result = await self.session.aexecute(self._init_stats, [video_id])
        return was_applied(result)

    async def get_stats(self, video_id: UUID) -> VideoStats | None:
        result = await self.session.aexecute(self._get_stats, [video_id])
        row = result.one()
        return VideoStats.from_row(row) if row else None

    async def compare_and_set_counter(
        self, video_id: UUID, counter: CounterName, expected: int, value: int
    ) -> bool:
        """Write ``value`` only if the counter still holds ``expected``."""
        result = await self.session.aexecute(
            self._cas_counter[counter], [value, video_id, expected]
        )
        return was_applied(result)
