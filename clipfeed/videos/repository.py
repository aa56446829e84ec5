"""Cassandra access for video records."""

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from .models import Video, VideoStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class VideoRepository:
    """Video rows and the owner lookup table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_video = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.videos
            (video_id, owner_id, title, description, blob_key, thumbnail_url,
             duration_seconds, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_video_by_owner = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.videos_by_owner
            (owner_id, video_id, created_at)
            VALUES (?, ?, ?)
        """)

        self._get_video = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.videos
            WHERE video_id = ?
        """)

        # Uses secondary index on status
        self._get_videos_by_status = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.videos
            WHERE status = ?
        """)

        self._get_owner_video_ids = self.session.prepare(f"""
            SELECT video_id FROM {self.keyspace}.videos_by_owner
            WHERE owner_id = ?
        """)

        self._update_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.videos
            SET status = ?, updated_at = ?
            WHERE video_id = ?
        """)

    async def insert(self, video: Video) -> None:
        """Write the video and its owner lookup row atomically."""
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._insert_video,
            [
                video.video_id,
                video.owner_id,
                video.title,
                video.description,
                video.blob_key,
                video.thumbnail_url,
                video.duration_seconds,
                video.status.value,
                video.created_at,
                video.updated_at,
            ],
        )
        batch.add(
            self._insert_video_by_owner,
            [video.owner_id, video.video_id, video.created_at],
        )
        await self.session.aexecute(batch)

    async def get(self, video_id: UUID) -> Video | None:
        result = await self.session.aexecute(self._get_video, [video_id])
        row = result.one()
        return Video.from_row(row) if row else None

    async def list_by_status(self, status: VideoStatus) -> list[Video]:
        result = await self.session.aexecute(self._get_videos_by_status, [status.value])
        return [Video.from_row(row) for row in result]

    async def list_owner_video_ids(self, owner_id: UUID) -> list[UUID]:
        result = await self.session.aexecute(self._get_owner_video_ids, [owner_id])
        return [row.video_id for row in result]

    async def list_by_owner(self, owner_id: UUID) -> list[Video]:
        video_ids = await self.list_owner_video_ids(owner_id)
        videos = await asyncio.gather(*(self.get(video_id) for video_id in video_ids))
        return [video for video in videos if video is not None]

    async def set_status(self, video_id: UUID, status: VideoStatus) -> None:
        await self.session.aexecute(
            self._update_status, [status.value, datetime.now(UTC), video_id]
        )

    async def set_status_many(
        self, video_ids: list[UUID], status: VideoStatus, batch_size: int
    ) -> int:
        """Set ``status`` on every video, one logged batch per chunk.

        Returns:
            Number of batches written
        """
        now = datetime.now(UTC)
        batches = 0
        for start in range(0, len(video_ids), batch_size):
            batch = BatchStatement(batch_type=BatchType.LOGGED)
            for video_id in video_ids[start : start + batch_size]:
                batch.add(self._update_status, [status.value, now, video_id])
            await self.session.aexecute(batch)
            batches += 1
        return batches
