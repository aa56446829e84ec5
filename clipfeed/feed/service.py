"""Feed service layer.

Builds a viewer's ranked feed on every request: load active videos and their
counters, score them, slice the requested page and decorate only that page
with the viewer's like/follow state. Reads take no locks, so counters seen
here may trail concurrent writes.
"""

import asyncio
import random
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from clipfeed.core.errors import InvalidArgumentError
from clipfeed.videos.models import VideoStatus

from .models import FeedItem
from .ranking import paginate, rank


if TYPE_CHECKING:
    from clipfeed.accounts.repository import AccountRepository
    from clipfeed.config.settings import Settings
    from clipfeed.engagement.service import EngagementService
    from clipfeed.videos.repository import VideoRepository


logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FeedService:
    """Service for the ranked video feed."""

    def __init__(
        self,
        videos: "VideoRepository",
        accounts: "AccountRepository",
        engagement: "EngagementService",
        settings: "Settings",
        rng_factory: Callable[[], random.Random] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.videos = videos
        self.accounts = accounts
        self.engagement = engagement
        self.settings = settings
        self.clock = clock
        if rng_factory is None:
            seed = settings.feed_random_seed
            rng_factory = (lambda: random.Random(seed)) if seed is not None else random.Random
        self.rng_factory = rng_factory

    def _validate_page(self, page: int, page_size: int) -> None:
        if page < 0:
            raise InvalidArgumentError("page must be zero or greater")
        if page_size < 1 or page_size > self.settings.feed_max_page_size:
            raise InvalidArgumentError(
                f"size must be between 1 and {self.settings.feed_max_page_size}"
            )

    async def get_feed(
        self,
        viewer_id: UUID | None = None,
        page: int = 0,
        page_size: int | None = None,
    ) -> list[FeedItem]:
        """Return one page of the ranked feed for ``viewer_id``.

        Raises:
            InvalidArgumentError: If page or page size is out of range
        """
        size = page_size if page_size is not None else self.settings.feed_default_page_size
        self._validate_page(page, size)

        videos = await self.videos.list_by_status(VideoStatus.ACTIVE)
        stats = await asyncio.gather(
            *(self.engagement.get_stats(video.video_id) for video in videos)
        )
        ranked = rank(list(zip(videos, stats, strict=True)), self.clock(), self.rng_factory())
        page_items = paginate(ranked, page, size)

        owner_ids = {item.video.owner_id for item in page_items}
        owners = await asyncio.gather(*(self.accounts.get(owner_id) for owner_id in owner_ids))
        authors = {account.account_id: account for account in owners if account}

        items = []
        for scored in page_items:
            video = scored.video
            items.append(
                FeedItem(
                    video=video,
                    stats=scored.stats,
                    score=scored.score,
                    author=authors.get(video.owner_id),
                    stream_url=self.settings.stream_url_template.format(
                        video_id=video.video_id
                    ),
                    liked_by_current_user=await self.engagement.is_liked(
                        viewer_id, video.video_id
                    ),
                    followed_by_current_user=await self.engagement.is_following(
                        viewer_id, video.owner_id
                    ),
                )
            )

        logger.debug(
            "feed_served",
            viewer_id=str(viewer_id) if viewer_id else None,
            page=page,
            size=size,
            candidates=len(ranked),
            returned=len(items),
        )
        return items
