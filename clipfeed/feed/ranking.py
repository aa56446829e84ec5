"""Feed scoring.

score = max(0, base + explore)

    base    = views * 1 + likes * 3 + shares * 5 - age_hours * 0.1
    explore = U[0, 1) * (max(base, 0) * 0.2 + 10)

age_hours is the whole number of hours since creation, truncated. The
exploration term gives every video a chance to surface and widens with
popularity. Ordering is score descending, then video id ascending.
"""

import random
from datetime import datetime

from clipfeed.engagement.models import VideoStats
from clipfeed.videos.models import Video

from .models import ScoredVideo


VIEW_WEIGHT = 1.0
LIKE_WEIGHT = 3.0
SHARE_WEIGHT = 5.0
AGE_PENALTY_PER_HOUR = 0.1

EXPLORATION_SHARE = 0.2
EXPLORATION_FLOOR = 10.0


def age_hours(created_at: datetime, now: datetime) -> int:
    return int((now - created_at).total_seconds() / 3600)


def base_score(stats: VideoStats, hours: int) -> float:
    return (
        stats.view_count * VIEW_WEIGHT
        + stats.like_count * LIKE_WEIGHT
        + stats.share_count * SHARE_WEIGHT
        - hours * AGE_PENALTY_PER_HOUR
    )


def exploration_bonus(base: float, rng: random.Random) -> float:
    return rng.random() * (max(base, 0.0) * EXPLORATION_SHARE + EXPLORATION_FLOOR)


def score_video(
    video: Video, stats: VideoStats, now: datetime, rng: random.Random
) -> float:
    base = base_score(stats, age_hours(video.created_at, now))
    return max(0.0, base + exploration_bonus(base, rng))


def rank(
    candidates: list[tuple[Video, VideoStats]],
    now: datetime,
    rng: random.Random,
) -> list[ScoredVideo]:
    """Score and order candidates.

    Random draws are taken in video id order so a seeded ``rng`` gives the
    same ranking regardless of the order candidates were loaded in.
    """
    ordered = sorted(candidates, key=lambda item: str(item[0].video_id))
    scored = [
        ScoredVideo(video=video, stats=stats, score=score_video(video, stats, now, rng))
        for video, stats in ordered
    ]
    scored.sort(key=lambda item: (-item.score, str(item.video.video_id)))
    return scored


def paginate(items: list, page: int, page_size: int) -> list:
    """Zero-based page slice; past the end yields an empty list."""
    start = page * page_size
    return items[start : start + page_size]
