"""Feed entities.

The feed has no tables of its own; it is computed per request from the
videos, counters and edges owned by other packages.
"""

from dataclasses import dataclass

from clipfeed.accounts.models import Account
from clipfeed.engagement.models import VideoStats
from clipfeed.videos.models import Video


@dataclass
class ScoredVideo:
    """A feed candidate with the score it drew for this request."""

    video: Video
    stats: VideoStats
    score: float


@dataclass
class FeedItem:
    """A ranked video decorated for one viewer."""

    video: Video
    stats: VideoStats
    score: float
    author: Account | None
    stream_url: str
    liked_by_current_user: bool = False
    followed_by_current_user: bool = False
