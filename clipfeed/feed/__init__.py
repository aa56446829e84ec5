"""Feed ranking module."""

from .models import FeedItem, ScoredVideo


__all__ = ["FeedItem", "ScoredVideo"]
