"""Engagement store module.

Provides consistent engagement state with:
- Like and follow edges guarded by lightweight transactions
- Per-video view/like/comment/share counters, floored at zero
"""

from .models import CounterName, VideoStats


__all__ = ["CounterName", "VideoStats"]
