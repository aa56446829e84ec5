"""Creator analytics module."""

from .models import CreatorDashboard, VideoPerformance, engagement_rate


__all__ = ["CreatorDashboard", "VideoPerformance", "engagement_rate"]
