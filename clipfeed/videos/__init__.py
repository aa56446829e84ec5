"""Videos module.

Content item records and their lifecycle: pending -> active -> banned.
"""

from .models import Video, VideoStatus


__all__ = ["Video", "VideoStatus"]
