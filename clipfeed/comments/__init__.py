"""Comment tree module.

Provides two-level threaded comments with:
- Replies flattened under their top-level ancestor
- Cascade deletion mirrored on the video's comment counter
- Rate limiting
"""

from .models import Comment, CommentThread


__all__ = ["Comment", "CommentThread"]
