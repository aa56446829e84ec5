"""Moderation module.

Reports move open -> dismissed | resolved; resolution cascades onto videos
and accounts (hide, ban sweep).
"""

from .models import ModerationAction, Report, ReportStatus


__all__ = ["ModerationAction", "Report", "ReportStatus"]
