"""Database models for video reports and moderation.

Cassandra table definitions for:
- reports: Main report table
- reports_by_status: Moderation queue, newest first
- reports_by_reporter: Uniqueness claim, one row per (reporter, video)

State machine per report: open -> {dismissed, resolved}; both terminal.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from clipfeed.core.errors import InvalidArgumentError


class ReportStatus(str, Enum):
    """Report lifecycle status."""

    OPEN = "open"
    DISMISSED = "dismissed"
    RESOLVED = "resolved"

    @property
    def is_terminal(self) -> bool:
        return self is not ReportStatus.OPEN


class ModerationAction(str, Enum):
    """Resolution actions and the report status each one leads to."""

    DISMISS = "dismiss"
    HIDE = "hide"
    BAN = "ban"

    @classmethod
    def parse(cls, value: str) -> "ModerationAction":
        """Parse a case-insensitive action name.

        Raises:
            InvalidArgumentError: If the action is not recognized
        """
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as e:
            raise InvalidArgumentError(f"Invalid action: {value}") from e

    @property
    def resulting_status(self) -> ReportStatus:
        if self is ModerationAction.DISMISS:
            return ReportStatus.DISMISSED
        return ReportStatus.RESOLVED


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

REPORT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reports (
    report_id UUID PRIMARY KEY,
    reporter_id UUID,
    video_id UUID,
    reason TEXT,
    status TEXT,
    action TEXT,
    moderator_id UUID,
    created_at TIMESTAMP,
    resolved_at TIMESTAMP
)
"""

REPORTS_BY_STATUS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reports_by_status (
    status TEXT,
    created_at TIMESTAMP,
    report_id UUID,
    PRIMARY KEY ((status), created_at, report_id)
) WITH CLUSTERING ORDER BY (created_at DESC, report_id ASC)
"""

# Claimed with IF NOT EXISTS before the report is written
REPORTS_BY_REPORTER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reports_by_reporter (
    reporter_id UUID,
    video_id UUID,
    report_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((reporter_id), video_id)
)
"""

MODERATION_TABLES_CQL = [
    REPORT_TABLE_CQL,
    REPORTS_BY_STATUS_TABLE_CQL,
    REPORTS_BY_REPORTER_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Report:
    """Report of a video for moderation."""

    report_id: UUID
    reporter_id: UUID
    video_id: UUID
    reason: str
    status: ReportStatus
    action: ModerationAction | None
    moderator_id: UUID | None
    created_at: datetime
    resolved_at: datetime | None

    @classmethod
    def from_row(cls, row: Any) -> "Report":
        """Create Report from Cassandra row."""
        return cls(
            report_id=row.report_id,
            reporter_id=row.reporter_id,
            video_id=row.video_id,
            reason=row.reason or "",
            status=ReportStatus(row.status),
            action=ModerationAction(row.action) if row.action else None,
            moderator_id=row.moderator_id,
            created_at=row.created_at,
            resolved_at=row.resolved_at,
        )


def create_report(reporter_id: UUID, video_id: UUID, reason: str) -> Report:
    """Create a new open report."""
    return Report(
        report_id=uuid4(),
        reporter_id=reporter_id,
        video_id=video_id,
        reason=reason,
        status=ReportStatus.OPEN,
        action=None,
        moderator_id=None,
        created_at=datetime.now(UTC),
        resolved_at=None,
    )
