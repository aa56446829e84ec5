"""Cassandra access for reports and the moderation queue."""

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from clipfeed.core.database import was_applied

from .models import ModerationAction, Report, ReportStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ReportRepository:
    """Reports, the per-status queue and the per-reporter claim table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._claim_reporter_pair = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reports_by_reporter
            (reporter_id, video_id, report_id, created_at)
            VALUES (?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._release_reporter_pair = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.reports_by_reporter
            WHERE reporter_id = ? AND video_id = ?
            IF report_id = ?
        """)

        self._insert_report = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reports
            (report_id, reporter_id, video_id, reason, status, action,
             moderator_id, created_at, resolved_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_report_by_status = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reports_by_status
            (status, created_at, report_id)
            VALUES (?, ?, ?)
        """)

        self._delete_report_by_status = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.reports_by_status
            WHERE status = ? AND created_at = ? AND report_id = ?
        """)

        self._get_report = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.reports
            WHERE report_id = ?
        """)

        self._get_reports_by_status = self.session.prepare(f"""
            SELECT report_id FROM {self.keyspace}.reports_by_status
            WHERE status = ?
            LIMIT ?
        """)

        # Only an open report may move to a terminal status
        self._resolve_report = self.session.prepare(f"""
            UPDATE {self.keyspace}.reports
            SET status = ?, action = ?, moderator_id = ?, resolved_at = ?
            WHERE report_id = ?
            IF status = ?
        """)

        self._reopen_report = self.session.prepare(f"""
            UPDATE {self.keyspace}.reports
            SET status = ?, action = null, moderator_id = null, resolved_at = null
            WHERE report_id = ?
            IF status = ? AND action = ?
        """)

    async def claim_reporter_pair(
        self, reporter_id: UUID, video_id: UUID, report_id: UUID, created_at: datetime
    ) -> bool:
        """Claim the (reporter, video) pair; False if it was ever claimed."""
        result = await self.session.aexecute(
            self._claim_reporter_pair, [reporter_id, video_id, report_id, created_at]
        )
        return was_applied(result)

    async def release_reporter_pair(
        self, reporter_id: UUID, video_id: UUID, report_id: UUID
    ) -> None:
        await self.session.aexecute(
            self._release_reporter_pair, [reporter_id, video_id, report_id]
        )

    async def insert(self, report: Report) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._insert_report,
            [
                report.report_id,
                report.reporter_id,
                report.video_id,
                report.reason,
                report.status.value,
                report.action.value if report.action else None,
                report.moderator_id,
                report.created_at,
                report.resolved_at,
            ],
        )
        batch.add(
            self._insert_report_by_status,
            [report.status.value, report.created_at, report.report_id],
        )
        await self.session.aexecute(batch)

    async def get(self, report_id: UUID) -> Report | None:
        result = await self.session.aexecute(self._get_report, [report_id])
        row = result.one()
        return Report.from_row(row) if row else None

    async def list_by_status(self, status: ReportStatus, limit: int = 100) -> list[Report]:
        """Reports in ``status``, newest first."""
        result = await self.session.aexecute(
            self._get_reports_by_status, [status.value, limit]
        )
        reports = await asyncio.gather(*(self.get(row.report_id) for row in result))
        return [report for report in reports if report is not None]

    async def resolve(
        self,
        report: Report,
        action: ModerationAction,
        moderator_id: UUID,
        resolved_at: datetime,
    ) -> bool:
        """Move an open report to the status ``action`` leads to.

        Returns:
            False if the report was no longer open
        """
        new_status = action.resulting_status
        result = await self.session.aexecute(
            self._resolve_report,
            [
                new_status.value,
                action.value,
                moderator_id,
                resolved_at,
                report.report_id,
                ReportStatus.OPEN.value,
            ],
        )
        if not was_applied(result):
            return False

        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._delete_report_by_status,
            [ReportStatus.OPEN.value, report.created_at, report.report_id],
        )
        batch.add(
            self._insert_report_by_status,
            [new_status.value, report.created_at, report.report_id],
        )
        await self.session.aexecute(batch)
        return True

    async def reopen(self, report: Report, action: ModerationAction) -> bool:
        """Undo a resolution made with ``action`` whose cascade did not finish.

        Returns:
            False if the report no longer carries that resolution
        """
        closed_status = action.resulting_status
        result = await self.session.aexecute(
            self._reopen_report,
            [
                ReportStatus.OPEN.value,
                report.report_id,
                closed_status.value,
                action.value,
            ],
        )
        if not was_applied(result):
            return False

        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._delete_report_by_status,
            [closed_status.value, report.created_at, report.report_id],
        )
        batch.add(
            self._insert_report_by_status,
            [ReportStatus.OPEN.value, report.created_at, report.report_id],
        )
        await self.session.aexecute(batch)
        return True
