"""Report aggregation.

Counts are always computed from the report documents themselves; there is
no separately maintained counter that could drift.
"""

from __future__ import annotations

import logging

from cmod.moderation.models import Report, ReportReason, ReportSummary, new_id
from cmod.store import paths
from cmod.store.base import DocumentStore

log = logging.getLogger("cmod.reports")


class ReportAggregator:
    """Stores community reports and summarises them per content item."""

    def __init__(self, store: DocumentStore, dedupe_reporters: bool = False) -> None:
        self._store = store
        # Off by default: repeated reports from one reporter each count.
        self.dedupe_reporters = dedupe_reporters

    def add_report(self, content_id: str, report: Report) -> Report:
        """Persist *report* under *content_id*.

        Raises ``NotFoundError`` if the content item no longer exists, so no
        report can be attached to deleted content.
        """
        if report.content_id and report.content_id != content_id:
            raise ValueError(
                f"Report {report.id} belongs to {report.content_id}, not {content_id}"
            )
        report.content_id = content_id
        self._store.set(
            paths.join(paths.reports_collection(content_id), report.id),
            report.to_dict(),
            require_exists=paths.content_path(content_id),
        )
        log.info("Report %s filed against %s (%s)", report.id, content_id, report.reason.value)
        return report

    def create_report(
        self,
        content_id: str,
        reporter_id: str,
        reason: ReportReason | str = ReportReason.OTHER,
        reporter_name: str = "",
    ) -> Report:
        report = Report(
            id=new_id(),
            content_id=content_id,
            reporter_id=reporter_id,
            reason=ReportReason(reason),
            reporter_name=reporter_name,
        )
        return self.add_report(content_id, report)

    def get_reports(self, content_id: str) -> list[Report]:
        """Return all reports for *content_id*, newest first."""
        docs = self._store.query(
            paths.reports_collection(content_id), "created_at", descending=True
        )
        return [Report.from_dict(doc) for _, doc in docs]

    def get_report_summary(self, content_id: str) -> ReportSummary:
        reports = self.get_reports(content_id)
        if self.dedupe_reporters:
            count = len({r.reporter_id for r in reports})
        else:
            count = len(reports)
        return ReportSummary(content_id=content_id, count=count, reports=reports)

    def check_content(
        self, content_id: str, delete_threshold: int
    ) -> tuple[ReportSummary, bool]:
        """Summary plus whether the count has reached *delete_threshold*."""
        summary = self.get_report_summary(content_id)
        return summary, summary.count >= delete_threshold
