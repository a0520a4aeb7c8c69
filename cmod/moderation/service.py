"""Moderation service facade.

Wires the analyzer, report aggregator, decision engine, action executor
and reconciliation sweep around one injected store, and exposes the
operations used by the CLI and the HTTP API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from cmod.analyzer.analyzer import ContentAnalyzer
from cmod.analyzer.models import ClassificationResult, PostModerationResult
from cmod.config import ModerationConfig
from cmod.errors import NotFoundError
from cmod.moderation.audit_log import ModerationAuditLog
from cmod.moderation.decision import DecisionEngine, Thresholds
from cmod.moderation.executor import ActionExecutor, ExecutionOutcome
from cmod.moderation.locks import KeyedLock
from cmod.moderation.models import (
    ContentItem,
    ModerationAction,
    Report,
    ReportReason,
    ReportSummary,
    SweepResult,
)
from cmod.moderation.pipeline import Evaluation, ModerationPipeline
from cmod.moderation.reports import ReportAggregator
from cmod.moderation.submission import SubmissionGate
from cmod.moderation.sweep import ReconciliationSweep
from cmod.notify.dispatcher import (
    NotificationDispatcher,
    StoreNotificationDispatcher,
    WebhookNotificationDispatcher,
)
from cmod.store import paths
from cmod.store.base import DocumentStore

log = logging.getLogger("cmod.service")


@dataclass
class HighReportItem:
    """A content item with at least the requested number of reports."""

    item: ContentItem
    report_count: int
    reports: list[Report] = field(default_factory=list)


class ModerationService:
    """Entry point for classification, reporting and moderation actions."""

    def __init__(
        self,
        store: DocumentStore,
        config: Optional[ModerationConfig] = None,
        analyzer: Optional[ContentAnalyzer] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        sweep_workers: int = 1,
    ) -> None:
        self.config = config or ModerationConfig()
        self.store = store
        self.analyzer = analyzer or ContentAnalyzer(timeout=self.config.classification_timeout)
        self.dispatcher = dispatcher or self._default_dispatcher()
        self.audit_log = ModerationAuditLog(store)
        self.aggregator = ReportAggregator(store, dedupe_reporters=self.config.dedupe_reporters)
        self.engine = DecisionEngine(Thresholds.from_config(self.config))
        self.executor = ActionExecutor(store, self.audit_log, self.dispatcher)
        self.pipeline = ModerationPipeline(
            self.aggregator, self.engine, self.executor, self.audit_log, KeyedLock()
        )
        self.sweep = ReconciliationSweep(
            store, self.pipeline, page_size=self.config.sweep_page_size, workers=sweep_workers
        )
        self.gate = SubmissionGate(
            store, self.analyzer, self.dispatcher, admin_recipient=self.config.admin_recipient
        )

    def _default_dispatcher(self) -> NotificationDispatcher:
        if self.config.notification_webhook_url:
            return WebhookNotificationDispatcher(
                self.config.notification_webhook_url,
                secret=self.config.notification_webhook_secret,
            )
        return StoreNotificationDispatcher(self.store)

    # -- classification API ---------------------------------------------

    def moderate_text(self, text: str) -> ClassificationResult:
        return self.analyzer.classify_text(text)

    def moderate_image(self, ref: str) -> ClassificationResult:
        return self.analyzer.classify_media(ref)

    def moderate_post(
        self, text: str, images: Iterable[str] = (), videos: Iterable[str] = ()
    ) -> PostModerationResult:
        return self.analyzer.moderate_post(text, images, videos)

    # -- content --------------------------------------------------------

    def submit_content(
        self,
        author_id: str,
        body: str,
        images: Iterable[str] = (),
        videos: Iterable[str] = (),
    ) -> ContentItem:
        """Store a new content item, or raise ``ContentRejectedError``."""
        return self.gate.submit(author_id, body, images, videos)

    def get_content(self, content_id: str) -> Optional[ContentItem]:
        doc = self.store.get(paths.content_path(content_id))
        return ContentItem.from_dict(doc) if doc is not None else None

    def confirm_upload(self, content_id: str, stored_refs: Iterable[str]) -> ExecutionOutcome:
        """Re-check media once it is durably stored; delete the item if any fails."""
        failing = self.gate.unverified_media(stored_refs)
        if not failing:
            return ExecutionOutcome(executed=False)
        log.warning("Content %s: uploaded media failed classification", content_id)
        with self.pipeline.locks.hold(content_id):
            summary = self.aggregator.get_report_summary(content_id)
            return self.executor.execute_delete(
                content_id,
                summary.count,
                summary.reports,
                "Uploaded media failed content classification",
            )

    # -- reports --------------------------------------------------------

    def add_report(
        self,
        content_id: str,
        reporter_id: str,
        reason: ReportReason | str = ReportReason.OTHER,
        reporter_name: str = "",
    ) -> tuple[Report, Evaluation]:
        """File a report and immediately re-evaluate the content item."""
        report = self.aggregator.create_report(content_id, reporter_id, reason, reporter_name)
        return report, self.pipeline.process(content_id)

    def get_report_summary(self, content_id: str) -> ReportSummary:
        return self.aggregator.get_report_summary(content_id)

    def evaluate(self, content_id: str) -> Evaluation:
        return self.pipeline.process(content_id)

    # -- administrative surface -----------------------------------------

    def process_all_content(self) -> SweepResult:
        return self.sweep.run()

    def admin_delete(
        self, content_id: str, admin_id: str, reason: str = ""
    ) -> ExecutionOutcome:
        """Delete regardless of report count; recorded as admin-initiated."""
        reason = reason or f"Removed by administrator {admin_id}"
        with self.pipeline.locks.hold(content_id):
            summary = self.aggregator.get_report_summary(content_id)
            return self.executor.execute_delete(
                content_id,
                summary.count,
                summary.reports,
                reason,
                is_admin_initiated=True,
            )

    def review(self, content_id: str, reason: str = "Reviewed by moderator") -> ExecutionOutcome:
        """Explicitly mark a content item as reviewed."""
        with self.pipeline.locks.hold(content_id):
            summary = self.aggregator.get_report_summary(content_id)
            return self.executor.record_review(
                content_id, summary.count, summary.reports, reason
            )

    def get_high_report_items(self, threshold: int = 3) -> list[HighReportItem]:
        """Content items with at least *threshold* reports, most reported first."""
        results: list[HighReportItem] = []
        for content_id in self.sweep.iter_content_ids():
            item = self.get_content(content_id)
            if item is None:
                continue
            summary = self.aggregator.get_report_summary(content_id)
            if summary.count >= threshold:
                results.append(HighReportItem(item, summary.count, summary.reports))
        results.sort(key=lambda r: r.report_count, reverse=True)
        return results

    def get_moderation_logs(self, limit: int = 50) -> list[ModerationAction]:
        return self.audit_log.get_logs(limit=limit)

    def require_content(self, content_id: str) -> ContentItem:
        item = self.get_content(content_id)
        if item is None:
            raise NotFoundError(f"Content {content_id} does not exist")
        return item
