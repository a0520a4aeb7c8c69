"""Report-driven decision path shared by the reactive trigger and the sweep.

For one content item: count reports, ask the decision engine, and apply
the matching executor call.  Runs under a per-item lock so concurrent
triggers cannot double-apply a decision.  A warning is only repeated when
the report count has grown since the last warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from cmod.moderation.audit_log import ModerationAuditLog
from cmod.moderation.decision import DecisionEngine
from cmod.moderation.executor import ActionExecutor, ExecutionOutcome
from cmod.moderation.locks import KeyedLock
from cmod.moderation.models import ActionType, Decision
from cmod.moderation.reports import ReportAggregator

log = logging.getLogger("cmod.pipeline")


@dataclass
class Evaluation:
    """Decision taken for one content item and whether it was applied."""

    content_id: str
    decision: Decision
    report_count: int = 0
    outcome: ExecutionOutcome = field(default_factory=lambda: ExecutionOutcome(executed=False))

    @property
    def deleted(self) -> bool:
        return self.decision is Decision.DELETE and self.outcome.executed

    @property
    def warned(self) -> bool:
        return self.decision is Decision.WARN and self.outcome.executed


class ModerationPipeline:
    """Evaluates a single content item end to end."""

    def __init__(
        self,
        aggregator: ReportAggregator,
        engine: DecisionEngine,
        executor: ActionExecutor,
        audit_log: ModerationAuditLog,
        locks: Optional[KeyedLock] = None,
    ) -> None:
        self.aggregator = aggregator
        self.engine = engine
        self.executor = executor
        self.audit_log = audit_log
        self.locks = locks if locks is not None else KeyedLock()

    def process(self, content_id: str) -> Evaluation:
        with self.locks.hold(content_id):
            summary = self.aggregator.get_report_summary(content_id)
            decision = self.engine.decide(summary.count)
            log.debug("Content %s: %d reports -> %s", content_id, summary.count, decision.value)
            evaluation = Evaluation(content_id, decision, summary.count)

            if decision is Decision.DELETE:
                evaluation.outcome = self.executor.execute_delete(
                    content_id, summary.count, summary.reports
                )
            elif decision is Decision.WARN and self._needs_warning(content_id, summary.count):
                evaluation.outcome = self.executor.execute_warn(
                    content_id, summary.count, summary.reports
                )
            return evaluation

    def _needs_warning(self, content_id: str, report_count: int) -> bool:
        warned = [
            a.report_count
            for a in self.audit_log.get_logs(
                limit=None, action=ActionType.WARNED, content_id=content_id
            )
        ]
        return not warned or max(warned) < report_count
