"""Side effects of moderation decisions.

Deletion is authoritative: the content item and its reports, comments and
likes are removed in one atomic batch.  Only after that commit are the
audit record and the author notification attempted, and neither of those
can undo the deletion.  Deleting content that is already gone is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cmod.errors import AuditLogError, NotFoundError
from cmod.moderation.audit_log import ModerationAuditLog
from cmod.moderation.models import (
    ActionType,
    ContentItem,
    ModerationAction,
    NotificationType,
    Report,
)
from cmod.notify.dispatcher import TITLES, NotificationDispatcher
from cmod.store import paths
from cmod.store.base import DocumentStore

log = logging.getLogger("cmod.executor")


def auto_delete_reason(report_count: int) -> str:
    return f"Automatically deleted due to {report_count} reports"


def warning_reason(report_count: int) -> str:
    return (
        f"Your post has received {report_count} reports. Please review your "
        "content to ensure it follows community guidelines."
    )


@dataclass
class ExecutionOutcome:
    """What an executor call actually did."""

    executed: bool
    action: Optional[ModerationAction] = None
    notified: bool = False


class ActionExecutor:
    """Applies warn / delete decisions against the store."""

    def __init__(
        self,
        store: DocumentStore,
        audit_log: ModerationAuditLog,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> None:
        self._store = store
        self._audit = audit_log
        self._dispatcher = dispatcher

    def _load_item(self, content_id: str) -> Optional[ContentItem]:
        doc = self._store.get(paths.content_path(content_id))
        return ContentItem.from_dict(doc) if doc is not None else None

    def execute_delete(
        self,
        content_id: str,
        report_count: int,
        reports: list[Report],
        reason: Optional[str] = None,
        *,
        is_admin_initiated: bool = False,
    ) -> ExecutionOutcome:
        """Delete a content item with its dependents, then log and notify.

        ``PersistenceError`` from the batch delete propagates with nothing
        deleted.
        """
        reason = reason or auto_delete_reason(report_count)
        item = self._load_item(content_id)
        if item is None:
            log.info("Content %s already deleted, skipping", content_id)
            return ExecutionOutcome(executed=False)

        try:
            removed = self._store.batch_delete(
                [paths.content_path(content_id)], cascade=paths.CONTENT_DEPENDENTS
            )
        except NotFoundError:
            log.info("Content %s was deleted concurrently, skipping", content_id)
            return ExecutionOutcome(executed=False)
        log.info("Deleted content %s and %d dependent records", content_id, removed - 1)

        action = self._record(
            content_id, ActionType.DELETED, reason, report_count, reports, is_admin_initiated
        )
        notified = self._notify(item.author_id, content_id, NotificationType.POST_DELETED, reason)
        return ExecutionOutcome(executed=True, action=action, notified=notified)

    def execute_warn(
        self, content_id: str, report_count: int, reports: list[Report]
    ) -> ExecutionOutcome:
        """Record a warning and tell the author. The content is left as is.

        If the warning cannot be recorded nothing else happens and the outcome
        is not executed, so the author is not notified of an unlogged warning.
        """
        item = self._load_item(content_id)
        if item is None:
            log.info("Content %s no longer exists, not warning", content_id)
            return ExecutionOutcome(executed=False)

        reason = warning_reason(report_count)
        action = self._record(content_id, ActionType.WARNED, reason, report_count, reports, False)
        if action is None:
            # Without a WARNED record the warning is retried on the next evaluation.
            return ExecutionOutcome(executed=False)
        notified = self._notify(item.author_id, content_id, NotificationType.POST_WARNING, reason)
        return ExecutionOutcome(executed=True, action=action, notified=notified)

    def record_review(
        self, content_id: str, report_count: int, reports: list[Report], reason: str
    ) -> ExecutionOutcome:
        """Record an explicit ``reviewed`` action for content that exists."""
        if self._load_item(content_id) is None:
            raise NotFoundError(f"Content {content_id} does not exist")
        action = self._audit.log_action(
            content_id, ActionType.REVIEWED, reason, report_count, reports, True
        )
        return ExecutionOutcome(executed=True, action=action)

    # -- best-effort side effects ---------------------------------------

    def _record(
        self,
        content_id: str,
        action: ActionType,
        reason: str,
        report_count: int,
        reports: list[Report],
        is_admin_initiated: bool,
    ) -> Optional[ModerationAction]:
        try:
            return self._audit.log_action(
                content_id,
                action,
                reason,
                report_count=report_count,
                reports=reports,
                is_admin_initiated=is_admin_initiated,
            )
        except AuditLogError:
            log.exception("Failed to record %s action for %s", action.value, content_id)
            return None

    def _notify(
        self, recipient_id: str, content_id: str, type: NotificationType, reason: str
    ) -> bool:
        if self._dispatcher is None:
            return False
        try:
            self._dispatcher.dispatch(
                recipient_id,
                type,
                TITLES[type],
                reason,
                {"content_id": content_id, "action": type.value, "reason": reason},
            )
        except Exception:
            log.exception("Failed to notify %s about %s", recipient_id, content_id)
            return False
        return True
