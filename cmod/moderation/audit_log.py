"""Append-only moderation audit log.

Every warning, deletion and manual review is recorded as a
``ModerationAction`` document in the ``moderationLogs`` collection.
Records are never updated or deleted; per content item their timestamps
never go backwards.
"""

from __future__ import annotations

import json
from typing import Optional

from cmod.errors import AuditLogError
from cmod.moderation.models import ActionType, ModerationAction, Report, new_id, utc_now
from cmod.store import paths
from cmod.store.base import DocumentStore


class ModerationAuditLog:
    """Store-backed audit log of moderation actions."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _next_timestamp(self, content_id: str) -> str:
        now = utc_now()
        latest = self.get_logs(limit=1, content_id=content_id)
        if latest and latest[0].created_at > now:
            return latest[0].created_at
        return now

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log_action(
        self,
        content_id: str,
        action: ActionType,
        reason: str,
        report_count: int = 0,
        reports: Optional[list[Report]] = None,
        is_admin_initiated: bool = False,
    ) -> ModerationAction:
        """Append a moderation action and return it.

        Raises ``AuditLogError`` if the record cannot be written.
        """
        try:
            entry = ModerationAction(
                id=new_id(),
                content_id=content_id,
                action=action,
                reason=reason,
                report_count=report_count,
                reports=list(reports or []),
                created_at=self._next_timestamp(content_id),
                is_admin_initiated=is_admin_initiated,
            )
            self._store.set(paths.log_path(entry.id), entry.to_dict())
        except Exception as exc:
            raise AuditLogError(f"Could not log {action.value} for {content_id}: {exc}") from exc
        return entry

    def get_logs(
        self,
        limit: Optional[int] = 50,
        *,
        action: Optional[ActionType] = None,
        content_id: Optional[str] = None,
    ) -> list[ModerationAction]:
        """Return logged actions, newest first. ``limit=None`` returns all."""
        where: dict[str, str] = {}
        if action is not None:
            where["action"] = action.value
        if content_id is not None:
            where["content_id"] = content_id
        docs = self._store.query(
            paths.MODERATION_LOGS,
            "created_at",
            descending=True,
            limit=limit,
            where=where or None,
        )
        return [ModerationAction.from_dict(doc) for _, doc in docs]

    def get_actions_for_content(self, content_id: str) -> list[ModerationAction]:
        """Return the full history for one content item, newest first."""
        return self.get_logs(limit=None, content_id=content_id)

    def export(self, fmt: str = "json", limit: int = 10000) -> str:
        """Export the log as ``json`` or ``csv``."""
        entries = self.get_logs(limit=limit)
        if fmt == "csv":
            lines = ["id,created_at,content_id,action,report_count,is_admin_initiated,reason"]
            for e in entries:
                reason = e.reason.replace('"', '""')
                lines.append(
                    f'{e.id},{e.created_at},{e.content_id},{e.action.value},'
                    f'{e.report_count},{e.is_admin_initiated},"{reason}"'
                )
            return "\n".join(lines)
        return json.dumps([e.to_dict() for e in entries], indent=2)
