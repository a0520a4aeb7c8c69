"""Data models for content items, reports and moderation actions."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex[:16]


class ReportReason(Enum):
    """Why a user reported a content item."""

    INAPPROPRIATE = "inappropriate"
    SPAM = "spam"
    OFFENSIVE = "offensive"
    OTHER = "other"


class ActionType(Enum):
    """What a moderation action did to a content item."""

    REVIEWED = "reviewed"
    WARNED = "warned"
    DELETED = "deleted"


class Decision(Enum):
    """Output of the decision engine."""

    NONE = "none"
    WARN = "warn"
    DELETE = "delete"


class NotificationType(Enum):
    POST_DELETED = "post_deleted"
    POST_WARNING = "post_warning"
    # Admin alert for a submission rejected by the analyzer.
    CONTENT_BLOCKED = "content_blocked"


@dataclass
class ContentItem:
    """A user-generated post subject to moderation."""

    id: str
    author_id: str
    body: str = ""
    media: list[str] = field(default_factory=list)
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentItem:
        return cls(
            id=data["id"],
            author_id=data.get("author_id", ""),
            body=data.get("body", ""),
            media=list(data.get("media", [])),
            created_at=data.get("created_at", ""),
        )


@dataclass
class Report:
    """A community report against a content item. Never mutated."""

    id: str
    content_id: str
    reporter_id: str
    reason: ReportReason = ReportReason.OTHER
    reporter_name: str = ""
    created_at: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.reason, ReportReason):
            self.reason = ReportReason(self.reason)
        if not self.created_at:
            self.created_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["reason"] = self.reason.value
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        return cls(
            id=data["id"],
            content_id=data.get("content_id", ""),
            reporter_id=data.get("reporter_id", ""),
            reason=ReportReason(data.get("reason", "other")),
            reporter_name=data.get("reporter_name", ""),
            created_at=data.get("created_at", ""),
        )


@dataclass
class ModerationAction:
    """Append-only audit record of a moderation decision."""

    id: str
    content_id: str
    action: ActionType
    reason: str
    report_count: int = 0
    reports: list[Report] = field(default_factory=list)
    created_at: str = ""
    is_admin_initiated: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.action, ActionType):
            self.action = ActionType(self.action)
        if not self.created_at:
            self.created_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content_id": self.content_id,
            "action": self.action.value,
            "reason": self.reason,
            "report_count": self.report_count,
            "reports": [r.to_dict() for r in self.reports],
            "created_at": self.created_at,
            "is_admin_initiated": self.is_admin_initiated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModerationAction:
        return cls(
            id=data["id"],
            content_id=data.get("content_id", ""),
            action=ActionType(data.get("action", "reviewed")),
            reason=data.get("reason", ""),
            report_count=int(data.get("report_count", 0)),
            reports=[Report.from_dict(r) for r in data.get("reports", [])],
            created_at=data.get("created_at", ""),
            is_admin_initiated=bool(data.get("is_admin_initiated", False)),
        )


@dataclass
class Notification:
    """A message for a content author about a moderation action."""

    id: str
    type: NotificationType
    recipient_id: str
    title: str
    message: str
    content_id: str = ""
    read: bool = False
    created_at: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.type, NotificationType):
            self.type = NotificationType(self.type)
        if not self.created_at:
            self.created_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["type"] = self.type.value
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Notification:
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class ReportSummary:
    """Live report count for one content item, reports newest first."""

    content_id: str
    count: int = 0
    reports: list[Report] = field(default_factory=list)


@dataclass
class SweepResult:
    """Counters returned by a reconciliation sweep."""

    deleted_count: int = 0
    warned_count: int = 0
    processed_count: int = 0
    failed_count: int = 0
