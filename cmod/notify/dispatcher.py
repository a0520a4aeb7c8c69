"""Notification dispatch for moderation outcomes.

A dispatcher accepts ``(recipient_id, type, title, message, payload)`` and
enqueues delivery.  Failures surface as ``NotificationError``; callers in
the moderation pipeline treat them as non-fatal.

Two implementations:

- ``StoreNotificationDispatcher`` writes the notification into
  ``users/{id}/notifications`` for the app to pick up.
- ``WebhookNotificationDispatcher`` POSTs a JSON payload signed with
  HMAC-SHA256 to an external delivery service via ``urllib.request``.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import urllib.request
from abc import ABC, abstractmethod
from typing import Any, Optional

from cmod.errors import NotificationError
from cmod.moderation.models import Notification, NotificationType, new_id
from cmod.store import paths
from cmod.store.base import DocumentStore

TITLES = {
    NotificationType.POST_DELETED: "Post Removed",
    NotificationType.POST_WARNING: "Post Warning",
    NotificationType.CONTENT_BLOCKED: "Content Blocked",
}


class NotificationDispatcher(ABC):
    """Delivers a notification to a user."""

    @abstractmethod
    def dispatch(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Notification:
        """Enqueue delivery. Raises ``NotificationError`` on failure."""

    @staticmethod
    def _build(
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[dict[str, Any]],
    ) -> Notification:
        payload = dict(payload or {})
        return Notification(
            id=new_id(),
            type=type,
            recipient_id=recipient_id,
            title=title or TITLES.get(type, ""),
            message=message,
            content_id=str(payload.get("content_id", "")),
            data=payload,
        )


class StoreNotificationDispatcher(NotificationDispatcher):
    """Writes notifications into the recipient's notification collection."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def dispatch(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Notification:
        if not recipient_id:
            raise NotificationError("Notification has no recipient")
        notification = self._build(recipient_id, type, title, message, payload)
        try:
            self._store.set(
                paths.join(paths.notifications_collection(recipient_id), notification.id),
                notification.to_dict(),
            )
        except Exception as exc:
            raise NotificationError(f"Could not notify {recipient_id}: {exc}") from exc
        return notification

    def list_for(self, recipient_id: str) -> list[Notification]:
        """Return a user's notifications, newest first."""
        docs = self._store.query(
            paths.notifications_collection(recipient_id), "created_at", descending=True
        )
        return [Notification.from_dict(doc) for _, doc in docs]


class WebhookNotificationDispatcher(NotificationDispatcher):
    """Hands notifications to an external delivery endpoint."""

    def __init__(self, url: str, secret: str = "", timeout: float = 10.0) -> None:
        self.url = url
        self.secret = secret
        self.timeout = timeout

    @staticmethod
    def compute_signature(payload_bytes: bytes, secret: str) -> str:
        """Compute the HMAC-SHA256 signature header value for a payload."""
        mac = hmac.new(secret.encode("utf-8"), payload_bytes, hashlib.sha256)
        return f"sha256={mac.hexdigest()}"

    def dispatch(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Notification:
        notification = self._build(recipient_id, type, title, message, payload)
        body = json.dumps(notification.to_dict()).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "X-CMod-Event": notification.type.value,
        }
        if self.secret:
            headers["X-CMod-Signature"] = self.compute_signature(body, self.secret)

        try:
            req = urllib.request.Request(self.url, data=body, headers=headers, method="POST")
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                status = resp.status
        except Exception as exc:
            raise NotificationError(f"Delivery to {self.url} failed: {exc}") from exc
        if not 200 <= status < 300:
            raise NotificationError(f"Delivery to {self.url} returned HTTP {status}")
        return notification
