"""Submission-time gate: classify before anything is stored."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from cmod.analyzer.analyzer import ContentAnalyzer
from cmod.analyzer.models import PostModerationResult
from cmod.errors import ContentRejectedError
from cmod.moderation.models import ContentItem, NotificationType, new_id
from cmod.notify.dispatcher import TITLES, NotificationDispatcher
from cmod.store import paths
from cmod.store.base import DocumentStore

log = logging.getLogger("cmod.submission")


class SubmissionGate:
    """Blocks disallowed content synchronously, before it is persisted.

    Rejections raise ``ContentRejectedError`` carrying only a generic
    message; reasons and flagged terms go to the log and the admin alert.
    """

    def __init__(
        self,
        store: DocumentStore,
        analyzer: ContentAnalyzer,
        dispatcher: Optional[NotificationDispatcher] = None,
        admin_recipient: str = "",
    ) -> None:
        self._store = store
        self._analyzer = analyzer
        self._dispatcher = dispatcher
        self.admin_recipient = admin_recipient

    def submit(
        self,
        author_id: str,
        body: str,
        images: Iterable[str] = (),
        videos: Iterable[str] = (),
    ) -> ContentItem:
        images, videos = list(images), list(videos)
        result = self._analyzer.moderate_post(body, images, videos)
        if not result.is_appropriate:
            log.warning(
                "Blocked submission from %s (%s): %s",
                author_id,
                result.category.value,
                "; ".join(result.reasons),
            )
            self._alert_admin(author_id, body, result)
            raise ContentRejectedError(result)

        item = ContentItem(id=new_id(), author_id=author_id, body=body, media=images + videos)
        self._store.set(paths.content_path(item.id), item.to_dict())
        pending = [
            r for r in result.image_results + result.video_results if r.pending_verification
        ]
        if pending:
            log.info("Content %s has %d media awaiting upload verification", item.id, len(pending))
        return item

    def unverified_media(self, refs: Iterable[str]) -> list[str]:
        """Return the durable media references that fail classification."""
        return [ref for ref in refs if not self._analyzer.classify_media(ref).is_appropriate]

    def _alert_admin(self, author_id: str, body: str, result: PostModerationResult) -> None:
        if self._dispatcher is None or not self.admin_recipient:
            return
        try:
            self._dispatcher.dispatch(
                self.admin_recipient,
                NotificationType.CONTENT_BLOCKED,
                TITLES[NotificationType.CONTENT_BLOCKED],
                f"Blocked a {result.category.value} submission from {author_id}",
                {
                    "author_id": author_id,
                    "content": body[:500],
                    "reasons": result.reasons,
                    "flagged_terms": result.flagged_terms,
                },
            )
        except Exception:
            log.exception("Failed to alert admin about blocked submission from %s", author_id)
