"""Shared fixtures: an in-memory store seeded with content and reports."""

from datetime import datetime, timedelta, timezone

import pytest

from cmod.config import ModerationConfig
from cmod.moderation.models import ContentItem, Report, ReportReason
from cmod.moderation.service import ModerationService
from cmod.store import paths
from cmod.store.memory_store import MemoryStore

_BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def seed_content(
    store,
    content_id,
    author_id="author-1",
    reports=0,
    comments=0,
    likes=0,
    body="A nice day at the lake",
):
    """Write a content item with dependents straight into *store*."""
    item = ContentItem(id=content_id, author_id=author_id, body=body)
    store.set(paths.content_path(content_id), item.to_dict())
    for i in range(reports):
        report = Report(
            id=f"{content_id}-r{i}",
            content_id=content_id,
            reporter_id=f"reporter-{i}",
            reason=ReportReason.SPAM,
            created_at=(_BASE_TIME + timedelta(minutes=i)).isoformat(),
        )
        store.set(paths.join(paths.reports_collection(content_id), report.id), report.to_dict())
    for i in range(comments):
        store.set(
            paths.join(paths.comments_collection(content_id), f"c{i}"),
            {"id": f"c{i}", "text": "comment"},
        )
    for i in range(likes):
        store.set(
            paths.join(paths.likes_collection(content_id), f"l{i}"),
            {"id": f"l{i}", "user_id": f"u{i}"},
        )
    return item


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def service(store):
    return ModerationService(store, ModerationConfig(store_dir="unused"))
