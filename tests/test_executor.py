"""Tests for the action executor."""

import pytest

from cmod.errors import AuditLogError, NotificationError, NotFoundError, PersistenceError
from cmod.moderation.audit_log import ModerationAuditLog
from cmod.moderation.executor import ActionExecutor, auto_delete_reason
from cmod.moderation.models import ActionType, NotificationType
from cmod.moderation.reports import ReportAggregator
from cmod.notify.dispatcher import StoreNotificationDispatcher
from cmod.store import paths
from cmod.store.memory_store import MemoryStore

from conftest import seed_content


class BrokenAuditLog(ModerationAuditLog):
    def log_action(self, *args, **kwargs):
        raise AuditLogError("audit store unavailable")


class BrokenDispatcher(StoreNotificationDispatcher):
    def dispatch(self, *args, **kwargs):
        raise NotificationError("queue unavailable")


class FailingDeleteStore(MemoryStore):
    def _delete_one(self, staged, path):
        if f"/{paths.COMMENTS}/" in path:
            raise OSError("disk full")
        super()._delete_one(staged, path)


def _executor(store, audit_log=None, dispatcher=None):
    audit_log = audit_log or ModerationAuditLog(store)
    dispatcher = dispatcher or StoreNotificationDispatcher(store)
    return ActionExecutor(store, audit_log, dispatcher)


def _summary(store, content_id):
    return ReportAggregator(store).get_report_summary(content_id)


def test_delete_removes_item_and_dependents(store):
    seed_content(store, "post-1", author_id="alice", reports=5, comments=2, likes=3)
    summary = _summary(store, "post-1")
    outcome = _executor(store).execute_delete("post-1", summary.count, summary.reports)

    assert outcome.executed
    assert outcome.notified
    assert not store.exists(paths.content_path("post-1"))
    for collection in (paths.reports_collection, paths.comments_collection, paths.likes_collection):
        assert store.list(collection("post-1")) == []


def test_delete_records_audit_snapshot(store):
    seed_content(store, "post-1", reports=5)
    summary = _summary(store, "post-1")
    audit = ModerationAuditLog(store)
    outcome = ActionExecutor(store, audit).execute_delete("post-1", summary.count, summary.reports)

    entries = audit.get_actions_for_content("post-1")
    assert len(entries) == 1
    assert entries[0].action == ActionType.DELETED
    assert entries[0].reason == "Automatically deleted due to 5 reports"
    assert entries[0].report_count == 5
    assert len(entries[0].reports) == 5
    assert not entries[0].is_admin_initiated
    assert outcome.action.id == entries[0].id


def test_delete_notifies_author(store):
    seed_content(store, "post-1", author_id="alice", reports=5)
    summary = _summary(store, "post-1")
    dispatcher = StoreNotificationDispatcher(store)
    _executor(store, dispatcher=dispatcher).execute_delete("post-1", 5, summary.reports)

    notes = dispatcher.list_for("alice")
    assert len(notes) == 1
    assert notes[0].type == NotificationType.POST_DELETED
    assert notes[0].title == "Post Removed"
    assert notes[0].message == auto_delete_reason(5)
    assert notes[0].content_id == "post-1"
    assert notes[0].data["action"] == "post_deleted"


def test_second_delete_is_a_noop(store):
    seed_content(store, "post-1", author_id="alice", reports=5)
    summary = _summary(store, "post-1")
    executor = _executor(store)
    executor.execute_delete("post-1", 5, summary.reports)
    again = executor.execute_delete("post-1", 5, summary.reports)

    assert not again.executed
    assert len(ModerationAuditLog(store).get_actions_for_content("post-1")) == 1
    assert len(StoreNotificationDispatcher(store).list_for("alice")) == 1


def test_delete_of_unknown_content_is_a_noop(store):
    outcome = _executor(store).execute_delete("ghost", 5, [])
    assert not outcome.executed
    assert ModerationAuditLog(store).get_logs() == []


def test_delete_survives_audit_failure(store):
    seed_content(store, "post-1", author_id="alice", reports=5)
    outcome = _executor(store, audit_log=BrokenAuditLog(store)).execute_delete("post-1", 5, [])
    assert outcome.executed
    assert outcome.action is None
    assert outcome.notified
    assert not store.exists(paths.content_path("post-1"))


def test_delete_survives_notification_failure(store):
    seed_content(store, "post-1", reports=5)
    outcome = _executor(store, dispatcher=BrokenDispatcher(store)).execute_delete("post-1", 5, [])
    assert outcome.executed
    assert not outcome.notified
    assert outcome.action is not None
    assert not store.exists(paths.content_path("post-1"))


def test_failed_batch_deletes_nothing():
    store = FailingDeleteStore()
    seed_content(store, "post-1", author_id="alice", reports=5, comments=1, likes=1)
    before = len(store)
    with pytest.raises(PersistenceError):
        _executor(store).execute_delete("post-1", 5, [])

    assert len(store) == before
    assert store.exists(paths.content_path("post-1"))
    assert ModerationAuditLog(store).get_logs() == []
    assert StoreNotificationDispatcher(store).list_for("alice") == []


def test_admin_delete_reason_and_flag(store):
    seed_content(store, "post-1", reports=1)
    outcome = _executor(store).execute_delete(
        "post-1", 1, [], "Removed by admin", is_admin_initiated=True
    )
    assert outcome.action.is_admin_initiated
    assert outcome.action.reason == "Removed by admin"


def test_warn_keeps_content_and_notifies(store):
    seed_content(store, "post-1", author_id="bob", reports=3)
    summary = _summary(store, "post-1")
    dispatcher = StoreNotificationDispatcher(store)
    outcome = _executor(store, dispatcher=dispatcher).execute_warn("post-1", 3, summary.reports)

    assert outcome.executed
    assert store.exists(paths.content_path("post-1"))
    assert len(store.list(paths.reports_collection("post-1"))) == 3
    assert outcome.action.action == ActionType.WARNED
    assert outcome.action.report_count == 3
    notes = dispatcher.list_for("bob")
    assert notes[0].type == NotificationType.POST_WARNING
    assert notes[0].title == "Post Warning"
    assert "3 reports" in notes[0].message


def test_warn_missing_content_does_nothing(store):
    outcome = _executor(store).execute_warn("ghost", 3, [])
    assert not outcome.executed
    assert ModerationAuditLog(store).get_logs() == []


def test_review_records_admin_action(store):
    seed_content(store, "post-1", reports=2)
    outcome = _executor(store).record_review("post-1", 2, [], "Looks fine")
    assert outcome.action.action == ActionType.REVIEWED
    assert outcome.action.is_admin_initiated
    assert store.exists(paths.content_path("post-1"))


def test_review_missing_content_raises(store):
    with pytest.raises(NotFoundError):
        _executor(store).record_review("ghost", 0, [], "n/a")


def test_warn_not_applied_when_audit_fails(store):
    seed_content(store, "post-1", author_id="bob", reports=3)
    dispatcher = StoreNotificationDispatcher(store)
    executor = _executor(store, audit_log=BrokenAuditLog(store), dispatcher=dispatcher)
    outcome = executor.execute_warn("post-1", 3, [])

    assert not outcome.executed
    assert outcome.action is None
    assert dispatcher.list_for("bob") == []
