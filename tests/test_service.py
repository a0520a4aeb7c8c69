"""End-to-end tests for the moderation service."""

import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from cmod.config import ModerationConfig
from cmod.errors import GENERIC_REJECTION_MESSAGE, ContentRejectedError, NotFoundError
from cmod.moderation.models import ActionType, Decision, NotificationType
from cmod.moderation.service import ModerationService
from cmod.notify.dispatcher import StoreNotificationDispatcher, WebhookNotificationDispatcher
from cmod.store import paths
from cmod.store.json_store import JsonFileStore

from conftest import seed_content


def _report(service, content_id, n, start=0):
    return [service.add_report(content_id, f"user-{start + i}", "spam")[1] for i in range(n)]


# ---------------------------------------------------------------------------
# Reactive trigger
# ---------------------------------------------------------------------------


def test_threshold_progression(service, store):
    seed_content(store, "post-1", author_id="alice")
    evaluations = _report(service, "post-1", 2)
    assert [e.decision for e in evaluations] == [Decision.NONE, Decision.NONE]

    _, third = service.add_report("post-1", "user-2", "spam")
    assert third.decision == Decision.WARN
    assert third.warned

    _, fourth = service.add_report("post-1", "user-3", "spam")
    assert fourth.warned
    assert fourth.report_count == 4

    _, fifth = service.add_report("post-1", "user-4", "spam")
    assert fifth.deleted
    assert service.get_content("post-1") is None
    assert store.list(paths.reports_collection("post-1")) == []

    with pytest.raises(NotFoundError):
        service.add_report("post-1", "user-5", "spam")

    actions = [a.action for a in service.get_moderation_logs()]
    assert actions.count(ActionType.WARNED) == 2
    assert actions.count(ActionType.DELETED) == 1

    notes = StoreNotificationDispatcher(store).list_for("alice")
    assert {n.type for n in notes} == {NotificationType.POST_WARNING, NotificationType.POST_DELETED}
    assert len(notes) == 3


def test_reevaluating_unchanged_content_does_not_rewarn(service, store):
    seed_content(store, "post-1", reports=3)
    first = service.evaluate("post-1")
    second = service.evaluate("post-1")
    assert first.warned
    assert second.decision == Decision.WARN
    assert not second.warned
    assert len(service.get_moderation_logs()) == 1


def test_concurrent_reports_delete_once(service, store):
    seed_content(store, "post-1", author_id="alice", reports=4)
    barrier = threading.Barrier(8)

    def file_report(i):
        barrier.wait()
        try:
            return service.add_report("post-1", f"late-{i}", "spam")[1]
        except NotFoundError:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(file_report, range(8)))

    assert sum(1 for r in results if r is not None and r.deleted) == 1
    deletes = [a for a in service.get_moderation_logs() if a.action == ActionType.DELETED]
    assert len(deletes) == 1
    assert not store.exists(paths.content_path("post-1"))
    assert store.list(paths.reports_collection("post-1")) == []
    deleted_notes = [
        n
        for n in StoreNotificationDispatcher(store).list_for("alice")
        if n.type == NotificationType.POST_DELETED
    ]
    assert len(deleted_notes) == 1


def test_custom_thresholds_from_config(store):
    service = ModerationService(
        store, ModerationConfig(warn_threshold=1, delete_threshold=2, store_dir="unused")
    )
    seed_content(store, "post-1")
    assert service.add_report("post-1", "a")[1].warned
    assert service.add_report("post-1", "b")[1].deleted


def test_dedupe_reporters_from_config(store):
    service = ModerationService(store, ModerationConfig(dedupe_reporters=True, store_dir="unused"))
    seed_content(store, "post-1")
    for _ in range(6):
        _, evaluation = service.add_report("post-1", "same-user")
    assert evaluation.report_count == 1
    assert service.get_content("post-1") is not None


# ---------------------------------------------------------------------------
# Submission gate
# ---------------------------------------------------------------------------


def test_submit_clean_content_is_stored(service):
    item = service.submit_content("alice", "Sunset over the hills", ["https://cdn.example.com/a.jpg"])
    stored = service.get_content(item.id)
    assert stored.author_id == "alice"
    assert stored.media == ["https://cdn.example.com/a.jpg"]


def test_submit_rejected_content_is_not_stored(store):
    service = ModerationService(store, ModerationConfig(admin_recipient="admin", store_dir="unused"))
    with pytest.raises(ContentRejectedError) as excinfo:
        service.submit_content("mallory", "buy cheap cocaine now")

    assert str(excinfo.value) == GENERIC_REJECTION_MESSAGE
    assert "cocaine" not in str(excinfo.value)
    assert store.list(paths.CONTENT_ITEMS) == []

    alerts = StoreNotificationDispatcher(store).list_for("admin")
    assert len(alerts) == 1
    assert alerts[0].type == NotificationType.CONTENT_BLOCKED
    assert "cocaine" in alerts[0].data["flagged_terms"]


def test_submit_rejects_flagged_media(service, store):
    with pytest.raises(ContentRejectedError):
        service.submit_content("mallory", "holiday", ["https://cdn.example.com/nude.jpg"])
    assert store.list(paths.CONTENT_ITEMS) == []


def test_confirm_upload_deletes_content_with_bad_media(service):
    item = service.submit_content("alice", "holiday", ["file:///tmp/pic.jpg"])
    outcome = service.confirm_upload(item.id, ["https://cdn.example.com/uploads/xxx-pic.jpg"])
    assert outcome.executed
    assert service.get_content(item.id) is None
    assert outcome.action.reason == "Uploaded media failed content classification"


def test_confirm_upload_keeps_clean_content(service):
    item = service.submit_content("alice", "holiday", ["file:///tmp/pic.jpg"])
    outcome = service.confirm_upload(item.id, ["https://cdn.example.com/uploads/pic.jpg"])
    assert not outcome.executed
    assert service.get_content(item.id) is not None


# ---------------------------------------------------------------------------
# Administrative surface
# ---------------------------------------------------------------------------


def test_admin_delete_regardless_of_reports(service, store):
    seed_content(store, "post-1", reports=1, comments=2)
    outcome = service.admin_delete("post-1", "admin-7")
    assert outcome.executed
    assert outcome.action.is_admin_initiated
    assert outcome.action.reason == "Removed by administrator admin-7"
    assert store.list(paths.comments_collection("post-1")) == []

    again = service.admin_delete("post-1", "admin-7")
    assert not again.executed


def test_review_records_reviewed_action(service, store):
    seed_content(store, "post-1", reports=2)
    outcome = service.review("post-1", "Checked, fine")
    assert outcome.action.action == ActionType.REVIEWED
    assert outcome.action.report_count == 2
    with pytest.raises(NotFoundError):
        service.review("ghost")


def test_high_report_items_sorted_by_count(service, store):
    seed_content(store, "a", reports=3)
    seed_content(store, "b", reports=4)
    seed_content(store, "c", reports=1)
    items = service.get_high_report_items(3)
    assert [(i.item.id, i.report_count) for i in items] == [("b", 4), ("a", 3)]
    assert len(items[0].reports) == 4


def test_moderation_logs_newest_first_and_limited(service, store):
    for cid in ["a", "b", "c"]:
        seed_content(store, cid)
        service.admin_delete(cid, "admin")
    logs = service.get_moderation_logs(limit=2)
    assert len(logs) == 2
    assert logs[0].created_at >= logs[1].created_at
    assert len(service.get_moderation_logs()) == 3


def test_process_all_content(service, store):
    seed_content(store, "a", reports=5)
    seed_content(store, "b", reports=3)
    result = service.process_all_content()
    assert (result.deleted_count, result.warned_count, result.processed_count) == (1, 1, 2)


# ---------------------------------------------------------------------------
# Notification wiring and shared stores
# ---------------------------------------------------------------------------


def test_webhook_url_selects_webhook_dispatcher(store):
    config = ModerationConfig(
        notification_webhook_url="http://127.0.0.1:9/hook",
        notification_webhook_secret="s3cret",
        store_dir="unused",
    )
    service = ModerationService(store, config)
    assert isinstance(service.dispatcher, WebhookNotificationDispatcher)
    assert service.dispatcher.secret == "s3cret"

    seed_content(store, "post-1", author_id="alice")
    outcome = service.admin_delete("post-1", "root")
    assert outcome.executed
    assert not outcome.notified
    assert StoreNotificationDispatcher(store).list_for("alice") == []


def test_default_dispatcher_writes_to_store(service):
    assert isinstance(service.dispatcher, StoreNotificationDispatcher)


def test_delete_from_one_process_is_final_for_another():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = ModerationConfig(store_dir=tmpdir)
        web = ModerationService(JsonFileStore(tmpdir), config)
        cli = ModerationService(JsonFileStore(tmpdir), config)
        seed_content(web.store, "post-1", reports=1)
        assert web.get_content("post-1") is not None

        assert cli.admin_delete("post-1", "root").executed
        with pytest.raises(NotFoundError):
            web.add_report("post-1", "late-reporter")

        fresh = ModerationService(JsonFileStore(tmpdir), config)
        assert fresh.get_content("post-1") is None
        assert fresh.get_report_summary("post-1").count == 0
        deletes = fresh.audit_log.get_logs(action=ActionType.DELETED, content_id="post-1")
        assert len(deletes) == 1
