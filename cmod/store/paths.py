"""Collection and document path builders."""

from __future__ import annotations

CONTENT_ITEMS = "contentItems"
MODERATION_LOGS = "moderationLogs"
USERS = "users"

REPORTS = "reports"
COMMENTS = "comments"
LIKES = "likes"
NOTIFICATIONS = "notifications"

# Dependent records removed together with a content item.
CONTENT_DEPENDENTS = (REPORTS, COMMENTS, LIKES)


def join(*parts: str) -> str:
    return "/".join(p.strip("/") for p in parts)


def content_path(content_id: str) -> str:
    return join(CONTENT_ITEMS, content_id)


def reports_collection(content_id: str) -> str:
    return join(CONTENT_ITEMS, content_id, REPORTS)


def comments_collection(content_id: str) -> str:
    return join(CONTENT_ITEMS, content_id, COMMENTS)


def likes_collection(content_id: str) -> str:
    return join(CONTENT_ITEMS, content_id, LIKES)


def log_path(log_id: str) -> str:
    return join(MODERATION_LOGS, log_id)


def notifications_collection(user_id: str) -> str:
    return join(USERS, user_id, NOTIFICATIONS)


def parent_collection(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""
