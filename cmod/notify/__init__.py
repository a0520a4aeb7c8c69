"""Author notification dispatch."""

from cmod.notify.dispatcher import (
    NotificationDispatcher,
    StoreNotificationDispatcher,
    WebhookNotificationDispatcher,
)

__all__ = [
    "NotificationDispatcher",
    "StoreNotificationDispatcher",
    "WebhookNotificationDispatcher",
]
