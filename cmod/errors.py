"""Exception taxonomy for the moderation pipeline."""

from __future__ import annotations

from typing import Any, Optional

GENERIC_REJECTION_MESSAGE = "Content violates community guidelines."


class CModError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(CModError):
    """Configuration is missing or invalid."""


class ClassificationError(CModError):
    """The analyzer raised or ran past its time budget."""


class PersistenceError(CModError):
    """A store operation failed; nothing from the failed batch was applied."""


class NotFoundError(CModError):
    """The target document no longer exists."""


class NotificationError(CModError):
    """A notification could not be dispatched."""


class AuditLogError(CModError):
    """A moderation action could not be appended to the audit log."""


class ContentRejectedError(CModError):
    """A submission was blocked by the content analyzer.

    Only the generic message is ever rendered; ``classification`` is kept
    for admin-side logging.
    """

    def __init__(self, classification: Optional[Any] = None) -> None:
        super().__init__(GENERIC_REJECTION_MESSAGE)
        self.classification = classification
