"""Errors raised by the notification domain."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification failures."""


class NotificationNotFoundError(NotificationError, ValueError):
    """The notification does not exist or belongs to another owner.

    Both situations raise the same error so callers cannot probe for
    identifiers owned by someone else.
    """

    def __init__(self, notification_id: str) -> None:
        super().__init__("Notification not found")
        self.notification_id = notification_id


class NotificationValidationError(NotificationError, ValueError):
    """Input rejected before reaching the database."""


class NotificationStorageError(NotificationError, RuntimeError):
    """The database failed while reading or writing notifications."""


__all__ = [
    "NotificationError",
    "NotificationNotFoundError",
    "NotificationStorageError",
    "NotificationValidationError",
]
