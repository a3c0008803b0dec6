"""Repository implementations for infrastructure layer."""

from .notification_preferences_repository import NotificationPreferencesRepository
from .notification_repository import NotificationRepository, new_notification_id

__all__ = [
    "NotificationPreferencesRepository",
    "NotificationRepository",
    "new_notification_id",
]
