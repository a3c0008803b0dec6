"""ORM models used by the application infrastructure."""

from .notification import (
    NOTIFICATION_MODELS,
    AdminNotificationModel,
    NotificationColumnsMixin,
    UserNotificationModel,
)
from .notification_preferences import (
    NOTIFICATION_PREFERENCES_MODELS,
    AdminNotificationPreferencesModel,
    NotificationPreferencesColumnsMixin,
    UserNotificationPreferencesModel,
)

__all__ = [
    "NOTIFICATION_MODELS",
    "NOTIFICATION_PREFERENCES_MODELS",
    "AdminNotificationModel",
    "AdminNotificationPreferencesModel",
    "NotificationColumnsMixin",
    "NotificationPreferencesColumnsMixin",
    "UserNotificationModel",
    "UserNotificationPreferencesModel",
]
