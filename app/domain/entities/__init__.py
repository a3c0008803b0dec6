"""Domain entities exposed by the application."""

from .notification import Notification, NotificationDisplay, NotificationKind
from .notification_preferences import (
    EDITABLE_PREFERENCE_FIELDS,
    PREFERENCE_DURATION_FIELDS,
    PREFERENCE_TOGGLE_FIELDS,
    NotificationPreferences,
)
from .notification_statistics import NotificationStatistics
from .owner import MAX_OWNER_ID, Owner, OwnerKind

__all__ = [
    "EDITABLE_PREFERENCE_FIELDS",
    "MAX_OWNER_ID",
    "PREFERENCE_DURATION_FIELDS",
    "PREFERENCE_TOGGLE_FIELDS",
    "Notification",
    "NotificationDisplay",
    "NotificationKind",
    "NotificationPreferences",
    "NotificationStatistics",
    "Owner",
    "OwnerKind",
]
