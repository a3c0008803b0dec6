from .notification import (
    NotificationActionResponse,
    NotificationListResponse,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
    NotificationSendRequest,
    NotificationStatisticsRead,
    UnreadCountResponse,
    UnreadNotificationsResponse,
)

__all__ = [
    "NotificationActionResponse",
    "NotificationListResponse",
    "NotificationPreferencesRead",
    "NotificationPreferencesUpdate",
    "NotificationRead",
    "NotificationSendRequest",
    "NotificationStatisticsRead",
    "UnreadCountResponse",
    "UnreadNotificationsResponse",
]
