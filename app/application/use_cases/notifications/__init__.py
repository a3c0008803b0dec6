"""Notification use cases."""

from .maintenance import purge_expired_notifications
from .service import NotificationService

__all__ = ["NotificationService", "purge_expired_notifications"]
