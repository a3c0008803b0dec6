"""Aggregate application use cases."""

from .notifications import NotificationService, purge_expired_notifications

__all__ = ["NotificationService", "purge_expired_notifications"]
