"""Utility helpers to push notifications to live subscribers."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import Notification, OwnerKind

from .hub import LiveUpdateHub

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and hand them to the live update hub.

    Publishing never raises: the notification is already stored when this
    runs, and a missing or broken hub must not turn that into a failure.
    """

    def __init__(self, hub: LiveUpdateHub | None) -> None:
        self._hub = hub

    def dispatch(self, notification: Notification) -> None:
        """Schedule ``notification`` to be delivered to its owner's sessions."""

        if self._hub is None:
            return
        message = {"type": "notification", "data": serialize_notification(notification)}
        try:
            self._hub.publish(notification.owner, message)
        except Exception:
            logger.warning(
                "Could not publish notification %s to %s",
                notification.id,
                notification.owner,
                exc_info=True,
            )


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON representation shared by the REST and websocket APIs."""

    owner = notification.owner
    return {
        "id": notification.id,
        "user_id": owner.id if owner.kind is OwnerKind.USER else None,
        "admin_id": owner.id if owner.kind is OwnerKind.ADMIN else None,
        "kind": notification.kind.value,
        "display": notification.display.value,
        "title": notification.title,
        "message": notification.message,
        "action": notification.action,
        "read": notification.read,
        "dismissed": notification.dismissed,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "expires_at": notification.expires_at.isoformat()
        if notification.expires_at
        else None,
    }


__all__ = ["NotificationPublisher", "serialize_notification"]
