"""Domain entity representing an in-app notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .owner import Owner


class NotificationKind(str, Enum):
    """Severity or category of a notification."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SECURITY = "security"


class NotificationDisplay(str, Enum):
    """Where the client renders a notification."""

    TOAST = "toast"
    BANNER = "banner"
    CENTER = "center"


@dataclass
class Notification:
    """Message delivered to a single user or admin.

    ``read`` and ``dismissed`` are independent flags: a notification can be
    dismissed without having been read.
    """

    id: str | None
    owner: Owner
    kind: NotificationKind
    title: str
    message: str
    display: NotificationDisplay = NotificationDisplay.TOAST
    action: dict[str, Any] | None = None
    read: bool = False
    dismissed: bool = False
    created_at: datetime | None = None
    expires_at: datetime | None = None


__all__ = ["Notification", "NotificationDisplay", "NotificationKind"]
