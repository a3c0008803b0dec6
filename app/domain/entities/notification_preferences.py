"""Domain entity holding per-actor notification display preferences."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .owner import Owner


@dataclass
class NotificationPreferences:
    """Display preferences of a single owner.

    An owner without a stored row behaves exactly as if it had one with the
    default values below.
    """

    owner: Owner
    enable_toast: bool = True
    enable_banner: bool = True
    enable_center: bool = True
    enable_sound: bool = False
    toast_duration_success: int = 5
    toast_duration_info: int = 5
    toast_duration_warning: int = 10
    updated_at: datetime | None = None


PREFERENCE_TOGGLE_FIELDS = ("enable_toast", "enable_banner", "enable_center", "enable_sound")
PREFERENCE_DURATION_FIELDS = (
    "toast_duration_success",
    "toast_duration_info",
    "toast_duration_warning",
)
EDITABLE_PREFERENCE_FIELDS = frozenset(PREFERENCE_TOGGLE_FIELDS + PREFERENCE_DURATION_FIELDS)


__all__ = [
    "EDITABLE_PREFERENCE_FIELDS",
    "NotificationPreferences",
    "PREFERENCE_DURATION_FIELDS",
    "PREFERENCE_TOGGLE_FIELDS",
]
