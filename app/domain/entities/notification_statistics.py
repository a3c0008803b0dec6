"""Derived counters describing an owner's notifications."""

from __future__ import annotations

from dataclasses import dataclass, field

from .notification import NotificationDisplay, NotificationKind


@dataclass(frozen=True)
class NotificationStatistics:
    """Aggregated counts; ``read`` is always ``total - unread``."""

    total: int
    unread: int
    by_kind: dict[NotificationKind, int] = field(default_factory=dict)
    by_display: dict[NotificationDisplay, int] = field(default_factory=dict)

    @property
    def read(self) -> int:
        return self.total - self.unread


__all__ = ["NotificationStatistics"]
