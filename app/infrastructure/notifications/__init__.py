"""Realtime notification helpers for the infrastructure layer."""

from .hub import HubState, LiveUpdateHub, Subscription
from .publisher import NotificationPublisher, serialize_notification

__all__ = [
    "HubState",
    "LiveUpdateHub",
    "NotificationPublisher",
    "Subscription",
    "serialize_notification",
]
