"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt

from app.domain.entities import NotificationDisplay, NotificationKind


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: int | None = None
    admin_id: int | None = None
    kind: NotificationKind
    display: NotificationDisplay
    title: str
    message: str
    action: dict[str, Any] | None = None
    read: bool
    dismissed: bool
    created_at: datetime
    expires_at: datetime | None = None


class NotificationListResponse(BaseModel):
    """One page of an owner's notifications, newest first."""

    notifications: list[NotificationRead]
    limit: int
    offset: int
    count: int


class UnreadNotificationsResponse(BaseModel):
    notifications: list[NotificationRead]
    count: int


class UnreadCountResponse(BaseModel):
    count: int


class NotificationStatisticsRead(BaseModel):
    """Counters for an owner; ``read`` always equals ``total - unread``."""

    total: int
    unread: int
    read: int
    by_kind: dict[NotificationKind, int]
    by_display: dict[NotificationDisplay, int]


class NotificationPreferencesRead(BaseModel):
    user_id: int | None = None
    admin_id: int | None = None
    enable_toast: bool
    enable_banner: bool
    enable_center: bool
    enable_sound: bool
    toast_duration_success: int
    toast_duration_info: int
    toast_duration_warning: int
    updated_at: datetime | None = None


class NotificationPreferencesUpdate(BaseModel):
    """Partial preferences update; omitted fields keep their current value."""

    model_config = ConfigDict(extra="forbid")

    enable_toast: StrictBool | None = None
    enable_banner: StrictBool | None = None
    enable_center: StrictBool | None = None
    enable_sound: StrictBool | None = None
    toast_duration_success: StrictInt | None = Field(default=None, gt=0)
    toast_duration_info: StrictInt | None = Field(default=None, gt=0)
    toast_duration_warning: StrictInt | None = Field(default=None, gt=0)


class NotificationSendRequest(BaseModel):
    """Payload used by administrators to send themselves a notification."""

    kind: NotificationKind = Field(validation_alias=AliasChoices("kind", "type"))
    display: NotificationDisplay = NotificationDisplay.TOAST
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    action: dict[str, Any] | None = None


class NotificationActionResponse(BaseModel):
    """Confirmation returned by state-changing endpoints."""

    message: str
    id: str | None = None
    updated: int | None = None


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
