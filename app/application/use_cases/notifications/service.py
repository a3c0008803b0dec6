"""Business rules for creating, reading and updating notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.entities import (
    EDITABLE_PREFERENCE_FIELDS,
    MAX_OWNER_ID,
    PREFERENCE_DURATION_FIELDS,
    PREFERENCE_TOGGLE_FIELDS,
    Notification,
    NotificationDisplay,
    NotificationKind,
    NotificationPreferences,
    NotificationStatistics,
    Owner,
    OwnerKind,
)
from app.domain.exceptions import (
    NotificationNotFoundError,
    NotificationStorageError,
    NotificationValidationError,
)
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
)
from app.utils import expiration_for, now_in_app_timezone

logger = logging.getLogger(__name__)

_TITLE_MAX_LENGTH = 255


class NotificationService:
    """Single entry point for notification operations of one owner kind.

    User and admin notifications use separate instances backed by separate
    tables; nothing one instance does can reach the other namespace.
    """

    def __init__(
        self,
        session: Session,
        owner_kind: OwnerKind | str,
        publisher: NotificationPublisher,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.owner_kind = OwnerKind(owner_kind)
        self._settings = settings or get_settings()
        self._notifications = NotificationRepository(session, self.owner_kind)
        self._preferences = NotificationPreferencesRepository(session, self.owner_kind)
        self._publisher = publisher

    def send(
        self,
        owner_id: int,
        kind: NotificationKind | str,
        title: str,
        message: str,
        *,
        display: NotificationDisplay | str = NotificationDisplay.TOAST,
        action: Mapping[str, Any] | None = None,
    ) -> Notification:
        """Store a notification for ``owner_id`` and push it to live sessions."""

        owner = self._owner(owner_id)
        kind = _coerce_enum(NotificationKind, kind, "kind")
        display = _coerce_enum(NotificationDisplay, display, "display")
        title = _required_text(title, "title")
        message = _required_text(message, "message")
        if len(title) > _TITLE_MAX_LENGTH:
            raise NotificationValidationError(
                f"title must be at most {_TITLE_MAX_LENGTH} characters"
            )
        if action is not None and not isinstance(action, Mapping):
            raise NotificationValidationError("action must be an object")

        created_at = now_in_app_timezone()
        saved = self._notifications.create(
            Notification(
                id=None,
                owner=owner,
                kind=kind,
                display=display,
                title=title,
                message=message,
                action=dict(action) if action is not None else None,
                created_at=created_at,
                expires_at=expiration_for(
                    created_at, days=self._settings.notification_retention_days
                ),
            )
        )
        self._publisher.dispatch(saved)
        self._trim(owner_id)
        logger.info("Notification %s (%s) sent to %s", saved.id, kind.value, owner)
        return saved

    def send_success(self, owner_id: int, title: str, message: str, **options: Any) -> Notification:
        return self._send_kind(NotificationKind.SUCCESS, owner_id, title, message, **options)

    def send_info(self, owner_id: int, title: str, message: str, **options: Any) -> Notification:
        return self._send_kind(NotificationKind.INFO, owner_id, title, message, **options)

    def send_warning(self, owner_id: int, title: str, message: str, **options: Any) -> Notification:
        return self._send_kind(NotificationKind.WARNING, owner_id, title, message, **options)

    def send_error(self, owner_id: int, title: str, message: str, **options: Any) -> Notification:
        return self._send_kind(NotificationKind.ERROR, owner_id, title, message, **options)

    def send_security(self, owner_id: int, title: str, message: str, **options: Any) -> Notification:
        """Security notices are shown as banners unless told otherwise."""

        options.setdefault("display", NotificationDisplay.BANNER)
        return self._send_kind(NotificationKind.SECURITY, owner_id, title, message, **options)

    def get(self, notification_id: str, owner_id: int) -> Notification:
        self._owner(owner_id)
        notification = self._notifications.get(notification_id, owner_id=owner_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        return notification

    def list(
        self, owner_id: int, *, limit: int | None = None, offset: int = 0
    ) -> Sequence[Notification]:
        """Return notifications newest first, one page at a time."""

        self._owner(owner_id)
        if limit is None:
            limit = self._settings.notification_page_size
        return self._notifications.list_for_owner(owner_id, limit=limit, offset=max(offset, 0))

    def list_unread(self, owner_id: int) -> Sequence[Notification]:
        self._owner(owner_id)
        return self._notifications.list_for_owner(owner_id, unread_only=True)

    def mark_read(self, notification_id: str, owner_id: int) -> None:
        """Mark one notification as read; repeating the call is harmless."""

        self._owner(owner_id)
        if not self._notifications.mark_read(notification_id, owner_id=owner_id):
            raise NotificationNotFoundError(notification_id)

    def mark_all_read(self, owner_id: int) -> int:
        """Mark every unread notification of ``owner_id`` as read."""

        self._owner(owner_id)
        return self._notifications.mark_all_read(owner_id)

    def dismiss(self, notification_id: str, owner_id: int) -> None:
        self._owner(owner_id)
        if not self._notifications.dismiss(notification_id, owner_id=owner_id):
            raise NotificationNotFoundError(notification_id)

    def delete(self, notification_id: str, owner_id: int) -> None:
        self._owner(owner_id)
        if not self._notifications.delete(notification_id, owner_id=owner_id):
            raise NotificationNotFoundError(notification_id)

    def get_unread_count(self, owner_id: int) -> int:
        self._owner(owner_id)
        return self._notifications.count(owner_id, unread_only=True)

    def get_statistics(self, owner_id: int) -> NotificationStatistics:
        self._owner(owner_id)
        return self._notifications.statistics(owner_id)

    def get_preferences(self, owner_id: int) -> NotificationPreferences:
        """Return stored preferences, or the defaults when none were saved."""

        owner = self._owner(owner_id)
        stored = self._preferences.get(owner_id)
        if stored is not None:
            return stored
        return NotificationPreferences(owner=owner)

    def update_preferences(
        self, owner_id: int, changes: Mapping[str, Any]
    ) -> NotificationPreferences:
        """Apply ``changes`` on top of the current preferences.

        Fields missing from ``changes`` keep their previous value.
        """

        self._owner(owner_id)
        unknown = sorted(set(changes) - EDITABLE_PREFERENCE_FIELDS)
        if unknown:
            raise NotificationValidationError(
                f"Unknown preference fields: {', '.join(unknown)}"
            )
        for name in PREFERENCE_TOGGLE_FIELDS:
            if name in changes and not isinstance(changes[name], bool):
                raise NotificationValidationError(f"{name} must be a boolean")
        for name in PREFERENCE_DURATION_FIELDS:
            if name not in changes:
                continue
            value = changes[name]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise NotificationValidationError(f"{name} must be a positive integer")

        current = self.get_preferences(owner_id)
        return self._preferences.save(replace(current, **dict(changes)))

    def _send_kind(
        self,
        kind: NotificationKind,
        owner_id: int,
        title: str,
        message: str,
        *,
        display: NotificationDisplay | str = NotificationDisplay.TOAST,
        action: Mapping[str, Any] | None = None,
    ) -> Notification:
        return self.send(owner_id, kind, title, message, display=display, action=action)

    def _owner(self, owner_id: int) -> Owner:
        if (
            isinstance(owner_id, bool)
            or not isinstance(owner_id, int)
            or not 0 < owner_id <= MAX_OWNER_ID
        ):
            raise NotificationValidationError(
                f"{self.owner_kind.value} id must be a positive integer"
            )
        return Owner(self.owner_kind, owner_id)

    def _trim(self, owner_id: int) -> None:
        limit = self._settings.notification_max_per_owner
        if not limit:
            return
        try:
            removed = self._notifications.enforce_limit(owner_id, limit)
        except NotificationStorageError:
            logger.warning(
                "Could not trim old notifications of %s %s", self.owner_kind.value, owner_id
            )
            return
        if removed:
            logger.info(
                "Deleted %d old notifications of %s %s", removed, self.owner_kind.value, owner_id
            )


def _coerce_enum(enum_type, value, field_name: str):
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise NotificationValidationError(
            f"Invalid {field_name} '{value}'. Expected one of: {allowed}"
        ) from exc


def _required_text(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise NotificationValidationError(f"{field_name} is required")
    return value.strip()


__all__ = ["NotificationService"]
