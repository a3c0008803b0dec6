"""Persistence layer for notification preferences."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import (
    EDITABLE_PREFERENCE_FIELDS,
    NotificationPreferences,
    Owner,
    OwnerKind,
)
from app.infrastructure.models import (
    NOTIFICATION_PREFERENCES_MODELS,
    NotificationPreferencesColumnsMixin,
)
from app.utils import ensure_app_timezone, now_in_app_naive_datetime

from ._storage import storage_errors


class NotificationPreferencesRepository:
    """Store one full preferences row per owner of a given kind."""

    def __init__(self, session: Session, owner_kind: OwnerKind | str) -> None:
        self.session = session
        self.owner_kind = OwnerKind(owner_kind)
        self.model = NOTIFICATION_PREFERENCES_MODELS[self.owner_kind]

    def get(self, owner_id: int) -> NotificationPreferences | None:
        with storage_errors(self.session, "load notification preferences"):
            model = self.session.get(self.model, owner_id)
        return self._to_entity(model) if model else None

    def save(self, preferences: NotificationPreferences) -> NotificationPreferences:
        """Insert or replace the row for ``preferences.owner``."""

        if preferences.owner.kind is not self.owner_kind:
            msg = f"Cannot store {preferences.owner.kind.value} preferences as {self.owner_kind.value}"
            raise ValueError(msg)

        with storage_errors(self.session, "save notification preferences"):
            model = self.session.get(self.model, preferences.owner.id)
            if model is None:
                model = self.model()
                model.owner_id = preferences.owner.id
            for name in EDITABLE_PREFERENCE_FIELDS:
                setattr(model, name, getattr(preferences, name))
            model.updated_at = now_in_app_naive_datetime()
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def _to_entity(self, model: NotificationPreferencesColumnsMixin) -> NotificationPreferences:
        return NotificationPreferences(
            owner=Owner(self.owner_kind, model.owner_id),
            enable_toast=model.enable_toast,
            enable_banner=model.enable_banner,
            enable_center=model.enable_center,
            enable_sound=model.enable_sound,
            toast_duration_success=model.toast_duration_success,
            toast_duration_info=model.toast_duration_info,
            toast_duration_warning=model.toast_duration_warning,
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationPreferencesRepository"]
