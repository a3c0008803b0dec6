"""Persistence helpers for notification entities."""

from __future__ import annotations

import time
from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from app.domain.entities import (
    Notification,
    NotificationDisplay,
    NotificationKind,
    NotificationStatistics,
    Owner,
    OwnerKind,
)
from app.infrastructure.models import NOTIFICATION_MODELS, NotificationColumnsMixin
from app.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone

from ._storage import storage_errors


def new_notification_id() -> str:
    """Return a unique identifier whose prefix sorts by creation time."""

    return f"{time.time_ns():016x}{uuid4().hex[:16]}"


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects of one owner kind.

    Every lookup and mutation is filtered by the owner, so a row owned by
    somebody else behaves exactly like a missing row.
    """

    def __init__(self, session: Session, owner_kind: OwnerKind | str) -> None:
        self.session = session
        self.owner_kind = OwnerKind(owner_kind)
        self.model = NOTIFICATION_MODELS[self.owner_kind]

    def get(self, notification_id: str, *, owner_id: int) -> Notification | None:
        with storage_errors(self.session, "load the notification"):
            model = self._by_id(notification_id, owner_id).one_or_none()
        return self._to_entity(model) if model else None

    def list_for_owner(
        self,
        owner_id: int,
        *,
        unread_only: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[Notification]:
        query = self._owned(owner_id)
        if unread_only:
            query = query.filter(self.model.read.is_(False))
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        with storage_errors(self.session, "list notifications"):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def count(self, owner_id: int, *, unread_only: bool = False) -> int:
        query = self._owned(owner_id)
        if unread_only:
            query = query.filter(self.model.read.is_(False))
        with storage_errors(self.session, "count notifications"):
            return query.count()

    def create(self, notification: Notification) -> Notification:
        if notification.owner.kind is not self.owner_kind:
            msg = f"Cannot store a {notification.owner.kind.value} notification as {self.owner_kind.value}"
            raise ValueError(msg)

        model = self.model()
        model.id = new_notification_id()
        model.owner_id = notification.owner.id
        model.kind = NotificationKind(notification.kind).value
        model.display = NotificationDisplay(notification.display).value
        model.title = notification.title
        model.message = notification.message
        model.action = notification.action
        model.read = notification.read
        model.dismissed = notification.dismissed
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)
        with storage_errors(self.session, "create the notification"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_read(self, notification_id: str, *, owner_id: int) -> bool:
        return self._update_one(notification_id, owner_id, {self.model.read: True})

    def dismiss(self, notification_id: str, *, owner_id: int) -> bool:
        return self._update_one(notification_id, owner_id, {self.model.dismissed: True})

    def mark_all_read(self, owner_id: int) -> int:
        with storage_errors(self.session, "mark notifications as read"):
            updated = (
                self._owned(owner_id)
                .filter(self.model.read.is_(False))
                .update({self.model.read: True}, synchronize_session="fetch")
            )
            self.session.commit()
        return updated

    def delete(self, notification_id: str, *, owner_id: int) -> bool:
        with storage_errors(self.session, "delete the notification"):
            deleted = self._by_id(notification_id, owner_id).delete(synchronize_session=False)
            self.session.commit()
        return deleted > 0

    def statistics(self, owner_id: int) -> NotificationStatistics:
        unread_flag = case((self.model.read.is_(False), 1), else_=0)
        with storage_errors(self.session, "compute notification statistics"):
            total, unread = (
                self.session.query(
                    func.count(self.model.id), func.coalesce(func.sum(unread_flag), 0)
                )
                .filter(self.model.owner_id == owner_id)
                .one()
            )
            kind_counts = self._grouped_counts(owner_id, self.model.kind)
            display_counts = self._grouped_counts(owner_id, self.model.display)

        by_kind = {kind: 0 for kind in NotificationKind}
        for kind, amount in kind_counts:
            by_kind[NotificationKind(kind)] = amount

        by_display = {display: 0 for display in NotificationDisplay}
        for display, amount in display_counts:
            by_display[NotificationDisplay(display)] = amount

        return NotificationStatistics(
            total=int(total),
            unread=int(unread),
            by_kind=by_kind,
            by_display=by_display,
        )

    def delete_expired(self, now: datetime | None = None) -> int:
        """Remove every notification of this kind whose expiry has passed."""

        cutoff = ensure_app_naive_datetime(now or now_in_app_timezone())
        with storage_errors(self.session, "delete expired notifications"):
            deleted = (
                self.session.query(self.model)
                .filter(self.model.expires_at.isnot(None))
                .filter(self.model.expires_at <= cutoff)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        return deleted

    def enforce_limit(self, owner_id: int, limit: int) -> int:
        """Keep only the ``limit`` newest notifications of ``owner_id``."""

        with storage_errors(self.session, "trim old notifications"):
            surplus = [
                row.id
                for row in self._owned(owner_id)
                .with_entities(self.model.id)
                .order_by(self.model.created_at.desc(), self.model.id.desc())
                .offset(limit)
                .all()
            ]
            if not surplus:
                return 0
            deleted = (
                self._owned(owner_id)
                .filter(self.model.id.in_(surplus))
                .delete(synchronize_session=False)
            )
            self.session.commit()
        return deleted

    def _owned(self, owner_id: int) -> Query:
        return self.session.query(self.model).filter(self.model.owner_id == owner_id)

    def _by_id(self, notification_id: str, owner_id: int) -> Query:
        return self._owned(owner_id).filter(self.model.id == notification_id)

    def _update_one(
        self, notification_id: str, owner_id: int, values: dict[Any, Any]
    ) -> bool:
        with storage_errors(self.session, "update the notification"):
            matched = self._by_id(notification_id, owner_id).update(
                values, synchronize_session="fetch"
            )
            self.session.commit()
        return matched > 0

    def _grouped_counts(self, owner_id: int, column: Any) -> list[tuple[str, int]]:
        return (
            self.session.query(column, func.count(self.model.id))
            .filter(self.model.owner_id == owner_id)
            .group_by(column)
            .all()
        )

    def _to_entity(self, model: NotificationColumnsMixin) -> Notification:
        return Notification(
            id=model.id,
            owner=Owner(self.owner_kind, model.owner_id),
            kind=NotificationKind(model.kind),
            display=NotificationDisplay(model.display),
            title=model.title,
            message=model.message,
            action=model.action,
            read=bool(model.read),
            dismissed=bool(model.dismissed),
            created_at=ensure_app_timezone(model.created_at),
            expires_at=ensure_app_timezone(model.expires_at),
        )


__all__ = ["NotificationRepository", "new_notification_id"]
