from __future__ import annotations

from app.application.use_cases.notifications import (
    NotificationService,
    purge_expired_notifications,
)
from app.domain.entities import OwnerKind


def test_purge_removes_expired_notifications_of_both_kinds(session, publisher, settings):
    users = NotificationService(session, OwnerKind.USER, publisher, settings=settings)
    admins = NotificationService(session, OwnerKind.ADMIN, publisher, settings=settings)
    long_lived = NotificationService(
        session,
        OwnerKind.USER,
        publisher,
        settings=settings.model_copy(
            update={"notification_retention_days": settings.notification_retention_days * 2}
        ),
    )
    users.send_info(1, "old", "expires")
    old_admin = admins.send_info(1, "old", "expires")
    kept = long_lived.send_info(1, "new", "stays")

    removed = purge_expired_notifications(session, now=old_admin.expires_at)

    assert removed == {OwnerKind.USER: 1, OwnerKind.ADMIN: 1}
    assert [n.id for n in users.list(1)] == [kept.id]
    assert admins.list(1) == []
    assert purge_expired_notifications(session, now=old_admin.expires_at) == {
        OwnerKind.USER: 0,
        OwnerKind.ADMIN: 0,
    }


def test_purge_with_nothing_stored(session):
    assert purge_expired_notifications(session) == {OwnerKind.USER: 0, OwnerKind.ADMIN: 0}
