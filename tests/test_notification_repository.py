"""Tests for the notification store."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.domain.entities import (
    Notification,
    NotificationDisplay,
    NotificationKind,
    Owner,
    OwnerKind,
)
from app.domain.exceptions import NotificationStorageError
from app.infrastructure import database
from app.infrastructure.models import UserNotificationModel
from app.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
    new_notification_id,
)
from app.utils import now_in_app_naive_datetime, now_in_app_timezone


def _notification(owner: Owner, **overrides) -> Notification:
    values = {
        "id": None,
        "owner": owner,
        "kind": NotificationKind.INFO,
        "title": "Backup finished",
        "message": "The nightly backup completed.",
    }
    values.update(overrides)
    return Notification(**values)


@pytest.fixture()
def users(session) -> NotificationRepository:
    return NotificationRepository(session, OwnerKind.USER)


@pytest.fixture()
def admins(session) -> NotificationRepository:
    return NotificationRepository(session, OwnerKind.ADMIN)


def test_create_assigns_id_and_defaults(users):
    saved = users.create(_notification(Owner.user(1), action={"label": "Open", "url": "/x"}))

    assert saved.id
    assert saved.owner == Owner.user(1)
    assert saved.display is NotificationDisplay.TOAST
    assert saved.read is False
    assert saved.dismissed is False
    assert saved.created_at is not None
    assert saved.action == {"label": "Open", "url": "/x"}


def test_new_ids_are_unique_and_sortable():
    first = new_notification_id()
    second = new_notification_id()

    assert first != second
    assert len(first) == 32
    assert first[:16] <= second[:16]


def test_create_rejects_other_owner_kind(users):
    with pytest.raises(ValueError):
        users.create(_notification(Owner.admin(1)))


def test_get_is_scoped_to_owner(users):
    saved = users.create(_notification(Owner.user(1)))

    assert users.get(saved.id, owner_id=1) == saved
    assert users.get(saved.id, owner_id=2) is None
    assert users.get("missing", owner_id=1) is None


def test_user_and_admin_tables_never_share_rows(users, admins):
    saved = users.create(_notification(Owner.user(1)))

    assert admins.get(saved.id, owner_id=1) is None
    assert admins.count(1) == 0
    assert admins.mark_read(saved.id, owner_id=1) is False
    assert admins.delete(saved.id, owner_id=1) is False
    assert users.get(saved.id, owner_id=1) is not None


def test_list_is_newest_first_and_filters_unread(users):
    base = now_in_app_timezone()
    old = users.create(_notification(Owner.user(1), title="old", created_at=base - timedelta(minutes=2)))
    middle = users.create(
        _notification(Owner.user(1), title="middle", created_at=base - timedelta(minutes=1))
    )
    new = users.create(_notification(Owner.user(1), title="new", created_at=base))
    users.create(_notification(Owner.user(2), title="someone else"))
    users.mark_read(middle.id, owner_id=1)

    assert [n.id for n in users.list_for_owner(1)] == [new.id, middle.id, old.id]
    assert [n.id for n in users.list_for_owner(1, unread_only=True)] == [new.id, old.id]
    assert [n.id for n in users.list_for_owner(1, limit=1, offset=1)] == [middle.id]


def test_mark_read_and_dismiss_are_independent(users):
    saved = users.create(_notification(Owner.user(1)))

    assert users.dismiss(saved.id, owner_id=1) is True
    stored = users.get(saved.id, owner_id=1)
    assert stored.dismissed is True
    assert stored.read is False

    assert users.mark_read(saved.id, owner_id=1) is True
    assert users.mark_read(saved.id, owner_id=1) is True
    assert users.get(saved.id, owner_id=1).read is True


def test_mark_all_read_only_touches_owner(users):
    for _ in range(3):
        users.create(_notification(Owner.user(1)))
    users.create(_notification(Owner.user(2)))

    assert users.mark_all_read(1) == 3
    assert users.mark_all_read(1) == 0
    assert users.count(1, unread_only=True) == 0
    assert users.count(2, unread_only=True) == 1


def test_delete_is_permanent(users):
    saved = users.create(_notification(Owner.user(1)))

    assert users.delete(saved.id, owner_id=2) is False
    assert users.delete(saved.id, owner_id=1) is True
    assert users.get(saved.id, owner_id=1) is None
    assert users.delete(saved.id, owner_id=1) is False


def test_statistics_counts_by_kind_and_display(users):
    users.create(_notification(Owner.user(1), kind=NotificationKind.SUCCESS))
    users.create(_notification(Owner.user(1), kind=NotificationKind.WARNING))
    security = users.create(
        _notification(
            Owner.user(1),
            kind=NotificationKind.SECURITY,
            display=NotificationDisplay.BANNER,
        )
    )
    users.mark_read(security.id, owner_id=1)

    stats = users.statistics(1)

    assert (stats.total, stats.unread, stats.read) == (3, 2, 1)
    assert stats.by_kind[NotificationKind.SUCCESS] == 1
    assert stats.by_kind[NotificationKind.ERROR] == 0
    assert stats.by_display[NotificationDisplay.TOAST] == 2
    assert stats.by_display[NotificationDisplay.BANNER] == 1


def test_statistics_for_owner_without_notifications(users):
    stats = users.statistics(42)

    assert (stats.total, stats.unread, stats.read) == (0, 0, 0)
    assert set(stats.by_kind) == set(NotificationKind)


def test_delete_expired(users, admins):
    now = now_in_app_timezone()
    expired = users.create(_notification(Owner.user(1), expires_at=now - timedelta(seconds=1)))
    fresh = users.create(_notification(Owner.user(1), expires_at=now + timedelta(days=1)))
    forever = users.create(_notification(Owner.user(1)))
    admin_expired = admins.create(
        _notification(Owner.admin(1), expires_at=now - timedelta(days=1))
    )

    assert users.delete_expired(now) == 1
    assert users.get(expired.id, owner_id=1) is None
    assert users.get(fresh.id, owner_id=1) is not None
    assert users.get(forever.id, owner_id=1) is not None
    assert admins.get(admin_expired.id, owner_id=1) is not None


def test_enforce_limit_keeps_newest(users):
    base = now_in_app_timezone()
    created = [
        users.create(_notification(Owner.user(1), created_at=base + timedelta(seconds=i)))
        for i in range(5)
    ]
    other = users.create(_notification(Owner.user(2), created_at=base - timedelta(days=1)))

    assert users.enforce_limit(1, 3) == 2
    assert [n.id for n in users.list_for_owner(1)] == [n.id for n in reversed(created[2:])]
    assert users.get(other.id, owner_id=2) is not None
    assert users.enforce_limit(1, 3) == 0


def test_kind_is_constrained_by_the_database(session):
    session.add(
        UserNotificationModel(
            id=new_notification_id(),
            owner_id=1,
            kind="critical",
            display="toast",
            title="t",
            message="m",
            created_at=now_in_app_naive_datetime(),
        )
    )
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


@pytest.fixture()
def broken_session():
    """Session on a database where the notification tables were never created."""

    engine = database.build_engine("sqlite://")
    db = database.build_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.mark.parametrize(
    "read",
    [
        lambda repository: repository.get("some-id", owner_id=1),
        lambda repository: repository.list_for_owner(1),
        lambda repository: repository.count(1, unread_only=True),
        lambda repository: repository.statistics(1),
        lambda repository: repository.enforce_limit(1, 10),
    ],
    ids=["get", "list", "count", "statistics", "enforce_limit"],
)
def test_read_failures_raise_storage_error(broken_session, read):
    repository = NotificationRepository(broken_session, OwnerKind.USER)

    with pytest.raises(NotificationStorageError):
        read(repository)


def test_preferences_read_failure_raises_storage_error(broken_session):
    repository = NotificationPreferencesRepository(broken_session, OwnerKind.ADMIN)

    with pytest.raises(NotificationStorageError):
        repository.get(1)
