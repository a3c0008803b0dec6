"""SQLAlchemy models for persisted user and admin notifications."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import expression

from app.domain.entities import NotificationDisplay, NotificationKind, OwnerKind
from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


def _in_values(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class NotificationColumnsMixin:
    """Columns shared by both notification tables.

    Subclasses map ``owner_id`` onto their own owner column so the two tables
    never share a column name for the actor.
    """

    id = Column(String(32), primary_key=True)
    kind = Column(String(20), nullable=False)
    display = Column(String(20), nullable=False, default=NotificationDisplay.TOAST.value)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    action = Column(JSON, nullable=True)
    read = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    dismissed = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True)
    expires_at = Column(DateTime(), nullable=True, index=True)

    @declared_attr.directive
    def __table_args__(cls):
        return (
            CheckConstraint(
                _in_values("kind", tuple(kind.value for kind in NotificationKind)),
                name=f"ck_{cls.__tablename__}_kind",
            ),
            CheckConstraint(
                _in_values("display", tuple(display.value for display in NotificationDisplay)),
                name=f"ck_{cls.__tablename__}_display",
            ),
        )


class UserNotificationModel(NotificationColumnsMixin, Base):
    """Notifications addressed to end users."""

    __tablename__ = "user_notifications"

    owner_id = Column("user_id", Integer, nullable=False, index=True)


class AdminNotificationModel(NotificationColumnsMixin, Base):
    """Notifications addressed to server administrators."""

    __tablename__ = "admin_notifications"

    owner_id = Column("admin_id", Integer, nullable=False, index=True)


NOTIFICATION_MODELS: dict[OwnerKind, type[NotificationColumnsMixin]] = {
    OwnerKind.USER: UserNotificationModel,
    OwnerKind.ADMIN: AdminNotificationModel,
}


__all__ = [
    "AdminNotificationModel",
    "NOTIFICATION_MODELS",
    "NotificationColumnsMixin",
    "UserNotificationModel",
]
