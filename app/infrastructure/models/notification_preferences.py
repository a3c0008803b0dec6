"""SQLAlchemy models for per-owner notification preferences."""

from sqlalchemy import Boolean, Column, DateTime, Integer

from app.domain.entities import OwnerKind
from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationPreferencesColumnsMixin:
    """Columns shared by the user and admin preference tables."""

    enable_toast = Column(Boolean, nullable=False, default=True)
    enable_banner = Column(Boolean, nullable=False, default=True)
    enable_center = Column(Boolean, nullable=False, default=True)
    enable_sound = Column(Boolean, nullable=False, default=False)
    toast_duration_success = Column(Integer, nullable=False, default=5)
    toast_duration_info = Column(Integer, nullable=False, default=5)
    toast_duration_warning = Column(Integer, nullable=False, default=10)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


class UserNotificationPreferencesModel(NotificationPreferencesColumnsMixin, Base):
    """One preferences row per user."""

    __tablename__ = "user_notification_preferences"

    owner_id = Column("user_id", Integer, primary_key=True, autoincrement=False)


class AdminNotificationPreferencesModel(NotificationPreferencesColumnsMixin, Base):
    """One preferences row per admin."""

    __tablename__ = "admin_notification_preferences"

    owner_id = Column("admin_id", Integer, primary_key=True, autoincrement=False)


NOTIFICATION_PREFERENCES_MODELS: dict[OwnerKind, type[NotificationPreferencesColumnsMixin]] = {
    OwnerKind.USER: UserNotificationPreferencesModel,
    OwnerKind.ADMIN: AdminNotificationPreferencesModel,
}


__all__ = [
    "AdminNotificationPreferencesModel",
    "NOTIFICATION_PREFERENCES_MODELS",
    "NotificationPreferencesColumnsMixin",
    "UserNotificationPreferencesModel",
]
