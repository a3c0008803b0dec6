"""Shared fixtures: every test runs against a fresh in-memory SQLite database."""

from __future__ import annotations

import os

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_TIMEZONE"] = "UTC"

from app.config import get_settings, reset_settings_cache  # noqa: E402

reset_settings_cache()

from app.infrastructure import database  # noqa: E402
from app.utils import get_app_timezone  # noqa: E402

get_app_timezone.cache_clear()


class RecordingPublisher:
    """Stand-in for :class:`NotificationPublisher` that remembers dispatches."""

    def __init__(self) -> None:
        self.dispatched = []

    def dispatch(self, notification) -> None:
        self.dispatched.append(notification)


@pytest.fixture(autouse=True)
def clean_database():
    """Recreate every table before each test."""

    database.Base.metadata.drop_all(bind=database.engine)
    database.initialize_database()
    yield
    database.Base.metadata.drop_all(bind=database.engine)


@pytest.fixture()
def session():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def settings():
    return get_settings()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def anyio_backend():
    return "asyncio"
