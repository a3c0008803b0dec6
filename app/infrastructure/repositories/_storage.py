"""Shared error handling for notification repositories."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.exceptions import NotificationStorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(session: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise database failures as :class:`NotificationStorageError`."""

    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Database error while trying to %s: %s", action, exc)
        raise NotificationStorageError(f"Could not {action}") from exc
