"""Periodic housekeeping for stored notifications."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import OwnerKind
from app.infrastructure.repositories import NotificationRepository
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def purge_expired_notifications(
    session: Session, *, now: datetime | None = None
) -> dict[OwnerKind, int]:
    """Delete user and admin notifications whose expiry date has passed."""

    cutoff = now or now_in_app_timezone()
    removed = {
        owner_kind: NotificationRepository(session, owner_kind).delete_expired(cutoff)
        for owner_kind in OwnerKind
    }
    total = sum(removed.values())
    if total:
        logger.info(
            "Deleted %d expired notifications (%d user, %d admin)",
            total,
            removed[OwnerKind.USER],
            removed[OwnerKind.ADMIN],
        )
    else:
        logger.info("No expired notifications to delete")
    return removed


__all__ = ["purge_expired_notifications"]
