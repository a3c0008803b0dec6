"""Utility script to delete notifications whose retention period has ended."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.notifications import purge_expired_notifications
from app.domain.exceptions import NotificationStorageError
from app.infrastructure.database import SessionLocal, initialize_database
from app.utils import ensure_app_timezone


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the purge."""

    parser = argparse.ArgumentParser(
        description="Delete expired user and admin notifications.",
    )
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="ISO timestamp used as the expiry cutoff (default: current time)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print progress logs.",
    )
    return parser.parse_args()


def main() -> None:
    """Purge expired notifications from both namespaces."""

    args = parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    initialize_database()

    session = SessionLocal()
    try:
        removed = purge_expired_notifications(session, now=ensure_app_timezone(args.now))
    except (NotificationStorageError, SQLAlchemyError) as exc:
        session.rollback()
        raise SystemExit(f"Could not purge expired notifications: {exc}") from exc
    else:
        print(
            "Expired notifications deleted:\n"
            + "\n".join(f"  {kind.value}: {count}" for kind, count in removed.items())
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
