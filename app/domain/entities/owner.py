"""Domain entity identifying who a notification belongs to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Owner ids are stored in signed 64-bit integer columns.
MAX_OWNER_ID = 2**63 - 1


class OwnerKind(str, Enum):
    """Namespaces of actors that can own notifications."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Owner:
    """A user or admin identity.

    User and admin identifiers live in separate namespaces, so ``Owner(USER, 1)``
    and ``Owner(ADMIN, 1)`` are different actors.
    """

    kind: OwnerKind
    id: int

    @classmethod
    def user(cls, user_id: int) -> "Owner":
        return cls(OwnerKind.USER, user_id)

    @classmethod
    def admin(cls, admin_id: int) -> "Owner":
        return cls(OwnerKind.ADMIN, admin_id)

    def __str__(self) -> str:
        return f"{self.kind.value}-{self.id}"


__all__ = ["MAX_OWNER_ID", "Owner", "OwnerKind"]
