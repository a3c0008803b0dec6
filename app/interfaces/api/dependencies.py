"""FastAPI dependency utilities."""

from fastapi import Depends, Header, HTTPException, Request, status

from app.config import Settings
from app.domain.entities import MAX_OWNER_ID, OwnerKind
from app.infrastructure.notifications import LiveUpdateHub, NotificationPublisher

USER_ID_HEADER = "X-User-Id"
ADMIN_ID_HEADER = "X-Admin-Id"

OWNER_ID_HEADERS = {
    OwnerKind.USER: USER_ID_HEADER,
    OwnerKind.ADMIN: ADMIN_ID_HEADER,
}


def parse_owner_id(raw_value: str | None) -> int | None:
    """Return the owner id in ``raw_value`` or ``None`` when it is not a valid one."""

    if raw_value is None:
        return None
    try:
        owner_id = int(raw_value.strip())
    except ValueError:
        return None
    return owner_id if 0 < owner_id <= MAX_OWNER_ID else None


def _require_owner_id(raw_value: str | None, header: str) -> int:
    owner_id = parse_owner_id(raw_value)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing or invalid {header} header",
        )
    return owner_id


def get_current_user_id(
    user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> int:
    """Return the user resolved by the authentication layer in front of the API."""

    return _require_owner_id(user_id, USER_ID_HEADER)


def get_current_admin_id(
    admin_id: str | None = Header(default=None, alias=ADMIN_ID_HEADER),
) -> int:
    """Return the admin resolved by the authentication layer in front of the API."""

    return _require_owner_id(admin_id, ADMIN_ID_HEADER)


OWNER_ID_DEPENDENCIES = {
    OwnerKind.USER: get_current_user_id,
    OwnerKind.ADMIN: get_current_admin_id,
}


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""

    return request.app.state.settings


def get_hub(request: Request) -> LiveUpdateHub:
    """Return the hub created by :func:`main.create_app`."""

    return request.app.state.hub


def get_publisher(hub: LiveUpdateHub = Depends(get_hub)) -> NotificationPublisher:
    return NotificationPublisher(hub)
