"""Endpoints and websocket handler for user and admin notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.application.use_cases.notifications import NotificationService
from app.config import Settings
from app.domain.entities import (
    Notification,
    NotificationPreferences,
    NotificationStatistics,
    Owner,
    OwnerKind,
)
from app.domain.exceptions import NotificationNotFoundError, NotificationValidationError
from app.infrastructure import database
from app.infrastructure.notifications import (
    LiveUpdateHub,
    NotificationPublisher,
    Subscription,
    serialize_notification,
)
from app.interfaces.api.dependencies import (
    OWNER_ID_DEPENDENCIES,
    OWNER_ID_HEADERS,
    get_app_settings,
    get_publisher,
    parse_owner_id,
)
from app.interfaces.api.schemas import (
    NotificationActionResponse,
    NotificationListResponse,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
    NotificationSendRequest,
    NotificationStatisticsRead,
    UnreadCountResponse,
    UnreadNotificationsResponse,
)

logger = logging.getLogger(__name__)

_MAX_PAGE_SIZE = 100


def _to_read_model(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(serialize_notification(notification))


def _statistics_to_schema(statistics: NotificationStatistics) -> NotificationStatisticsRead:
    return NotificationStatisticsRead(
        total=statistics.total,
        unread=statistics.unread,
        read=statistics.read,
        by_kind=statistics.by_kind,
        by_display=statistics.by_display,
    )


def _preferences_to_schema(preferences: NotificationPreferences) -> NotificationPreferencesRead:
    owner = preferences.owner
    return NotificationPreferencesRead(
        user_id=owner.id if owner.kind is OwnerKind.USER else None,
        admin_id=owner.id if owner.kind is OwnerKind.ADMIN else None,
        enable_toast=preferences.enable_toast,
        enable_banner=preferences.enable_banner,
        enable_center=preferences.enable_center,
        enable_sound=preferences.enable_sound,
        toast_duration_success=preferences.toast_duration_success,
        toast_duration_info=preferences.toast_duration_info,
        toast_duration_warning=preferences.toast_duration_warning,
        updated_at=preferences.updated_at,
    )


def build_notifications_router(owner_kind: OwnerKind) -> APIRouter:
    """Create the notification endpoints for one owner namespace."""

    router = APIRouter(
        prefix=f"/api/v1/{owner_kind.value}/notifications",
        tags=[f"{owner_kind.value} notifications"],
    )
    current_owner_id: Callable[..., int] = OWNER_ID_DEPENDENCIES[owner_kind]

    def get_service(
        db: Session = Depends(database.get_db),
        publisher: NotificationPublisher = Depends(get_publisher),
        settings: Settings = Depends(get_app_settings),
    ) -> NotificationService:
        return NotificationService(db, owner_kind, publisher, settings=settings)

    @router.get("", response_model=NotificationListResponse)
    def list_notifications(
        limit: int | None = None,
        offset: int = 0,
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
        settings: Settings = Depends(get_app_settings),
    ) -> NotificationListResponse:
        """Return a page of notifications, newest first."""

        if limit is None or not 1 <= limit <= _MAX_PAGE_SIZE:
            limit = settings.notification_page_size
        offset = max(offset, 0)
        notifications = service.list(owner_id, limit=limit, offset=offset)
        return NotificationListResponse(
            notifications=[_to_read_model(n) for n in notifications],
            limit=limit,
            offset=offset,
            count=len(notifications),
        )

    @router.get("/unread", response_model=UnreadNotificationsResponse)
    def list_unread_notifications(
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> UnreadNotificationsResponse:
        notifications = service.list_unread(owner_id)
        return UnreadNotificationsResponse(
            notifications=[_to_read_model(n) for n in notifications],
            count=len(notifications),
        )

    @router.get("/count", response_model=UnreadCountResponse)
    def get_unread_count(
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> UnreadCountResponse:
        return UnreadCountResponse(count=service.get_unread_count(owner_id))

    @router.get("/stats", response_model=NotificationStatisticsRead)
    def get_statistics(
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationStatisticsRead:
        return _statistics_to_schema(service.get_statistics(owner_id))

    @router.get("/preferences", response_model=NotificationPreferencesRead)
    def get_preferences(
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationPreferencesRead:
        return _preferences_to_schema(service.get_preferences(owner_id))

    @router.patch("/preferences", response_model=NotificationPreferencesRead)
    def update_preferences(
        preferences_in: NotificationPreferencesUpdate,
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationPreferencesRead:
        """Update only the preference fields present in the request body."""

        changes = preferences_in.model_dump(exclude_unset=True)
        try:
            preferences = service.update_preferences(owner_id, changes)
        except NotificationValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return _preferences_to_schema(preferences)

    @router.patch("/read", response_model=NotificationActionResponse)
    def mark_all_notifications_read(
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationActionResponse:
        updated = service.mark_all_read(owner_id)
        return NotificationActionResponse(
            message="all notifications marked as read", updated=updated
        )

    @router.patch("/{notification_id}/read", response_model=NotificationActionResponse)
    def mark_notification_read(
        notification_id: str,
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationActionResponse:
        try:
            service.mark_read(notification_id, owner_id)
        except NotificationNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return NotificationActionResponse(message="notification marked as read", id=notification_id)

    @router.patch("/{notification_id}/dismiss", response_model=NotificationActionResponse)
    def dismiss_notification(
        notification_id: str,
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationActionResponse:
        try:
            service.dismiss(notification_id, owner_id)
        except NotificationNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return NotificationActionResponse(message="notification dismissed", id=notification_id)

    @router.delete("/{notification_id}", response_model=NotificationActionResponse)
    def delete_notification(
        notification_id: str,
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationActionResponse:
        try:
            service.delete(notification_id, owner_id)
        except NotificationNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return NotificationActionResponse(message="notification deleted", id=notification_id)

    if owner_kind is OwnerKind.ADMIN:

        @router.post(
            "/send",
            response_model=NotificationRead,
            status_code=status.HTTP_201_CREATED,
        )
        def send_notification(
            notification_in: NotificationSendRequest,
            owner_id: int = Depends(current_owner_id),
            service: NotificationService = Depends(get_service),
        ) -> NotificationRead:
            """Send a notification to the calling admin, e.g. to test delivery."""

            try:
                notification = service.send(
                    owner_id,
                    notification_in.kind,
                    notification_in.title,
                    notification_in.message,
                    display=notification_in.display,
                    action=notification_in.action,
                )
            except NotificationValidationError as exc:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
                ) from exc
            return _to_read_model(notification)

    @router.get("/{notification_id}", response_model=NotificationRead)
    def read_notification(
        notification_id: str,
        owner_id: int = Depends(current_owner_id),
        service: NotificationService = Depends(get_service),
    ) -> NotificationRead:
        try:
            notification = service.get(notification_id, owner_id)
        except NotificationNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return _to_read_model(notification)

    @router.websocket("/ws")
    async def notifications_websocket(websocket: WebSocket) -> None:
        """Stream new notifications to the connected owner.

        The owner comes from the same header as the REST endpoints, or from a
        ``<kind>_id`` query parameter for browsers that cannot set headers.
        The server pings every ``websocket_ping_interval`` seconds and closes
        sessions that stay silent for ``websocket_idle_timeout`` seconds.
        """

        raw_owner_id = websocket.headers.get(OWNER_ID_HEADERS[owner_kind])
        if raw_owner_id is None:
            raw_owner_id = websocket.query_params.get(f"{owner_kind.value}_id")
        owner_id = parse_owner_id(raw_owner_id)
        if owner_id is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        owner = Owner(owner_kind, owner_id)
        hub: LiveUpdateHub = websocket.app.state.hub
        settings: Settings = websocket.app.state.settings

        def pending_notifications() -> list[dict[str, Any]]:
            with database.SessionLocal() as session:
                service = NotificationService(
                    session, owner_kind, NotificationPublisher(hub), settings=settings
                )
                return [serialize_notification(n) for n in service.list_unread(owner_id)]

        def acknowledge(ids: list[Any]) -> None:
            with database.SessionLocal() as session:
                service = NotificationService(
                    session, owner_kind, NotificationPublisher(hub), settings=settings
                )
                for notification_id in ids:
                    try:
                        service.mark_read(str(notification_id), owner_id)
                    except NotificationNotFoundError:
                        continue

        # Subscribe before taking the snapshot; overlaps are filtered by _forward.
        subscription = hub.register(owner)
        try:
            pending = await run_in_threadpool(pending_notifications)
        except Exception:
            hub.unregister(subscription)
            logger.exception("Could not load pending notifications for %s", owner)
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return

        await websocket.accept()
        tasks: list[asyncio.Task[None]] = []
        try:
            await websocket.send_json({"type": "init", "data": pending})
            tasks.append(
                asyncio.create_task(
                    _forward(subscription, websocket, {n["id"] for n in pending})
                )
            )
            tasks.append(
                asyncio.create_task(_keepalive(websocket, settings.websocket_ping_interval))
            )
            while True:
                try:
                    message = await asyncio.wait_for(
                        websocket.receive_json(), timeout=settings.websocket_idle_timeout
                    )
                except asyncio.TimeoutError:
                    logger.info("Closing idle live session of %s", owner)
                    await websocket.close(code=status.WS_1001_GOING_AWAY)
                    break
                except WebSocketDisconnect:
                    break
                except ValueError:
                    continue

                if not isinstance(message, dict):
                    continue

                message_type = message.get("type")
                if message_type == "ping":
                    await websocket.send_json({"type": "pong"})
                elif message_type == "ack":
                    ids = message.get("ids", [])
                    if isinstance(ids, list) and ids:
                        await run_in_threadpool(acknowledge, ids)
        except (WebSocketDisconnect, RuntimeError):
            logger.debug("Live session of %s closed by the client", owner)
        finally:
            for task in tasks:
                task.cancel()
            hub.unregister(subscription)

    return router


async def _forward(
    subscription: Subscription, websocket: WebSocket, already_sent: set[str]
) -> None:
    """Relay hub messages to ``websocket`` until the subscription closes.

    Notifications whose id is in ``already_sent`` were part of the ``init``
    snapshot and are not sent twice.
    """

    try:
        async for message in subscription:
            data = message.get("data")
            if message.get("type") == "notification" and isinstance(data, dict):
                if data.get("id") in already_sent:
                    continue
            await websocket.send_json(message)
        # The hub stopped or dropped this subscriber.
        await websocket.close(code=status.WS_1001_GOING_AWAY)
    except (WebSocketDisconnect, RuntimeError):
        logger.debug("Live session of %s closed while forwarding", subscription.owner)


async def _keepalive(websocket: WebSocket, interval: float) -> None:
    try:
        while True:
            await asyncio.sleep(interval)
            await websocket.send_json({"type": "ping"})
    except (WebSocketDisconnect, RuntimeError):
        return


user_router = build_notifications_router(OwnerKind.USER)
admin_router = build_notifications_router(OwnerKind.ADMIN)


__all__ = ["admin_router", "build_notifications_router", "user_router"]
