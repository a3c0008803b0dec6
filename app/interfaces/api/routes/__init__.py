from fastapi import FastAPI

from .notifications import admin_router as admin_notifications_router
from .notifications import user_router as user_notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(user_notifications_router)
    app.include_router(admin_notifications_router)
