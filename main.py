import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.domain.exceptions import NotificationStorageError
from app.infrastructure.database import engine, initialize_database
from app.infrastructure.notifications import LiveUpdateHub
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables and run the live update hub for the app's lifetime."""

    initialize_database()
    hub: LiveUpdateHub = app.state.hub
    await hub.start()
    try:
        yield
    finally:
        await hub.stop()
        engine.dispose()


async def _storage_error_handler(request: Request, exc: NotificationStorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Notification storage is unavailable"},
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app(
    settings: Settings | None = None, *, hub: LiveUpdateHub | None = None
) -> FastAPI:
    """Create and configure the notification API application."""

    settings = settings or get_settings()
    app = FastAPI(title="Notifications API", lifespan=lifespan)
    app.state.settings = settings
    app.state.hub = hub or LiveUpdateHub(buffer_size=settings.hub_subscriber_buffer_size)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(NotificationStorageError, _storage_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    register_routes(app)
    return app


app = create_app()
