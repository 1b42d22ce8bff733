"""ASGI application factory: ``uvicorn --factory clinicdesk.main:create_app``."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinicdesk import __version__
from clinicdesk.api import api_router
from clinicdesk.config import settings
from clinicdesk.core.auth import RequestIdMiddleware, UserContextMiddleware, get_session_store
from clinicdesk.core.errors import register_exception_handlers
from clinicdesk.core.logging import RequestLoggingMiddleware, configure_logging
from clinicdesk.modules.users.repos import get_user_repository


configure_logging(settings)

logger = structlog.get_logger()

# Vite dev server and the Electron shell's local origin
DEV_ORIGINS = ["http://localhost:5173", "http://localhost:5000"]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Load accounts before serving (a bad users file aborts startup); drop sessions on exit."""
    repo = get_user_repository()
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        users=await repo.count(),
    )
    try:
        yield
    finally:
        get_session_store().clear()
        logger.info("application_shutdown", sessions_cleared=True)


def create_app() -> FastAPI:
    docs_enabled = not settings.is_production
    app = FastAPI(
        title=settings.app_name,
        description="Clinic administration API: sessions, users and permission gating",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or (DEV_ORIGINS if settings.is_development else []),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    # Last added runs first: request id, then user context, then logging
    for middleware in (RequestLoggingMiddleware, UserContextMiddleware, RequestIdMiddleware):
        app.add_middleware(middleware)

    register_exception_handlers(app)
    app.include_router(api_router)
    return app
