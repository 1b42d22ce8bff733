"""Top-level routes: health checks and app info at the root, everything else under /api/v1."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from clinicdesk import __version__
from clinicdesk.config import settings
from clinicdesk.core.auth.routes import router as auth_router
from clinicdesk.core.auth.session import SessionStoreDep
from clinicdesk.modules import discover_modules
from clinicdesk.modules.users.repos import UserRepo


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(HealthResponse):
    users: int
    active_sessions: int


health_router = APIRouter(tags=["health"])


@health_router.get("/health/live", response_model=HealthResponse, summary="Liveness check")
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get("/health/ready", response_model=ReadinessResponse, summary="Readiness check")
async def readiness(repo: UserRepo, sessions: SessionStoreDep) -> ReadinessResponse:
    """Ready once the accounts are loaded; reports how many, and how many sessions are open."""
    return ReadinessResponse(status="ready", users=await repo.count(), active_sessions=len(sessions))


@health_router.get("/info", summary="Application info")
async def info() -> dict[str, Any]:
    return {
        "app": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "debug": settings.debug,
    }


v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(auth_router)
for module_router in discover_modules():
    v1_router.include_router(module_router)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
