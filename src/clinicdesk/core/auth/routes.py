"""Authentication API routes.

Provides endpoints for:
- Login/logout
- The caller's user record and resolved capability set
"""

from fastapi import APIRouter, status

from clinicdesk.core.auth.dependencies import CurrentEvaluator, CurrentSessionId, CurrentUser
from clinicdesk.core.auth.schemas import LoginRequest, TokenResponse
from clinicdesk.core.auth.service import AuthSvc
from clinicdesk.core.permissions.evaluator import Capabilities
from clinicdesk.core.permissions.models import UserRecord


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with username and password",
    description="Opens a session and returns an access token naming it.",
)
async def login(data: LoginRequest, service: AuthSvc) -> TokenResponse:
    return await service.login(username=data.username, password=data.password)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Ends the current session.",
)
async def logout(session_id: CurrentSessionId, service: AuthSvc) -> None:
    await service.logout(session_id)


@router.get(
    "/me",
    response_model=UserRecord,
    summary="Current user",
    description="The user record held by the current session.",
)
async def get_me(current_user: CurrentUser) -> UserRecord:
    return current_user


@router.get(
    "/me/capabilities",
    response_model=Capabilities,
    summary="Current capabilities",
    description="Resolved permission flags for client-side gating.",
)
async def get_my_capabilities(
    current_user: CurrentUser,  # noqa: ARG001 - requires a live session
    evaluator: CurrentEvaluator,
) -> Capabilities:
    return evaluator.capabilities()
