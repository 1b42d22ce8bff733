"""Request dependencies: bearer token, session user, evaluator.

A token is only worth something while its session lives in the
``SessionStore``. Logging out or changing the account ends the session,
and the same token then fails with ``session_expired``.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clinicdesk.core.auth.backend import decode_token
from clinicdesk.core.auth.schemas import TokenData
from clinicdesk.core.auth.session import SessionStore, SessionStoreDep
from clinicdesk.core.errors import UnauthorizedError
from clinicdesk.core.permissions.evaluator import PermissionEvaluator, get_evaluator
from clinicdesk.core.permissions.models import UserRecord


bearer_scheme = HTTPBearer(auto_error=False)

Credentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _session_user(sessions: SessionStore, token_data: TokenData) -> UserRecord | None:
    session = sessions.get(token_data.session_id)
    if session is None or session.user.id != token_data.user_id:
        return None
    return session.user


async def get_token_data(credentials: Credentials) -> TokenData:
    """Decode the bearer token.

    Raises:
        UnauthorizedError: ``missing_token``, ``invalid_token`` or ``invalid_token_type``
    """
    if credentials is None:
        raise UnauthorizedError("Missing authentication token", error_code="missing_token")

    token_data = decode_token(credentials.credentials)
    if token_data is None:
        raise UnauthorizedError("Invalid or expired token", error_code="invalid_token")
    if token_data.type != "access":
        raise UnauthorizedError("Invalid token type", error_code="invalid_token_type")
    return token_data


async def get_current_user(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    sessions: SessionStoreDep,
) -> UserRecord:
    """The user snapshot held by the token's session, inactive or not.

    Raises:
        UnauthorizedError: If the session has ended or was invalidated
    """
    user = _session_user(sessions, token_data)
    if user is None:
        raise UnauthorizedError(
            "Session has ended, please sign in again",
            error_code="session_expired",
        )
    return user


async def get_optional_user(credentials: Credentials, sessions: SessionStoreDep) -> UserRecord | None:
    """Like ``get_current_user`` but None for anonymous or stale callers.

    Decorated routes take this so the guard, not the dependency, reports
    ``auth_required``.
    """
    token_data = decode_token(credentials.credentials) if credentials else None
    if token_data is None or token_data.type != "access":
        return None
    return _session_user(sessions, token_data)


async def get_current_session_id(
    token_data: Annotated[TokenData, Depends(get_token_data)],
) -> str:
    return token_data.session_id


async def get_current_evaluator(
    user: Annotated[UserRecord | None, Depends(get_optional_user)],
) -> PermissionEvaluator:
    # Anonymous callers get an evaluator that denies everything
    return get_evaluator(user)


CurrentUser = Annotated[UserRecord, Depends(get_current_user)]
OptionalUser = Annotated[UserRecord | None, Depends(get_optional_user)]
CurrentSessionId = Annotated[str, Depends(get_current_session_id)]
CurrentEvaluator = Annotated[PermissionEvaluator, Depends(get_current_evaluator)]
