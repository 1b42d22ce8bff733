"""Authentication: passwords, tokens, sessions and request dependencies."""

from clinicdesk.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from clinicdesk.core.auth.dependencies import (
    CurrentEvaluator,
    CurrentSessionId,
    CurrentUser,
    OptionalUser,
    get_current_user,
    get_optional_user,
)
from clinicdesk.core.auth.middleware import RequestIdMiddleware, UserContextMiddleware
from clinicdesk.core.auth.schemas import LoginRequest, TokenData, TokenResponse
from clinicdesk.core.auth.session import Session, SessionStore, get_session_store


__all__ = [
    # Dependencies
    "CurrentEvaluator",
    "CurrentSessionId",
    "CurrentUser",
    "OptionalUser",
    # Schemas
    "LoginRequest",
    # Middleware
    "RequestIdMiddleware",
    # Sessions
    "Session",
    "SessionStore",
    "TokenData",
    "TokenResponse",
    "UserContextMiddleware",
    # Token utilities
    "create_access_token",
    "decode_token",
    "get_current_user",
    "get_optional_user",
    "get_session_store",
    # Password utilities
    "hash_password",
    "verify_password",
]
