"""Authentication schemas for token handling."""

from datetime import datetime

from pydantic import BaseModel, Field

from clinicdesk.core.constants import MAX_PASSWORD_LENGTH, MAX_USERNAME_LENGTH
from clinicdesk.core.permissions.models import UserRecord


class TokenData(BaseModel):
    """Data extracted from a JWT access token.

    Attributes:
        user_id: The user's id
        session_id: Server-side session the token belongs to
        exp: Token expiration time
        type: Token type
        jti: Unique token id
    """

    user_id: str
    session_id: str
    exp: datetime
    type: str = "access"
    jti: str | None = None


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)


class TokenResponse(BaseModel):
    """Access token returned by a successful login.

    Attributes:
        access_token: JWT naming the server-side session
        token_type: Always "bearer"
        expires_in: Seconds until the token expires
        user: The session's user record, for the client to keep
    """

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRecord
