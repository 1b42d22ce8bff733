"""Password hashing and access tokens.

An access token is only a pointer: its ``sid`` claim names a server-side
session, and the session (not the token) holds the user snapshot the
permission checks run against.
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from clinicdesk.config import settings
from clinicdesk.core.auth.schemas import TokenData
from clinicdesk.core.constants import ACCESS_TOKEN_JTI_LENGTH, BCRYPT_ROUNDS


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password; a malformed hash (say, a placeholder in the users file) never verifies."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(
    user_id: str,
    session_id: str,
    expires_delta: timedelta | None = None,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    """Sign a token for ``session_id``.

    Args:
        user_id: Account the session belongs to (``sub``)
        session_id: Server-side session the token names (``sid``)
        expires_delta: Lifetime; defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``
        additional_claims: Applied last, so they may override the standard claims

    Returns:
        The encoded JWT
    """
    issued = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": user_id,
        "sid": session_id,
        "type": "access",
        "iat": issued,
        "exp": issued + lifetime,
        "jti": secrets.token_urlsafe(ACCESS_TOKEN_JTI_LENGTH),
        **(additional_claims or {}),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenData | None:
    """Verify ``token`` and return its claims, or None if it is bad, expired or incomplete."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if not (claims.get("sub") and claims.get("sid")) or claims.get("exp") is None:
        return None

    return TokenData(
        user_id=str(claims["sub"]),
        session_id=str(claims["sid"]),
        exp=datetime.fromtimestamp(claims["exp"], tz=UTC),
        type=claims.get("type", "access"),
        jti=claims.get("jti"),
    )
