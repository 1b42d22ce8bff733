"""Authentication service for login and logout."""

from datetime import UTC, datetime
from typing import Annotated

import structlog
from fastapi import Depends

from clinicdesk.config import settings
from clinicdesk.core.auth.backend import create_access_token, verify_password
from clinicdesk.core.auth.schemas import TokenResponse
from clinicdesk.core.auth.session import SessionStoreDep
from clinicdesk.core.errors import ForbiddenError, UnauthorizedError
from clinicdesk.modules.users.repos import UserRepo


logger = structlog.get_logger()


class AuthService:
    """Opens and closes sessions.

    A successful login snapshots the account into a ``UserRecord`` held by
    the session store; the returned token only names that session.
    """

    def __init__(self, repo: UserRepo, sessions: SessionStoreDep) -> None:
        self.repo = repo
        self.sessions = sessions

    async def login(self, username: str, password: str) -> TokenResponse:
        """Authenticate with username and password.

        Stamps the account's ``last_login_at`` and opens a session.

        Args:
            username: Login name, matched case-insensitively
            password: Plain-text password

        Returns:
            Bearer token for the new session plus the session's user record

        Raises:
            UnauthorizedError: If credentials are invalid
            ForbiddenError: If the account is deactivated
        """
        user = await self.repo.get_by_username(username)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("login_failed", username=username)
            raise UnauthorizedError(
                "Invalid username or password",
                error_code="invalid_credentials",
            )

        if not user.is_active:
            logger.warning("login_refused_inactive", user_id=user.id)
            raise ForbiddenError(
                "Your account is inactive. Please contact the administration",
                error_code="account_inactive",
            )

        user = await self.repo.update(
            user.model_copy(update={"last_login_at": datetime.now(UTC)})
        )
        record = user.to_record()
        session = self.sessions.start(record)
        token = create_access_token(record.id, session.session_id)
        logger.info("login_succeeded", user_id=record.id, role=record.role)

        return TokenResponse(
            access_token=token,
            expires_in=settings.access_token_expire_minutes * 60,
            user=record,
        )

    async def logout(self, session_id: str) -> None:
        """End the caller's session; later requests with its token get 401."""
        self.sessions.end(session_id)


AuthSvc = Annotated[AuthService, Depends(AuthService)]
