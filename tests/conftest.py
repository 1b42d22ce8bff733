"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from clinicdesk.core.auth.backend import create_access_token
from clinicdesk.core.auth.session import SessionStore, get_session_store
from clinicdesk.core.permissions.catalog import Role
from clinicdesk.main import create_app
from clinicdesk.modules.users.models import StoredUser
from clinicdesk.modules.users.repos import UserRepository, get_user_repository
from tests.factories.user import StoredUserFactory


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Drop the process-wide repository and session store between tests."""
    get_session_store.cache_clear()
    get_user_repository.cache_clear()
    yield
    get_session_store.cache_clear()
    get_user_repository.cache_clear()


@pytest.fixture
def accounts() -> dict[str, StoredUser]:
    """One active account per role plus a deactivated nurse."""
    return {
        "admin": StoredUserFactory.build(username="admin", role=Role.ADMIN),
        "doctor": StoredUserFactory.build(username="doctor", role=Role.DOCTOR),
        "nurse": StoredUserFactory.build(username="nurse", role=Role.NURSE),
        "receptionist": StoredUserFactory.build(
            username="reception", role=Role.RECEPTIONIST
        ),
        "accountant": StoredUserFactory.build(username="accounts", role=Role.ACCOUNTANT),
        "inactive": StoredUserFactory.build(
            username="former", role=Role.NURSE, is_active=False
        ),
    }


@pytest.fixture
def repo(accounts: dict[str, StoredUser]) -> UserRepository:
    return UserRepository(accounts.values())


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture
def app(repo: UserRepository, sessions: SessionStore) -> FastAPI:
    """Application wired to the per-test repository and session store."""
    app = create_app()
    app.dependency_overrides[get_user_repository] = lambda: repo
    app.dependency_overrides[get_session_store] = lambda: sessions
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def headers_for(sessions: SessionStore) -> Callable[[StoredUser], dict[str, str]]:
    """Open a session for an account and return its Authorization header.

    Skips the login endpoint, so it also works for deactivated accounts
    (standing in for a session opened before the deactivation).
    """

    def _headers(user: StoredUser) -> dict[str, str]:
        session = sessions.start(user.to_record())
        token = create_access_token(user.id, session.session_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
