"""Server-side session state.

A session holds one immutable ``UserRecord`` snapshot from login until
logout, expiry, or invalidation of the account it was taken from. Any
change to an account (permissions, role, activation) must go through
``invalidate_user`` so the next request forces a fresh login.
"""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends

from clinicdesk.config import settings
from clinicdesk.core.constants import SESSION_ID_LENGTH
from clinicdesk.core.permissions.models import UserRecord


logger = structlog.get_logger()


@dataclass(frozen=True)
class Session:
    session_id: str
    user: UserRecord
    started_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at


class SessionStore:
    """In-process session registry keyed by session id.

    Expired sessions are swept whenever a session starts or the store is
    counted, so clients that never log out do not accumulate.
    """

    def __init__(self, ttl: timedelta | None = None) -> None:
        self.ttl = ttl or timedelta(minutes=settings.access_token_expire_minutes)
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._sessions)

    def _purge_expired(self, now: datetime | None = None) -> int:
        now = now or datetime.now(UTC)
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("sessions_purged", count=len(expired))
        return len(expired)

    def start(self, user: UserRecord) -> Session:
        """Open a session for a freshly authenticated user.

        Args:
            user: Snapshot of the account taken at login

        Returns:
            The new session; its id goes into the access token's ``sid`` claim
        """
        now = datetime.now(UTC)
        self._purge_expired(now)
        session = Session(
            session_id=secrets.token_urlsafe(SESSION_ID_LENGTH),
            user=user,
            started_at=now,
            expires_at=now + self.ttl,
        )
        self._sessions[session.session_id] = session
        logger.info("session_started", user_id=user.id, session_id=session.session_id)
        return session

    def get(self, session_id: str) -> Session | None:
        """Return a live session, dropping it if it has expired."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired():
            del self._sessions[session_id]
            logger.info("session_expired", user_id=session.user.id, session_id=session_id)
            return None
        return session

    def end(self, session_id: str) -> bool:
        """Close a session (logout). Returns False if it was already gone."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("session_ended", user_id=session.user.id, session_id=session_id)
        return True

    def invalidate_user(self, user_id: str) -> int:
        """Drop every session held by ``user_id``; returns how many were dropped."""
        stale = [sid for sid, s in self._sessions.items() if s.user.id == user_id]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.info("sessions_invalidated", user_id=user_id, count=len(stale))
        return len(stale)

    def clear(self) -> None:
        self._sessions.clear()


@lru_cache
def get_session_store() -> SessionStore:
    """Process-wide session store."""
    return SessionStore()


SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
