"""Unit tests for the session store."""

from datetime import UTC, datetime, timedelta

import pytest

from clinicdesk.core.auth.session import SessionStore, get_session_store
from clinicdesk.core.permissions.catalog import Role
from tests.factories.user import make_record


pytestmark = pytest.mark.unit


class TestSessionStore:
    """Tests for SessionStore."""

    def test_start_and_get(self):
        store = SessionStore()
        user = make_record(Role.NURSE, ["view_staff"])

        session = store.start(user)

        assert len(store) == 1
        assert store.get(session.session_id) == session
        assert session.user is user
        assert session.expires_at - session.started_at == store.ttl

    def test_session_ids_are_unique(self):
        store = SessionStore()
        user = make_record()

        ids = {store.start(user).session_id for _ in range(20)}

        assert len(ids) == 20

    def test_unknown_session(self):
        assert SessionStore().get("nope") is None

    def test_end(self):
        store = SessionStore()
        session = store.start(make_record())

        assert store.end(session.session_id) is True
        assert store.get(session.session_id) is None
        assert store.end(session.session_id) is False

    def test_expired_session_is_dropped(self):
        store = SessionStore(ttl=timedelta(seconds=-1))
        session = store.start(make_record())

        assert store.get(session.session_id) is None
        assert len(store) == 0

    def test_abandoned_sessions_are_swept(self):
        store = SessionStore(ttl=timedelta(seconds=-1))
        for _ in range(50):
            store.start(make_record())

        assert len(store) == 0

    def test_start_sweeps_expired_sessions(self):
        store = SessionStore(ttl=timedelta(minutes=5))
        stale = store.start(make_record(id="stale"))
        store.start(make_record(id="fresh"))
        later = datetime.now(UTC) + timedelta(minutes=6)

        assert store._purge_expired(later) == 2
        assert store.get(stale.session_id) is None

    def test_live_sessions_survive_a_sweep(self):
        store = SessionStore(ttl=timedelta(minutes=5))
        session = store.start(make_record())

        assert store._purge_expired() == 0
        assert store.get(session.session_id) is session
        assert len(store) == 1

    def test_is_expired(self):
        session = SessionStore(ttl=timedelta(minutes=5)).start(make_record())

        assert session.is_expired() is False
        assert session.is_expired(datetime.now(UTC) + timedelta(minutes=6)) is True

    def test_invalidate_user(self):
        store = SessionStore()
        target = make_record(id="target")
        other = make_record(id="other")
        first = store.start(target)
        second = store.start(target)
        kept = store.start(other)

        assert store.invalidate_user("target") == 2
        assert store.get(first.session_id) is None
        assert store.get(second.session_id) is None
        assert store.get(kept.session_id) is kept

    def test_invalidate_user_without_sessions(self):
        assert SessionStore().invalidate_user("nobody") == 0

    def test_clear(self):
        store = SessionStore()
        store.start(make_record())
        store.start(make_record())

        store.clear()

        assert len(store) == 0

    def test_process_wide_store(self):
        assert get_session_store() is get_session_store()
