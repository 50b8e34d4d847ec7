"""Tests for the visitor session registry."""

from storefront.session import SessionStore
from storefront.settings import Settings

from conftest import API_URL


def make_store(max_age=60):
    return SessionStore(Settings(api_url=API_URL, session_max_age=max_age))


class TestSessionStore:
    def test_known_id_reused(self):
        store = make_store()
        session = store.get(None, now=0)

        assert store.get(session.id, now=10) is session

    def test_unknown_id_gets_fresh_session(self):
        store = make_store()

        session = store.get("chosen-by-the-browser", now=0)

        assert session.id != "chosen-by-the-browser"
        assert "chosen-by-the-browser" not in store.sessions
        assert list(store.sessions) == [session.id]

    def test_idle_sessions_expire(self):
        store = make_store(max_age=60)
        idle = store.get(None, now=0)
        active = store.get(None, now=50)

        assert store.get(active.id, now=100) is active
        assert idle.id not in store.sessions
        assert store.get(idle.id, now=100) is not idle

    def test_each_request_extends_lifetime(self):
        store = make_store(max_age=60)
        session = store.get(None, now=0)
        store.get(session.id, now=50)

        assert store.get(session.id, now=100) is session

    def test_drop(self):
        store = make_store()
        session = store.get(None, now=0)

        store.drop(session.id)
        store.drop("never-issued")

        assert store.sessions == {}
