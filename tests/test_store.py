import pytest

from expander.errors import SessionNotFoundError
from expander.session.store import SessionStore


def test_sessions_are_isolated(fake_service):
    store = SessionStore(lambda: fake_service)
    first = store.create()
    second = store.create()
    first.set_description("only mine")

    assert store.get(first.id) is first
    assert store.get(second.id).description == ""
    assert len(store) == 2


def test_least_recently_used_session_is_evicted(fake_service):
    store = SessionStore(lambda: fake_service, max_sessions=2)
    oldest = store.create()
    middle = store.create()
    store.get(oldest.id)

    store.create()

    assert store.get(oldest.id) is oldest
    with pytest.raises(SessionNotFoundError):
        store.get(middle.id)


def test_delete(fake_service):
    store = SessionStore(lambda: fake_service)
    session = store.create()

    store.delete(session.id)

    with pytest.raises(SessionNotFoundError):
        store.delete(session.id)
