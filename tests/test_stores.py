from datetime import datetime, timedelta, timezone

import pytest

from models.session import UserSession
from models.user import DEFAULT_PREFERENCES
from stores.base import DuplicateUsernameError, StoreError
from stores.credential_store import SqlCredentialStore
from stores.session_store import SqlSessionStore


@pytest.fixture()
def credentials(db):
    return SqlCredentialStore(db)


@pytest.fixture()
def session_store(db):
    return SqlSessionStore(db)


def _insert(credentials, username="alice"):
    return credentials.insert_user(
        username=username,
        password_hash="pw-hash",
        security_question="Pet name?",
        security_answer_hash="answer-hash",
        preferences=DEFAULT_PREFERENCES,
    )


def _now():
    return datetime.now(timezone.utc).replace(microsecond=0)


def test_insert_and_find_user(credentials):
    user = _insert(credentials)

    assert user.id is not None
    assert user.created_at is not None
    assert user.preferences == {"theme": "light", "moving_avg_days": 7}
    assert credentials.find_user_by_username("alice").id == user.id
    assert credentials.find_user_by_id(user.id).username == "alice"


def test_username_lookup_is_exact(credentials):
    _insert(credentials)

    assert credentials.find_user_by_username("Alice") is None
    assert credentials.find_user_by_username("alice ") is None
    assert credentials.find_user_by_username("nobody") is None


def test_duplicate_username_rejected_at_write(credentials, db):
    _insert(credentials)

    with pytest.raises(DuplicateUsernameError):
        _insert(credentials)

    # the session is usable again after the rollback
    assert credentials.find_user_by_username("alice") is not None


def test_update_password_hash(credentials):
    user = _insert(credentials)
    changed_at = _now() + timedelta(minutes=1)

    credentials.update_user_password_hash(user.id, "new-hash", changed_at)

    reloaded = credentials.find_user_by_username("alice")
    assert reloaded.password_hash == "new-hash"
    assert reloaded.security_answer_hash == "answer-hash"


def test_update_password_hash_of_missing_user(credentials):
    with pytest.raises(StoreError):
        credentials.update_user_password_hash(999, "new-hash", _now())


def test_find_active_session_honours_expiry(credentials, session_store):
    user = _insert(credentials)
    now = _now()
    session_store.insert_session(user.id, "live", now, now + timedelta(hours=48))
    session_store.insert_session(user.id, "stale", now - timedelta(hours=49), now - timedelta(hours=1))

    assert session_store.find_active_session("live", now).user_id == user.id
    assert session_store.find_active_session("stale", now) is None
    assert session_store.find_active_session("live", now + timedelta(hours=48)) is None
    assert session_store.find_active_session("missing", now) is None


def test_duplicate_token_rejected(credentials, session_store):
    user = _insert(credentials)
    now = _now()
    session_store.insert_session(user.id, "tok", now, now + timedelta(hours=48))

    with pytest.raises(StoreError):
        session_store.insert_session(user.id, "tok", now, now + timedelta(hours=48))


def test_delete_sessions_for_user_reports_counts(credentials, session_store, db):
    alice = _insert(credentials, "alice")
    bob = _insert(credentials, "bob")
    now = _now()
    for token in ("a1", "a2", "a3"):
        session_store.insert_session(alice.id, token, now, now + timedelta(hours=48))
    session_store.insert_session(bob.id, "b1", now, now + timedelta(hours=48))

    result = session_store.delete_sessions_for_user(alice.id)

    assert result.deleted == 3
    assert result.remaining == 0
    assert result.complete
    assert [s.token for s in db.query(UserSession).all()] == ["b1"]


def test_delete_sessions_for_user_without_sessions(credentials, session_store):
    user = _insert(credentials)

    result = session_store.delete_sessions_for_user(user.id)

    assert (result.deleted, result.remaining) == (0, 0)


def test_delete_single_session(credentials, session_store):
    user = _insert(credentials)
    now = _now()
    session_store.insert_session(user.id, "one", now, now + timedelta(hours=48))
    session_store.insert_session(user.id, "two", now, now + timedelta(hours=48))

    assert session_store.delete_session("one") == 1
    assert session_store.delete_session("one") == 0
    assert session_store.find_active_session("two", now) is not None


def test_delete_expired_sessions(credentials, session_store, db):
    user = _insert(credentials)
    now = _now()
    session_store.insert_session(user.id, "old", now - timedelta(hours=50), now - timedelta(hours=2))
    session_store.insert_session(user.id, "edge", now - timedelta(hours=48), now)
    session_store.insert_session(user.id, "new", now, now + timedelta(hours=48))

    assert session_store.delete_expired_sessions(now) == 2
    assert [s.token for s in db.query(UserSession).all()] == ["new"]
