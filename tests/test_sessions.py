from datetime import timedelta

from sqlalchemy import select

from helpdesk.models import UserRole, WebSession
from helpdesk.schemas.session import SessionPayload
from helpdesk.services.cron import prune_expired_sessions_once
from helpdesk.services.sessions import SessionStore
from helpdesk.utils.time import utcnow
from helpdesk.utils.tokens import hash_token


def test_session_round_trip(db_session, make_user):
    user = make_user(role=UserRole.department, department="Radiology")
    store = SessionStore(db_session)

    raw = store.create(SessionPayload.from_user(user))
    payload = store.load(raw)

    assert payload == SessionPayload(
        account_id=user.id,
        username=user.username,
        email=user.email,
        role=UserRole.department,
        department="Radiology",
    )


def test_only_hash_of_session_id_is_stored(db_session, make_user):
    user = make_user()
    raw = SessionStore(db_session).create(SessionPayload.from_user(user))
    row = db_session.scalar(select(WebSession).where(WebSession.account_id == user.id))
    assert row.sid_hash == hash_token(raw)
    assert row.sid_hash != raw


def test_unknown_or_missing_session_loads_none(db_session):
    store = SessionStore(db_session)
    assert store.load(None) is None
    assert store.load("not-a-session") is None


def test_expired_session_is_removed_on_load(db_session, make_user):
    user = make_user()
    store = SessionStore(db_session)
    raw = store.create(SessionPayload.from_user(user))
    row = db_session.scalar(select(WebSession).where(WebSession.account_id == user.id))
    row.expires_at = utcnow() - timedelta(seconds=1)
    db_session.flush()

    assert store.load(raw) is None
    assert store.count_for_account(user.id) == 0


def test_destroy_removes_single_session(db_session, make_user):
    user = make_user()
    store = SessionStore(db_session)
    first = store.create(SessionPayload.from_user(user))
    store.create(SessionPayload.from_user(user))

    assert store.destroy(first) is True
    assert store.destroy(first) is False
    assert store.count_for_account(user.id) == 1


def test_purge_account_is_scoped_to_one_account(db_session, make_user):
    alice = make_user()
    bob = make_user()
    store = SessionStore(db_session)
    for _ in range(2):
        store.create(SessionPayload.from_user(alice))
    store.create(SessionPayload.from_user(bob))

    assert store.purge_account(alice.id) == 2
    assert store.count_for_account(alice.id) == 0
    assert store.count_for_account(bob.id) == 1


def test_prune_job_removes_only_expired_sessions(db_session, make_user):
    user = make_user()
    store = SessionStore(db_session)
    store.create(SessionPayload.from_user(user))
    store.create(SessionPayload.from_user(user), max_age_seconds=1)
    stale = db_session.scalars(
        select(WebSession).where(WebSession.account_id == user.id).order_by(WebSession.id.desc())
    ).first()
    stale.expires_at = utcnow() - timedelta(minutes=5)
    db_session.commit()

    assert prune_expired_sessions_once(db_session=db_session) == 1
    assert store.count_for_account(user.id) == 1
