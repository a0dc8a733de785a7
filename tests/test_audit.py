import pytest

from helpdesk.models import AuditLog, AuditLogImmutableError, UserRole
from helpdesk.services import audit


def test_append_returns_id_and_masks_secrets(db_session, make_user):
    actor = make_user(role=UserRole.super_admin)
    entry_id = audit.append(
        db_session,
        actor_id=actor.id,
        action="MASK_TEST",
        target_type="user",
        target_id=actor.id,
        details={"password": "Aa1!aaaa", "nested": [{"new_password": "x"}], "role": UserRole.admin},
        ip="10.0.0.1",
    )
    db_session.commit()

    entry = db_session.get(AuditLog, entry_id)
    assert entry.details == {"password": "***", "nested": [{"new_password": "***"}], "role": "admin"}
    assert entry.ip_address == "10.0.0.1"


def test_audit_entries_cannot_be_updated(db_session, make_user):
    actor = make_user()
    entry_id = audit.append(db_session, actor_id=actor.id, action="X", target_type="user")
    db_session.commit()

    entry = db_session.get(AuditLog, entry_id)
    entry.action = "TAMPERED"
    with pytest.raises(AuditLogImmutableError):
        db_session.flush()


def test_audit_entries_cannot_be_deleted(db_session, make_user):
    actor = make_user()
    entry_id = audit.append(db_session, actor_id=actor.id, action="X", target_type="user")
    db_session.commit()

    db_session.delete(db_session.get(AuditLog, entry_id))
    with pytest.raises(AuditLogImmutableError):
        db_session.flush()


def test_find_by_target_and_actor_newest_first(db_session, make_user):
    actor = make_user(role=UserRole.super_admin)
    target = make_user()
    first = audit.append(db_session, actor_id=actor.id, action="A", target_type="user", target_id=target.id)
    second = audit.append(db_session, actor_id=actor.id, action="B", target_type="user", target_id=target.id)
    audit.append(db_session, actor_id=target.id, action="C", target_type="user", target_id=actor.id)
    db_session.commit()

    by_target = audit.find_by_target(db_session, "user", target.id)
    assert [entry.id for entry in by_target] == [second, first]

    by_actor = audit.find_by_actor(db_session, actor.id, limit=1)
    assert [entry.id for entry in by_actor] == [second]

