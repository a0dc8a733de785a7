from uuid import uuid4

import pytest
from sqlalchemy import select

from helpdesk.models import AuditLog, UserRole, UserStatus
from helpdesk.schemas.session import SessionPayload
from helpdesk.services.sessions import SessionStore


@pytest.fixture
async def super_admin(make_user, login):
    user = make_user(role=UserRole.super_admin)
    response = await login(user.username)
    assert response.status_code == 200
    return user


@pytest.mark.anyio
async def test_create_and_list_accounts(client, super_admin, db_session):
    name = f"agent-{uuid4().hex[:6]}"
    response = await client.post(
        "/admin/users",
        json={
            "username": name,
            "email": f"{name}@example.com",
            "password": "Aa1!aaaa",
            "role": "department",
            "department": "Oncology",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "department"
    assert body["department"] == "Oncology"
    assert "password_hash" not in body

    listing = await client.get("/admin/users")
    assert name in {row["username"] for row in listing.json()}

    audit = db_session.scalars(select(AuditLog).where(AuditLog.action == "USER_CREATED")).first()
    assert audit.actor_id == super_admin.id
    assert audit.ip_address == "127.0.0.1"


@pytest.mark.anyio
async def test_create_validation_error_lists_all_rules(client, super_admin):
    response = await client.post(
        "/admin/users",
        json={"username": "weakling", "email": "weak@example.com", "password": "short"},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert len(error["details"]["errors"]) == 4


@pytest.mark.anyio
async def test_update_last_super_admin_is_conflict(client, super_admin):
    response = await client.patch(f"/admin/users/{super_admin.id}", json={"role": "admin"})
    assert response.status_code == 409
    assert response.json()["error"] == {
        "code": "INVARIANT_VIOLATION",
        "message": "Cannot downgrade the last super admin",
    }


@pytest.mark.anyio
async def test_update_unknown_account_is_not_found(client, super_admin):
    response = await client.patch("/admin/users/987654", json={"status": "inactive"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.anyio
async def test_status_toggle_logs_target_out(client, super_admin, make_user, db_session):
    target = make_user()
    store = SessionStore(db_session)
    store.create(SessionPayload.from_user(target))
    store.create(SessionPayload.from_user(target))
    db_session.commit()

    response = await client.post(f"/admin/users/{target.id}/status", json={"status": "inactive"})

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"
    assert store.count_for_account(target.id) == 0
    assert store.count_for_account(super_admin.id) == 1


@pytest.mark.anyio
async def test_delete_self_is_rejected(client, super_admin):
    response = await client.delete(f"/admin/users/{super_admin.id}")
    assert response.status_code == 409


@pytest.mark.anyio
async def test_delete_other_account(client, super_admin, make_user):
    target = make_user()
    response = await client.delete(f"/admin/users/{target.id}")
    assert response.status_code == 204
    assert (await client.get(f"/admin/users/{target.id}")).status_code == 404


@pytest.mark.anyio
async def test_reset_password_and_unlock(client, super_admin, make_user, login, db_session):
    target = make_user(login_attempts=5)

    reset = await client.post(f"/admin/users/{target.id}/password", json={"new_password": "Aa1!aaaa"})
    assert reset.status_code == 204

    unlock = await client.post(f"/admin/users/{target.id}/unlock")
    assert unlock.status_code == 200
    assert unlock.json()["login_attempts"] == 0

    trail = await client.get(f"/admin/users/{target.id}/audit")
    assert [row["action"] for row in trail.json()] == ["USER_UNLOCKED", "PASSWORD_RESET"]

    by_actor = await client.get("/admin/audit", params={"actor_id": super_admin.id})
    actions = {row["action"] for row in by_actor.json()}
    assert {"USER_LOGIN", "PASSWORD_RESET", "USER_UNLOCKED"} <= actions

    assert (await login(target.username, "Aa1!aaaa")).status_code == 200


@pytest.mark.anyio
async def test_profile_password_change(client, make_user, login):
    user = make_user()
    await login(user.username)

    bad = await client.post(
        "/profile/password",
        json={"current_password": "wrong", "new_password": "Bb2@bbbb"},
    )
    assert bad.status_code == 400

    ok = await client.post(
        "/profile/password",
        json={"current_password": "Passw0rd!", "new_password": "Bb2@bbbb"},
    )
    assert ok.status_code == 200


@pytest.mark.anyio
@pytest.mark.parametrize("limit", [0, -1, 201])
async def test_audit_queries_reject_out_of_range_limit(client, super_admin, limit):
    trail = await client.get(f"/admin/users/{super_admin.id}/audit", params={"limit": limit})
    assert trail.status_code == 422

    by_actor = await client.get("/admin/audit", params={"actor_id": super_admin.id, "limit": limit})
    assert by_actor.status_code == 422


@pytest.mark.anyio
async def test_audit_queries_honour_limit(client, super_admin):
    by_actor = await client.get("/admin/audit", params={"actor_id": super_admin.id, "limit": 1})
    assert by_actor.status_code == 200
    assert len(by_actor.json()) == 1
