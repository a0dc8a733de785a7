from sqlalchemy import func, select

from helpdesk.config import get_settings
from helpdesk.models import AuditLog, UserRole, UserStatus, WebSession

import pytest


@pytest.mark.anyio
async def test_login_sets_cookie_and_returns_payload(client, make_user, login, db_session):
    user = make_user(role=UserRole.super_admin)

    response = await login(user.username)

    assert response.status_code == 200
    body = response.json()
    assert body["redirect_to"] == "/admin/dashboard"
    assert body["user"] == {
        "account_id": user.id,
        "username": user.username,
        "email": user.email,
        "role": "super_admin",
        "department": None,
    }
    assert get_settings().SESSION_COOKIE_NAME in response.cookies

    audit = db_session.scalars(select(AuditLog).order_by(AuditLog.id.desc())).first()
    assert audit.action == "USER_LOGIN"
    assert audit.actor_id == user.id


@pytest.mark.anyio
async def test_department_login_points_at_client_dashboard(make_user, login):
    user = make_user(role=UserRole.department)
    response = await login(user.username)
    assert response.json()["redirect_to"] == "/client/dashboard"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "kwargs",
    [{}, {"login_attempts": 5}, {"status": UserStatus.inactive}],
)
async def test_every_rejection_looks_the_same(make_user, login, kwargs):
    user = make_user(**kwargs)
    password = "wrong" if not kwargs else "Passw0rd!"

    response = await login(user.username, password)

    assert response.status_code == 401
    assert response.json() == {
        "error": {"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"}
    }


@pytest.mark.anyio
async def test_unknown_user_gets_generic_rejection(login):
    response = await login("nobody-here", "whatever")
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


@pytest.mark.anyio
async def test_me_returns_session_payload(client, make_user, login):
    user = make_user()
    await login(user.username)
    response = await client.get("/auth/me")
    assert response.status_code == 200
    assert response.json()["account_id"] == user.id


@pytest.mark.anyio
async def test_logout_destroys_session(client, make_user, login, db_session):
    user = make_user()
    await login(user.username)

    response = await client.post("/auth/logout")
    assert response.status_code == 200

    count = db_session.scalar(
        select(func.count()).select_from(WebSession).where(WebSession.account_id == user.id)
    )
    assert count == 0
    assert (await client.get("/auth/me")).status_code == 303
