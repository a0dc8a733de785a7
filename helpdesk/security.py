"""Session authentication and role gates for routes."""
from __future__ import annotations

import enum
from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from helpdesk.config import get_settings
from helpdesk.db import get_db
from helpdesk.models.user import ADMIN_ROLES, UserRole
from helpdesk.schemas.session import SessionPayload
from helpdesk.services.credentials import CredentialStore
from helpdesk.services.sessions import SessionStore
from helpdesk.utils.errors import error_response

LOGIN_PATH = "/auth/login"
ADMIN_DASHBOARD_PATH = "/admin/dashboard"
CLIENT_DASHBOARD_PATH = "/client/dashboard"


class AccessGate(str, enum.Enum):
    authenticated = "authenticated"
    admin = "admin"
    super_admin = "super_admin"
    department = "department"


GATE_ROLES: dict[AccessGate, frozenset[UserRole]] = {
    AccessGate.authenticated: frozenset(UserRole),
    AccessGate.admin: ADMIN_ROLES,
    AccessGate.super_admin: frozenset({UserRole.super_admin}),
    AccessGate.department: frozenset({UserRole.department}),
}


def dashboard_for(role: UserRole) -> str:
    """Landing page for a role."""

    if role == UserRole.department:
        return CLIENT_DASHBOARD_PATH
    if role in ADMIN_ROLES:
        return ADMIN_DASHBOARD_PATH
    raise ValueError(f"unhandled role {role!r}")


def access_redirect(payload: SessionPayload | None, gate: AccessGate) -> str | None:
    """Where to send the caller if ``gate`` denies them, ``None`` when allowed.

    Anonymous callers go to the login page; logged-in callers with the wrong
    role go back to their own dashboard.
    """

    if payload is None:
        return LOGIN_PATH
    if payload.role in GATE_ROLES[gate]:
        return None
    return dashboard_for(payload.role)


def _redirect(code: str, message: str, location: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail=error_response(code, message),
        headers={"Location": location},
    )


def session_cookie(request: Request) -> str | None:
    return request.cookies.get(get_settings().SESSION_COOKIE_NAME)


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def require_authenticated(request: Request, db: Session = Depends(get_db)) -> SessionPayload:
    """Load the session and re-check that its account is still active."""

    raw = session_cookie(request)
    store = SessionStore(db)
    payload = store.load(raw)
    if payload is not None:
        user = CredentialStore(db).get(payload.account_id)
        if user is None or not user.is_active:
            store.destroy(raw)
            payload = None
    if payload is None and raw:
        db.commit()

    location = access_redirect(payload, AccessGate.authenticated)
    if location is not None:
        raise _redirect("UNAUTHORIZED", "Please log in to continue.", location)
    assert payload is not None
    return payload


def require_role(gate: AccessGate) -> Callable[..., SessionPayload]:
    """Build a dependency admitting only the roles ``gate`` allows."""

    if gate not in GATE_ROLES:
        raise RuntimeError(f"unknown access gate {gate!r}")

    def _dep(payload: SessionPayload = Depends(require_authenticated)) -> SessionPayload:
        location = access_redirect(payload, gate)
        if location is not None:
            raise _redirect("FORBIDDEN", "You do not have access to this page.", location)
        return payload

    return _dep


require_admin = require_role(AccessGate.admin)
require_super_admin = require_role(AccessGate.super_admin)
require_department = require_role(AccessGate.department)


__all__ = [
    "AccessGate",
    "access_redirect",
    "client_ip",
    "dashboard_for",
    "require_admin",
    "require_authenticated",
    "require_department",
    "require_role",
    "require_super_admin",
    "session_cookie",
]
