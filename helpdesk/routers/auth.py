"""Login and logout endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from helpdesk.config import get_settings
from helpdesk.db import get_db
from helpdesk.schemas.auth import LoginRequest, LoginResponse
from helpdesk.schemas.session import SessionPayload
from helpdesk.security import LOGIN_PATH, client_ip, dashboard_for, require_authenticated, session_cookie
from helpdesk.services import audit
from helpdesk.services.auth import AuthService, get_auth_service
from helpdesk.services.sessions import SessionStore
from helpdesk.utils.errors import error_response

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate and open a new session."""

    user = auth_service.authenticate(payload.username, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("INVALID_CREDENTIALS", INVALID_CREDENTIALS),
        )

    store = SessionStore(db)
    store.destroy(session_cookie(request))
    session_payload = SessionPayload.from_user(user)
    raw = store.create(session_payload)
    audit.append(
        db,
        actor_id=user.id,
        action="USER_LOGIN",
        target_type="user",
        target_id=user.id,
        details={"username": user.username},
        ip=client_ip(request),
    )
    db.commit()

    settings = get_settings()
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        raw,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="strict",
    )
    return LoginResponse(user=session_payload, redirect_to=dashboard_for(user.role))


@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)) -> dict[str, str]:
    """Destroy the current session, if any."""

    SessionStore(db).destroy(session_cookie(request))
    db.commit()
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return {"redirect_to": LOGIN_PATH}


@router.get("/me", response_model=SessionPayload)
def me(payload: SessionPayload = Depends(require_authenticated)) -> SessionPayload:
    return payload
