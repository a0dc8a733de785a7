"""Self-service profile endpoints."""
from fastapi import APIRouter, Depends, Request

from helpdesk.schemas.session import SessionPayload
from helpdesk.schemas.user import PasswordChange
from helpdesk.security import client_ip, require_authenticated
from helpdesk.services.accounts import AccountService, get_account_service

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("/password")
def change_password(
    payload: PasswordChange,
    request: Request,
    service: AccountService = Depends(get_account_service),
    session: SessionPayload = Depends(require_authenticated),
) -> dict[str, str]:
    """Change the caller's own password."""

    service.change_password(
        session.account_id, payload.current_password, payload.new_password, client_ip(request)
    )
    return {"message": "Password updated"}
