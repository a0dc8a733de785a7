"""Account administration endpoints (super admins only)."""
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from helpdesk.db import get_db
from helpdesk.models.user import User
from helpdesk.schemas.audit import AuditLogRead
from helpdesk.schemas.session import SessionPayload
from helpdesk.schemas.user import AccountCreate, AccountRead, AccountUpdate, PasswordReset, StatusToggle
from helpdesk.security import client_ip, require_super_admin
from helpdesk.services import audit
from helpdesk.services.accounts import TARGET_USER, AccountService, get_account_service

router = APIRouter(prefix="/admin/users", tags=["accounts"])


@router.get("", response_model=list[AccountRead])
def list_accounts(
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> list[User]:
    return service.list_accounts()


@router.post("", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountCreate,
    request: Request,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> User:
    """Create a new account."""

    return service.create_account(payload, actor_id=actor.account_id, ip=client_ip(request))


@router.get("/{user_id}", response_model=AccountRead)
def get_account(
    user_id: int,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> User:
    return service.get_account(user_id)


@router.patch("/{user_id}", response_model=AccountRead)
def update_account(
    user_id: int,
    payload: AccountUpdate,
    request: Request,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> User:
    return service.update_account(actor.account_id, user_id, payload, client_ip(request))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    user_id: int,
    request: Request,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> Response:
    """Soft-delete an account and log it out everywhere."""

    service.delete_account(actor.account_id, user_id, client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
def reset_password(
    user_id: int,
    payload: PasswordReset,
    request: Request,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> Response:
    service.reset_password(actor.account_id, user_id, payload.new_password, client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/status", response_model=AccountRead)
def toggle_status(
    user_id: int,
    payload: StatusToggle,
    request: Request,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> User:
    return service.toggle_status(actor.account_id, user_id, payload.status, client_ip(request))


@router.post("/{user_id}/unlock", response_model=AccountRead)
def unlock_account(
    user_id: int,
    request: Request,
    service: AccountService = Depends(get_account_service),
    actor: SessionPayload = Depends(require_super_admin),
) -> User:
    return service.unlock_account(actor.account_id, user_id, client_ip(request))


@router.get("/{user_id}/audit", response_model=list[AuditLogRead])
def account_audit_trail(
    user_id: int,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    actor: SessionPayload = Depends(require_super_admin),
):
    return audit.find_by_target(db, TARGET_USER, user_id, limit=limit)
