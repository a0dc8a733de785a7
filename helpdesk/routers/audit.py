"""Audit trail queries."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from helpdesk.db import get_db
from helpdesk.schemas.audit import AuditLogRead
from helpdesk.schemas.session import SessionPayload
from helpdesk.security import require_super_admin
from helpdesk.services import audit

router = APIRouter(prefix="/admin/audit", tags=["audit"])


@router.get("", response_model=list[AuditLogRead])
def audit_by_actor(
    actor_id: int,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    actor: SessionPayload = Depends(require_super_admin),
):
    """Entries recorded for actions performed by ``actor_id``."""

    return audit.find_by_actor(db, actor_id, limit=limit)
