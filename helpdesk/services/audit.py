"""Append-only audit log."""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from helpdesk.models.audit import AuditLog
from helpdesk.services.exceptions import storage_errors

logger = logging.getLogger(__name__)

SLOW_INSERT_MS = 500

SENSITIVE_KEYS = {
    "password",
    "password_hash",
    "new_password",
    "current_password",
}


def sanitize_details(data: Any) -> Any:
    """Return a JSON-safe copy of ``data`` with credential fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            sanitized[str(key)] = "***" if key in SENSITIVE_KEYS else sanitize_details(value)
        return sanitized

    if isinstance(data, (list, tuple)):
        return [sanitize_details(item) for item in data]

    if isinstance(data, Enum):
        return data.value

    return data


def append(
    db: Session,
    *,
    actor_id: int | None,
    action: str,
    target_type: str,
    target_id: int | None = None,
    details: dict | None = None,
    ip: str | None = None,
) -> int:
    """Add one audit entry to the current transaction and return its id."""

    started = time.perf_counter()
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=sanitize_details(details or {}),
        ip_address=ip,
    )
    with storage_errors("audit append"):
        db.add(entry)
        db.flush()

    duration_ms = (time.perf_counter() - started) * 1000
    if duration_ms > SLOW_INSERT_MS:
        logger.warning(
            "Slow audit insert",
            extra={"action": action, "duration_ms": round(duration_ms, 1)},
        )
    return entry.id


def find_by_target(db: Session, target_type: str, target_id: int, limit: int = 50) -> list[AuditLog]:
    stmt = (
        select(AuditLog)
        .where(AuditLog.target_type == target_type, AuditLog.target_id == target_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
    )
    with storage_errors("audit query"):
        return list(db.scalars(stmt))


def find_by_actor(db: Session, actor_id: int, limit: int = 50) -> list[AuditLog]:
    stmt = (
        select(AuditLog)
        .where(AuditLog.actor_id == actor_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
    )
    with storage_errors("audit query"):
        return list(db.scalars(stmt))


__all__ = ["SENSITIVE_KEYS", "append", "find_by_actor", "find_by_target", "sanitize_details"]
