"""Audit log model."""
from __future__ import annotations

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AuditLogImmutableError(RuntimeError):
    """Raised when code tries to modify or remove a persisted audit entry."""


class AuditLog(Base):
    """Append-only record of a privileged action."""

    __tablename__ = "audit_logs"

    actor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    __table_args__ = (
        Index("idx_audit_logs_target", "target_type", "target_id"),
        Index("idx_audit_logs_created", "created_at"),
    )


@event.listens_for(AuditLog, "before_update")
def _reject_update(mapper, connection, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"audit entry {target.id} is immutable")


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(mapper, connection, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"audit entry {target.id} cannot be deleted")


__all__ = ["AuditLog", "AuditLogImmutableError"]
