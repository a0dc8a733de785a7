"""User account model."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

_LIVE_ROWS = "status <> 'deleted'"


class UserRole(str, enum.Enum):
    admin = "admin"
    super_admin = "super_admin"
    department = "department"


class UserStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    deleted = "deleted"


ADMIN_ROLES = frozenset({UserRole.admin, UserRole.super_admin})


class User(Base):
    """A login identity with a role and a lifecycle status."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="userrole", native_enum=False, length=20),
        nullable=False,
        default=UserRole.admin,
    )
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, name="userstatus", native_enum=False, length=20),
        nullable=False,
        default=UserStatus.active,
        index=True,
    )
    login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    password_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_users_username_live",
            "username",
            unique=True,
            sqlite_where=text(_LIVE_ROWS),
            postgresql_where=text(_LIVE_ROWS),
        ),
        Index(
            "uq_users_email_live",
            "email",
            unique=True,
            sqlite_where=text(_LIVE_ROWS),
            postgresql_where=text(_LIVE_ROWS),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role.value})>"


__all__ = ["ADMIN_ROLES", "User", "UserRole", "UserStatus"]
