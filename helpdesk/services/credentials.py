"""SQL-backed credential store over the ``users`` table."""
from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from helpdesk.models.user import User, UserRole, UserStatus
from helpdesk.services.exceptions import storage_errors
from helpdesk.services.sessions import SessionStore
from helpdesk.utils.time import utcnow

UPDATABLE_FIELDS = frozenset(
    {"username", "email", "role", "department", "status", "password_hash", "password_changed_at"}
)


class CredentialStore:
    """Reads are always fresh; nothing about an account is cached in process."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_username(self, username: str) -> User | None:
        """Return the live account for ``username``, including its password hash."""

        stmt = (
            select(User)
            .where(User.username == username, User.status != UserStatus.deleted)
            .execution_options(populate_existing=True)
        )
        with storage_errors("account lookup"):
            return self.db.scalar(stmt)

    def get(self, account_id: int) -> User | None:
        """Return the account unless it is missing or soft-deleted."""

        with storage_errors("account lookup"):
            user = self.db.get(User, account_id, populate_existing=True)
        if user is None or user.status == UserStatus.deleted:
            return None
        return user

    def list_live(self) -> list[User]:
        stmt = select(User).where(User.status != UserStatus.deleted).order_by(User.created_at.desc(), User.id.desc())
        with storage_errors("account list"):
            return list(self.db.scalars(stmt))

    def is_taken(self, *, username: str | None = None, email: str | None = None, exclude_id: int | None = None) -> bool:
        """Whether a live account other than ``exclude_id`` already uses the value."""

        stmt = select(func.count()).select_from(User).where(User.status != UserStatus.deleted)
        if username is not None:
            stmt = stmt.where(User.username == username)
        if email is not None:
            stmt = stmt.where(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        with storage_errors("uniqueness check"):
            return bool(self.db.scalar(stmt))

    def insert(self, user: User) -> User:
        with storage_errors("account insert"):
            self.db.add(user)
            self.db.flush()
        return user

    def increment_failed_logins(self, username: str) -> None:
        """Single ``UPDATE ... SET login_attempts = login_attempts + 1``."""

        stmt = (
            update(User)
            .where(User.username == username, User.status != UserStatus.deleted)
            .values(login_attempts=User.login_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("failed login increment"):
            self.db.execute(stmt)

    def reset_failed_logins(self, account_id: int) -> None:
        stmt = (
            update(User)
            .where(User.id == account_id)
            .values(login_attempts=0)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("failed login reset"):
            self.db.execute(stmt)

    def record_login(self, account_id: int) -> None:
        """Reset the failed-login counter and stamp the last successful login."""

        stmt = (
            update(User)
            .where(User.id == account_id)
            .values(login_attempts=0, last_login_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        with storage_errors("login bookkeeping"):
            self.db.execute(stmt)

    def update_fields(self, account_id: int, fields: dict[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise KeyError(f"not updatable: {sorted(unknown)}")
        if not fields:
            return
        stmt = (
            update(User)
            .where(User.id == account_id)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("account update"):
            self.db.execute(stmt)

    def soft_delete(self, account_id: int) -> None:
        stmt = (
            update(User)
            .where(User.id == account_id)
            .values(status=UserStatus.deleted, deleted_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        with storage_errors("account soft delete"):
            self.db.execute(stmt)

    def count_active(self, role: UserRole) -> int:
        stmt = (
            select(func.count())
            .select_from(User)
            .where(User.role == role, User.status == UserStatus.active)
        )
        with storage_errors("active account count"):
            return self.db.scalar(stmt) or 0

    def purge_sessions(self, account_id: int) -> int:
        return SessionStore(self.db).purge_account(account_id)


__all__ = ["CredentialStore", "UPDATABLE_FIELDS"]
