"""Account lifecycle: create, update, soft delete, password reset and unlock."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from helpdesk.db import get_db
from helpdesk.models.user import User, UserRole, UserStatus
from helpdesk.schemas.user import AccountCreate, AccountUpdate
from helpdesk.services import audit
from helpdesk.services.credentials import CredentialStore
from helpdesk.services.exceptions import (
    InvariantViolation,
    NotFoundError,
    ValidationError,
    storage_errors,
)
from helpdesk.services.passwords import PasswordHasher, get_hasher, password_errors
from helpdesk.utils.time import utcnow

logger = logging.getLogger(__name__)

TARGET_USER = "user"

DEPARTMENT_REQUIRED = "Department is required for department users"
DEPARTMENT_NOT_ALLOWED = "Department must be empty for admin and super admin users"
USERNAME_TAKEN = "Username is already in use"
EMAIL_TAKEN = "Email is already in use"


def _normalize_department(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _changes(updates: AccountUpdate | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(updates, BaseModel):
        return updates.model_dump(exclude_unset=True)
    return AccountUpdate.model_validate(dict(updates)).model_dump(exclude_unset=True)


class AccountService:
    """Business entry points for account administration.

    Every failure is raised before anything is written; each successful
    privileged change adds exactly one audit entry in the same transaction.
    """

    def __init__(self, db: Session, hasher: PasswordHasher) -> None:
        self.db = db
        self.hasher = hasher
        self.credentials = CredentialStore(db)

    # -- reads -------------------------------------------------------------
    def get_account(self, account_id: int) -> User:
        user = self.credentials.get(account_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_accounts(self) -> list[User]:
        return self.credentials.list_live()

    # -- helpers -----------------------------------------------------------
    def _is_last_active_super_admin(self, user: User) -> bool:
        if user.role != UserRole.super_admin or user.status != UserStatus.active:
            return False
        return self.credentials.count_active(UserRole.super_admin) <= 1

    def _uniqueness_errors(
        self, *, username: str | None, email: str | None, exclude_id: int | None = None
    ) -> list[str]:
        errors: list[str] = []
        if username is not None and self.credentials.is_taken(username=username, exclude_id=exclude_id):
            errors.append(USERNAME_TAKEN)
        if email is not None and self.credentials.is_taken(email=email, exclude_id=exclude_id):
            errors.append(EMAIL_TAKEN)
        return errors

    def _commit(self) -> None:
        with storage_errors("account commit"):
            self.db.commit()

    def _reload(self, user: User) -> User:
        with storage_errors("account reload"):
            self.db.refresh(user)
        return user

    # -- writes ------------------------------------------------------------
    def create_account(
        self,
        data: AccountCreate,
        *,
        actor_id: int | None = None,
        ip: str | None = None,
    ) -> User:
        """Create an account; a department given for a non-department role is rejected."""

        department = _normalize_department(data.department)
        errors: list[str] = []
        if data.role == UserRole.department and department is None:
            errors.append(DEPARTMENT_REQUIRED)
        if data.role != UserRole.department and department is not None:
            errors.append(DEPARTMENT_NOT_ALLOWED)
        errors.extend(password_errors(data.password))
        errors.extend(self._uniqueness_errors(username=data.username, email=data.email))
        if errors:
            raise ValidationError(errors)

        user = self.credentials.insert(
            User(
                username=data.username,
                email=data.email,
                password_hash=self.hasher.hash(data.password),
                role=data.role,
                department=department,
                status=UserStatus.active,
                login_attempts=0,
            )
        )
        if actor_id is not None:
            audit.append(
                self.db,
                actor_id=actor_id,
                action="USER_CREATED",
                target_type=TARGET_USER,
                target_id=user.id,
                details={"username": user.username, "email": user.email, "role": user.role},
                ip=ip,
            )
        self._commit()
        logger.info("Account created", extra={"user_id": user.id, "role": user.role.value})
        return self._reload(user)

    def update_account(
        self,
        actor_id: int,
        target_id: int,
        updates: AccountUpdate | Mapping[str, Any],
        ip: str | None = None,
    ) -> User:
        """Apply an administrative change-set to ``target_id``.

        A department supplied for a non-department role is cleared rather
        than rejected.
        """

        changes = _changes(updates)
        target = self.get_account(target_id)

        new_role = changes.get("role") or target.role
        new_status = changes.get("status") or target.status

        if new_status == UserStatus.deleted:
            raise ValidationError("Use account deletion to remove an account")

        if self._is_last_active_super_admin(target):
            if new_role != UserRole.super_admin:
                raise InvariantViolation("Cannot downgrade the last super admin")
            if new_status != UserStatus.active:
                raise InvariantViolation("Cannot deactivate the last super admin")

        fields: dict[str, Any] = {}
        for key in ("username", "email", "role", "status"):
            if changes.get(key) is not None:
                fields[key] = changes[key]

        if new_role == UserRole.department:
            department = _normalize_department(changes.get("department", target.department))
            if department is None:
                raise ValidationError(DEPARTMENT_REQUIRED)
            if department != target.department:
                fields["department"] = department
        elif target.department is not None or "department" in changes:
            fields["department"] = None

        errors = self._uniqueness_errors(
            username=fields.get("username"), email=fields.get("email"), exclude_id=target.id
        )
        if errors:
            raise ValidationError(errors)

        was_active = target.status == UserStatus.active
        self.credentials.update_fields(target.id, fields)

        purged = 0
        if was_active and new_status != UserStatus.active:
            purged = self.credentials.purge_sessions(target.id)

        audit.append(
            self.db,
            actor_id=actor_id,
            action="USER_UPDATED",
            target_type=TARGET_USER,
            target_id=target.id,
            details={"changes": changes},
            ip=ip,
        )
        self._commit()
        logger.info(
            "Account updated",
            extra={"actor_id": actor_id, "user_id": target.id, "fields": sorted(fields), "sessions_purged": purged},
        )
        return self._reload(target)

    def toggle_status(self, actor_id: int, target_id: int, new_status: UserStatus, ip: str | None = None) -> User:
        return self.update_account(actor_id, target_id, {"status": new_status}, ip)

    def delete_account(self, actor_id: int, target_id: int, ip: str | None = None) -> None:
        if actor_id == target_id:
            raise InvariantViolation("Cannot delete your own account")

        target = self.get_account(target_id)
        if self._is_last_active_super_admin(target):
            raise InvariantViolation("Cannot delete the last super admin")

        snapshot = {"username": target.username, "email": target.email, "role": target.role}
        self.credentials.soft_delete(target.id)
        purged = self.credentials.purge_sessions(target.id)
        audit.append(
            self.db,
            actor_id=actor_id,
            action="USER_DELETED",
            target_type=TARGET_USER,
            target_id=target.id,
            details={"deleted_user": snapshot},
            ip=ip,
        )
        self._commit()
        logger.info(
            "Account deleted",
            extra={"actor_id": actor_id, "user_id": target.id, "sessions_purged": purged},
        )

    def reset_password(self, actor_id: int, target_id: int, new_password: str, ip: str | None = None) -> None:
        """Administrative reset; the failed-login counter is left untouched."""

        target = self.get_account(target_id)
        errors = password_errors(new_password)
        if errors:
            raise ValidationError(errors)

        self.credentials.update_fields(
            target.id,
            {"password_hash": self.hasher.hash(new_password), "password_changed_at": utcnow()},
        )
        audit.append(
            self.db,
            actor_id=actor_id,
            action="PASSWORD_RESET",
            target_type=TARGET_USER,
            target_id=target.id,
            details={"reset_by": "admin"},
            ip=ip,
        )
        self._commit()
        logger.info("Password reset", extra={"actor_id": actor_id, "user_id": target.id})

    def change_password(
        self, account_id: int, current_password: str, new_password: str, ip: str | None = None
    ) -> None:
        """Self-service change; requires the current password."""

        user = self.get_account(account_id)
        if not self.hasher.compare(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        errors = password_errors(new_password)
        if errors:
            raise ValidationError(errors)

        self.credentials.update_fields(
            user.id,
            {"password_hash": self.hasher.hash(new_password), "password_changed_at": utcnow()},
        )
        audit.append(
            self.db,
            actor_id=user.id,
            action="PASSWORD_CHANGED",
            target_type=TARGET_USER,
            target_id=user.id,
            details={},
            ip=ip,
        )
        self._commit()

    def unlock_account(self, actor_id: int, target_id: int, ip: str | None = None) -> User:
        """Clear the failed-login counter so a locked account can log in again."""

        target = self.get_account(target_id)
        previous = target.login_attempts
        self.credentials.reset_failed_logins(target.id)
        audit.append(
            self.db,
            actor_id=actor_id,
            action="USER_UNLOCKED",
            target_type=TARGET_USER,
            target_id=target.id,
            details={"previous_login_attempts": previous},
            ip=ip,
        )
        self._commit()
        return self._reload(target)


def get_account_service(
    db: Session = Depends(get_db), hasher: PasswordHasher = Depends(get_hasher)
) -> AccountService:
    return AccountService(db, hasher)


__all__ = ["AccountService", "get_account_service"]
