"""Username/password authentication with lockout."""
from __future__ import annotations

import logging
import time

from fastapi import Depends
from sqlalchemy.orm import Session

from helpdesk.config import get_settings
from helpdesk.db import get_db
from helpdesk.models.user import User, UserStatus
from helpdesk.services.credentials import CredentialStore
from helpdesk.services.exceptions import storage_errors
from helpdesk.services.passwords import PasswordHasher, get_hasher

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class AuthService:
    """Verify credentials against the credential store.

    Every rejection (unknown user, locked, inactive, wrong password) yields
    ``None``; the cause is only logged. Exactly one hash comparison runs per
    attempt, against a dummy hash when the username is unknown, so response
    time does not reveal which usernames exist.
    """

    def __init__(self, db: Session, hasher: PasswordHasher, *, max_attempts: int | None = None) -> None:
        self.db = db
        self.credentials = CredentialStore(db)
        self.hasher = hasher
        self.max_attempts = max_attempts if max_attempts is not None else get_settings().MAX_LOGIN_ATTEMPTS

    def authenticate(self, username: str, password: str) -> User | None:
        started = time.perf_counter()
        user = self.credentials.find_by_username(username)

        stored_hash = user.password_hash if user is not None else self.hasher.dummy_hash
        password_ok = self.hasher.compare(password, stored_hash)

        if user is None:
            logger.warning(
                "Authentication failed: unknown user",
                extra={"username": username, "duration_ms": _elapsed_ms(started)},
            )
            return None

        if user.login_attempts >= self.max_attempts:
            logger.warning(
                "Authentication failed: account locked",
                extra={
                    "username": username,
                    "user_id": user.id,
                    "login_attempts": user.login_attempts,
                    "duration_ms": _elapsed_ms(started),
                },
            )
            return None

        if user.status != UserStatus.active:
            logger.warning(
                "Authentication failed: account not active",
                extra={
                    "username": username,
                    "user_id": user.id,
                    "status": user.status.value,
                    "duration_ms": _elapsed_ms(started),
                },
            )
            return None

        if not password_ok:
            self.credentials.increment_failed_logins(username)
            with storage_errors("failed login commit"):
                self.db.commit()
            logger.warning(
                "Authentication failed: invalid credentials",
                extra={
                    "username": username,
                    "user_id": user.id,
                    "login_attempts": user.login_attempts + 1,
                    "duration_ms": _elapsed_ms(started),
                },
            )
            return None

        self.credentials.record_login(user.id)
        with storage_errors("login commit"):
            self.db.commit()
            self.db.refresh(user)
        logger.info(
            "Authentication successful",
            extra={
                "username": username,
                "user_id": user.id,
                "role": user.role.value,
                "duration_ms": _elapsed_ms(started),
            },
        )
        return user


def get_auth_service(
    db: Session = Depends(get_db), hasher: PasswordHasher = Depends(get_hasher)
) -> AuthService:
    return AuthService(db, hasher)


__all__ = ["AuthService", "get_auth_service"]
