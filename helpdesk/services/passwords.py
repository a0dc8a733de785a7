"""Password hashing and password policy."""
from __future__ import annotations

import re
import secrets
from typing import Protocol

import bcrypt

from helpdesk.config import get_settings

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

PASSWORD_RULES: dict[str, str] = {
    "length": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
    "uppercase": "Password must contain at least one uppercase letter",
    "lowercase": "Password must contain at least one lowercase letter",
    "number": "Password must contain at least one number",
    "special_character": "Password must contain at least one special character",
}

_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str: ...

    def compare(self, plaintext: str, hashed: str) -> bool: ...

    @property
    def dummy_hash(self) -> str: ...


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


class BcryptHasher:
    """Adaptive one-way hash backed by bcrypt."""

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds if rounds is not None else get_settings().BCRYPT_ROUNDS
        # Same cost factor as real hashes; no supplied password will match it.
        self._dummy_hash = self.hash(secrets.token_urlsafe(24))

    def hash(self, plaintext: str) -> str:
        hashed = bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def compare(self, plaintext: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash; treat as a mismatch.
            return False

    @property
    def dummy_hash(self) -> str:
        return self._dummy_hash


def validate_password(password: str) -> list[str]:
    """Return the keys of every rule in ``PASSWORD_RULES`` the password breaks."""

    violations: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        violations.append("length")
    if not re.search(r"[A-Z]", password):
        violations.append("uppercase")
    if not re.search(r"[a-z]", password):
        violations.append("lowercase")
    if not re.search(r"[0-9]", password):
        violations.append("number")
    if not _SPECIAL_RE.search(password):
        violations.append("special_character")
    return violations


def password_errors(password: str) -> list[str]:
    """Human-readable messages for ``validate_password``."""

    return [PASSWORD_RULES[rule] for rule in validate_password(password)]


def get_password_strength(password: str) -> str:
    """Classify a password as ``weak``, ``medium`` or ``strong``."""

    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1
    if re.search(r"[a-z]", password):
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"[0-9]", password):
        score += 1
    if re.search(r"[^a-zA-Z0-9]", password):
        score += 1

    if score <= 2:
        return "weak"
    if score <= 4:
        return "medium"
    return "strong"


_default_hasher: BcryptHasher | None = None


def get_hasher() -> BcryptHasher:
    """Return the process-wide bcrypt hasher (FastAPI dependency)."""

    global _default_hasher
    if _default_hasher is None:
        _default_hasher = BcryptHasher()
    return _default_hasher


__all__ = [
    "BcryptHasher",
    "PASSWORD_RULES",
    "PasswordHasher",
    "SPECIAL_CHARACTERS",
    "get_hasher",
    "get_password_strength",
    "password_errors",
    "validate_password",
]
