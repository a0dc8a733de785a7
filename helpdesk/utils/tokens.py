"""Session token generation and hashing helpers."""
from __future__ import annotations

import hashlib
import hmac
import secrets

from helpdesk.config import get_settings


def hash_token(raw: str) -> str:
    """Return an HMAC-SHA256 hash for the provided session token."""

    secret = get_settings().SESSION_SECRET
    return hmac.new(secret.encode(), raw.encode(), hashlib.sha256).hexdigest()


def gen_token(nbytes: int = 32) -> tuple[str, str]:
    """Generate an opaque session token and the hash stored server-side."""

    raw = secrets.token_urlsafe(nbytes)
    return raw, hash_token(raw)
