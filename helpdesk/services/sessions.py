"""Server-side session store keyed by an HMAC of the cookie value."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from helpdesk.config import get_settings
from helpdesk.models.session import WebSession
from helpdesk.schemas.session import SessionPayload
from helpdesk.services.exceptions import storage_errors
from helpdesk.utils.time import as_utc, utcnow
from helpdesk.utils.tokens import gen_token, hash_token

logger = logging.getLogger(__name__)


class SessionStore:
    """Sessions are enumerable and bulk-deletable by account id.

    Methods flush but never commit; the calling service or route owns the
    transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, payload: SessionPayload, *, max_age_seconds: int | None = None) -> str:
        """Persist ``payload`` and return the raw session id for the cookie."""

        lifetime = max_age_seconds or get_settings().SESSION_MAX_AGE_SECONDS
        raw, sid_hash = gen_token()
        with storage_errors("session create"):
            self.db.add(
                WebSession(
                    sid_hash=sid_hash,
                    account_id=payload.account_id,
                    data=payload.model_dump(mode="json"),
                    expires_at=utcnow() + timedelta(seconds=lifetime),
                )
            )
            self.db.flush()
        return raw

    def load(self, raw: str | None) -> SessionPayload | None:
        """Return the payload for ``raw``; expired rows are dropped on sight."""

        if not raw:
            return None
        with storage_errors("session load"):
            row = self.db.scalar(select(WebSession).where(WebSession.sid_hash == hash_token(raw)))
            if row is None:
                return None
            if as_utc(row.expires_at) <= utcnow():
                self.db.delete(row)
                self.db.flush()
                return None
        return SessionPayload.model_validate(row.data)

    def destroy(self, raw: str | None) -> bool:
        if not raw:
            return False
        with storage_errors("session destroy"):
            result = self.db.execute(delete(WebSession).where(WebSession.sid_hash == hash_token(raw)))
        return result.rowcount > 0

    def purge_account(self, account_id: int) -> int:
        """Delete every session belonging to ``account_id``."""

        with storage_errors("session purge"):
            result = self.db.execute(delete(WebSession).where(WebSession.account_id == account_id))
        count = result.rowcount or 0
        if count:
            logger.info("Sessions purged", extra={"account_id": account_id, "count": count})
        return count

    def count_for_account(self, account_id: int) -> int:
        with storage_errors("session count"):
            return self.db.scalar(
                select(func.count()).select_from(WebSession).where(WebSession.account_id == account_id)
            ) or 0

    def prune_expired(self, *, reference_time: datetime | None = None) -> int:
        now = reference_time or utcnow()
        with storage_errors("session prune"):
            result = self.db.execute(delete(WebSession).where(WebSession.expires_at <= now))
        return result.rowcount or 0


__all__ = ["SessionStore"]
