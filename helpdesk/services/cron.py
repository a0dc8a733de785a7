"""Background cron jobs for maintenance tasks."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from helpdesk import db
from helpdesk.services.sessions import SessionStore

logger = logging.getLogger(__name__)


def prune_expired_sessions_once(db_session: Session | None = None) -> int:
    """Delete sessions whose expiry has passed."""

    session = db_session if db_session is not None else db.get_sessionmaker()()
    try:
        removed = SessionStore(session).prune_expired()
        session.commit()
    finally:
        if db_session is None:
            session.close()
    if removed:
        logger.info("Expired sessions pruned", extra={"count": removed})
    return removed
