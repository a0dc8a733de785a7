"""Declarative base shared by every table."""
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from helpdesk.utils.time import utcnow


class Base(DeclarativeBase):
    """Integer key plus tz-aware ``created_at`` / ``updated_at`` stamps."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Bulk ``update()`` statements from the credential store also bump this.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
