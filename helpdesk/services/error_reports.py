"""User-submitted error reports behind an injectable store."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from helpdesk.models.error_report import ErrorReport
from helpdesk.services.exceptions import storage_errors
from helpdesk.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

STATUS_REPORTED = "reported"
STATUS_RESOLVED = "resolved"


@dataclass(frozen=True)
class ErrorReportEntry:
    correlation_id: str
    category: str
    user_context: dict[str, Any]
    description: str = ""
    additional_data: dict[str, Any] = field(default_factory=dict)
    status: str = STATUS_REPORTED
    resolution: str | None = None
    reported_at: datetime = field(default_factory=utcnow)
    resolved_at: datetime | None = None


class ErrorReportStore(Protocol):
    def save(self, entry: ErrorReportEntry) -> None: ...

    def get(self, correlation_id: str) -> ErrorReportEntry | None: ...

    def all(self) -> list[ErrorReportEntry]: ...


class InMemoryErrorReportStore:
    """Process-local store; suited to tests and single-process dev servers."""

    def __init__(self) -> None:
        self._reports: dict[str, ErrorReportEntry] = {}

    def save(self, entry: ErrorReportEntry) -> None:
        self._reports[entry.correlation_id] = entry

    def get(self, correlation_id: str) -> ErrorReportEntry | None:
        return self._reports.get(correlation_id)

    def all(self) -> list[ErrorReportEntry]:
        return list(self._reports.values())


class SqlErrorReportStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _to_entry(row: ErrorReport) -> ErrorReportEntry:
        return ErrorReportEntry(
            correlation_id=row.correlation_id,
            category=row.category,
            user_context=dict(row.user_context or {}),
            description=row.description,
            additional_data=dict(row.additional_data or {}),
            status=row.status,
            resolution=row.resolution,
            reported_at=as_utc(row.created_at),
            resolved_at=as_utc(row.resolved_at) if row.resolved_at else None,
        )

    def _row(self, correlation_id: str) -> ErrorReport | None:
        return self.db.scalar(select(ErrorReport).where(ErrorReport.correlation_id == correlation_id))

    def save(self, entry: ErrorReportEntry) -> None:
        with storage_errors("error report save"):
            row = self._row(entry.correlation_id)
            if row is None:
                row = ErrorReport(correlation_id=entry.correlation_id, created_at=entry.reported_at)
                self.db.add(row)
            row.category = entry.category
            row.user_context = entry.user_context
            row.description = entry.description
            row.additional_data = entry.additional_data
            row.status = entry.status
            row.resolution = entry.resolution
            row.resolved_at = entry.resolved_at
            self.db.commit()

    def get(self, correlation_id: str) -> ErrorReportEntry | None:
        with storage_errors("error report lookup"):
            row = self._row(correlation_id)
        return self._to_entry(row) if row is not None else None

    def all(self) -> list[ErrorReportEntry]:
        with storage_errors("error report list"):
            rows = self.db.scalars(select(ErrorReport).order_by(ErrorReport.id))
            return [self._to_entry(row) for row in rows]


class ErrorReportingService:
    def __init__(self, store: ErrorReportStore) -> None:
        self.store = store

    def report_error(
        self,
        correlation_id: str,
        category: str,
        user_context: dict[str, Any] | None = None,
        description: str = "",
        additional_data: dict[str, Any] | None = None,
    ) -> ErrorReportEntry:
        context = user_context or {}
        entry = ErrorReportEntry(
            correlation_id=correlation_id,
            category=category,
            user_context={
                "user_id": context.get("user_id") or "anonymous",
                "user_agent": context.get("user_agent") or "unknown",
                "url": context.get("url") or "unknown",
                "ip": context.get("ip") or "unknown",
            },
            description=description.strip(),
            additional_data=additional_data or {},
        )
        self.store.save(entry)
        logger.info(
            "Error report submitted",
            extra={
                "correlation_id": correlation_id,
                "category": category,
                "reporter": entry.user_context["user_id"],
                "has_description": bool(entry.description),
            },
        )
        return entry

    def get_report(self, correlation_id: str) -> ErrorReportEntry | None:
        return self.store.get(correlation_id)

    def list_reports(self) -> list[ErrorReportEntry]:
        return self.store.all()

    def get_stats(self) -> dict[str, Any]:
        reports = self.store.all()
        by_category = Counter(report.category for report in reports)
        by_date = Counter(report.reported_at.date().isoformat() for report in reports)
        return {
            "total": len(reports),
            "by_category": dict(by_category),
            "by_date": dict(by_date),
            "unresolved": sum(1 for report in reports if report.status != STATUS_RESOLVED),
        }

    def resolve_report(self, correlation_id: str, resolution: str = "") -> bool:
        entry = self.store.get(correlation_id)
        if entry is None:
            return False
        self.store.save(
            replace(entry, status=STATUS_RESOLVED, resolution=resolution, resolved_at=utcnow())
        )
        logger.info(
            "Error report resolved",
            extra={"correlation_id": correlation_id, "resolution": resolution[:100]},
        )
        return True


__all__ = [
    "ErrorReportEntry",
    "ErrorReportStore",
    "ErrorReportingService",
    "InMemoryErrorReportStore",
    "SqlErrorReportStore",
]
