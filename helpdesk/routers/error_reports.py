"""Error report submission and triage."""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from helpdesk.db import get_db
from helpdesk.schemas.error_report import (
    ErrorReportCreate,
    ErrorReportRead,
    ErrorReportResolve,
    ErrorReportStats,
)
from helpdesk.schemas.session import SessionPayload
from helpdesk.security import client_ip, require_admin, session_cookie
from helpdesk.services.error_reports import ErrorReportEntry, ErrorReportingService, SqlErrorReportStore
from helpdesk.services.sessions import SessionStore
from helpdesk.utils.errors import error_response

router = APIRouter(prefix="/error-reports", tags=["error-reports"])
admin_router = APIRouter(prefix="/admin/error-reports", tags=["error-reports"])


def get_error_reporting_service(db: Session = Depends(get_db)) -> ErrorReportingService:
    return ErrorReportingService(SqlErrorReportStore(db))


@router.post("", response_model=ErrorReportRead, status_code=status.HTTP_201_CREATED)
def submit_error_report(
    payload: ErrorReportCreate,
    request: Request,
    db: Session = Depends(get_db),
    service: ErrorReportingService = Depends(get_error_reporting_service),
) -> ErrorReportEntry:
    """Anyone may report an error; the reporter is recorded when logged in."""

    session = SessionStore(db).load(session_cookie(request))
    user_context = {
        "user_id": session.account_id if session else None,
        "user_agent": request.headers.get("user-agent"),
        "url": payload.url,
        "ip": client_ip(request),
    }
    return service.report_error(
        payload.correlation_id,
        payload.category,
        user_context,
        payload.description,
        payload.additional_data,
    )


@admin_router.get("", response_model=list[ErrorReportRead])
def list_error_reports(
    service: ErrorReportingService = Depends(get_error_reporting_service),
    actor: SessionPayload = Depends(require_admin),
) -> list[ErrorReportEntry]:
    return service.list_reports()


@admin_router.get("/stats", response_model=ErrorReportStats)
def error_report_stats(
    service: ErrorReportingService = Depends(get_error_reporting_service),
    actor: SessionPayload = Depends(require_admin),
) -> dict[str, object]:
    return service.get_stats()


@admin_router.get("/{correlation_id}", response_model=ErrorReportRead)
def get_error_report(
    correlation_id: str,
    service: ErrorReportingService = Depends(get_error_reporting_service),
    actor: SessionPayload = Depends(require_admin),
) -> ErrorReportEntry:
    report = service.get_report(correlation_id)
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_response("REPORT_NOT_FOUND", "Error report not found."),
        )
    return report


@admin_router.post("/{correlation_id}/resolve", response_model=ErrorReportRead)
def resolve_error_report(
    correlation_id: str,
    payload: ErrorReportResolve,
    service: ErrorReportingService = Depends(get_error_reporting_service),
    actor: SessionPayload = Depends(require_admin),
) -> ErrorReportEntry:
    if not service.resolve_report(correlation_id, payload.resolution):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_response("REPORT_NOT_FOUND", "Error report not found."),
        )
    report = service.get_report(correlation_id)
    assert report is not None
    return report
