"""Schema package exports."""
from .audit import AuditLogRead
from .auth import LoginRequest, LoginResponse
from .error_report import ErrorReportCreate, ErrorReportRead, ErrorReportResolve, ErrorReportStats
from .session import SessionPayload
from .user import (
    AccountCreate,
    AccountRead,
    AccountUpdate,
    PasswordChange,
    PasswordReset,
    StatusToggle,
)

__all__ = [
    "AccountCreate",
    "AccountRead",
    "AccountUpdate",
    "AuditLogRead",
    "ErrorReportCreate",
    "ErrorReportRead",
    "ErrorReportResolve",
    "ErrorReportStats",
    "LoginRequest",
    "LoginResponse",
    "PasswordChange",
    "PasswordReset",
    "SessionPayload",
    "StatusToggle",
]
