"""ORM models package."""
from .audit import AuditLog, AuditLogImmutableError
from .base import Base
from .error_report import ErrorReport
from .session import WebSession
from .user import ADMIN_ROLES, User, UserRole, UserStatus

__all__ = [
    "ADMIN_ROLES",
    "AuditLog",
    "AuditLogImmutableError",
    "Base",
    "ErrorReport",
    "User",
    "UserRole",
    "UserStatus",
    "WebSession",
]
