"""Typed failures raised by the account security services.

Authentication rejections are not part of this hierarchy: ``authenticate``
returns ``None`` for every rejection so callers cannot tell the causes apart.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError


class AccountServiceError(Exception):
    """Base class for failures the route layer must map explicitly."""

    code = "ACCOUNT_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AccountServiceError):
    """Input breaks one or more business rules; ``errors`` lists all of them."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors: list[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class InvariantViolation(AccountServiceError):
    """The operation would leave the system without an active super admin, or similar."""

    code = "INVARIANT_VIOLATION"


class NotFoundError(AccountServiceError):
    """The referenced account does not exist or was soft-deleted."""

    code = "NOT_FOUND"


class StorageError(AccountServiceError):
    """The backing store is unreachable or a statement failed."""

    code = "STORAGE_ERROR"


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise driver failures inside the block as ``StorageError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"{operation} failed") from exc


__all__ = [
    "AccountServiceError",
    "InvariantViolation",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "storage_errors",
]
