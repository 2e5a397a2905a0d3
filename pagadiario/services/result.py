from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

# codes understood by the routers
NOT_FOUND = "not_found"
CONFLICT = "conflict"
FORBIDDEN = "forbidden"
INVALID = "invalid"
UNAUTHENTICATED = "unauthenticated"
STORE_ERROR = "store_error"

PG_ERROR_MESSAGES = {
    "23505": "A record with this data already exists",
    "23503": "The record cannot be removed because other records still use it",
    "42501": "You do not have permission to perform this action",
}


@dataclass
class ServiceResult:
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, data=None) -> "ServiceResult":
        return cls(data=data)

    @classmethod
    def fail(cls, error: str, code: str = INVALID, data=None) -> "ServiceResult":
        return cls(data=data, error=error, code=code)


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) == "23505" or "UNIQUE constraint failed" in str(orig)


def is_fk_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) == "23503" or "FOREIGN KEY constraint failed" in str(orig)


def store_error(exc: SQLAlchemyError) -> ServiceResult:
    """Normalize a database error into a user-facing ServiceResult."""
    if isinstance(exc, IntegrityError):
        if is_unique_violation(exc):
            return ServiceResult.fail(PG_ERROR_MESSAGES["23505"], CONFLICT)
        if is_fk_violation(exc):
            return ServiceResult.fail(PG_ERROR_MESSAGES["23503"], CONFLICT)
    if isinstance(exc, OperationalError):
        return ServiceResult.fail("Database connection error, please try again", STORE_ERROR)

    pgcode = getattr(getattr(exc, "orig", None), "pgcode", None)
    return ServiceResult.fail(PG_ERROR_MESSAGES.get(pgcode, "Unexpected database error"), STORE_ERROR)
