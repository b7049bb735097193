"""Typed service outcomes and collaborator failure handling.

Business-rule violations (not found, denied, invalid, conflict) travel back to the
caller inside a ``Result``. Only collaborator failures are exceptions, and those are
converted into an opaque ``COLLABORATOR_FAILURE`` result at the service boundary.
"""

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorCode(str, enum.Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    VALIDATION_ERROR = "validation_error"
    CONFLICT = "conflict"
    COLLABORATOR_FAILURE = "collaborator_failure"


class Conflict(APIException):
    """409 raised when a write collides with an existing record."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class CollaboratorUnavailable(APIException):
    """503 for persistence, identity or blob store failures (detail kept opaque)."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable, try again later."
    default_code = "collaborator_failure"


_API_EXCEPTIONS: dict[ErrorCode, type[APIException]] = {
    ErrorCode.NOT_FOUND: NotFound,
    ErrorCode.PERMISSION_DENIED: PermissionDenied,
    ErrorCode.VALIDATION_ERROR: ValidationError,
    ErrorCode.CONFLICT: Conflict,
    ErrorCode.COLLABORATOR_FAILURE: CollaboratorUnavailable,
}


class CollaboratorError(Exception):
    """Raised by stores and blob stores when the underlying backend fails."""

    def __init__(self, operation: str, message: str = "") -> None:
        self.operation = operation
        super().__init__(message or f"{operation} failed")


class DuplicateRecord(CollaboratorError):
    """A uniqueness constraint rejected the write."""


@dataclass(frozen=True)
class ServiceError:
    code: ErrorCode
    detail: str

    def as_exception(self) -> APIException:
        """Return the DRF exception matching this error's code."""
        return _API_EXCEPTIONS[self.code](self.detail)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service operation: either ``value`` or ``error`` is meaningful."""
    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> ErrorCode | None:
        return self.error.code if self.error else None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def fail(cls, code: ErrorCode, detail: str) -> "Result":
        return cls(error=ServiceError(code, detail))

    @classmethod
    def from_error(cls, error: ServiceError) -> "Result":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the DRF exception for the error."""
        if self.error is not None:
            raise self.error.as_exception()
        return self.value


def not_found(what: str) -> Result:
    return Result.fail(ErrorCode.NOT_FOUND, f"{what} not found")


def invalid(detail: str) -> Result:
    return Result.fail(ErrorCode.VALIDATION_ERROR, detail)


def conflict(detail: str) -> Result:
    return Result.fail(ErrorCode.CONFLICT, detail)


def collaborator_boundary(func: Callable[..., Result]) -> Callable[..., Result]:
    """Convert an escaping ``CollaboratorError`` into a logged, opaque failure result."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result:
        try:
            return func(*args, **kwargs)
        except CollaboratorError as exc:
            logger.exception("Collaborator failure during %s (%s)", func.__qualname__, exc.operation)
            return Result.fail(ErrorCode.COLLABORATOR_FAILURE, CollaboratorUnavailable.default_detail)

    return wrapper
