"""
Operation results and the error taxonomy.

Stores and services never raise for expected conditions. They return an
:class:`OperationResult` carrying either ``data`` or an ``error`` with an
:class:`ErrorCode`. Presentation layers that prefer exceptions call
:meth:`OperationResult.unwrap`, which raises the matching
:class:`OperationError` subclass.

A partially successful operation (for example discovery that resolved some
but not all documents) is a success with a ``warning``.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Why an operation failed."""

    RESOURCE_UNAVAILABLE = "resource_unavailable"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    PRECONDITION_FAILED = "precondition_failed"


class CirculationDeskError(Exception):
    """Base exception for the circulation desk."""


class OperationError(CirculationDeskError):
    """A failed operation surfaced as an exception."""

    code: ErrorCode | None = None

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class ResourceUnavailableError(OperationError):
    """Raised when a document cannot be resolved or opened."""

    code = ErrorCode.RESOURCE_UNAVAILABLE


class NotFoundError(OperationError):
    """Raised when an id is absent from a document."""

    code = ErrorCode.NOT_FOUND


class ValidationFailedError(OperationError):
    """Raised when validation rejected the input."""

    code = ErrorCode.VALIDATION_FAILED


class PreconditionFailedError(OperationError):
    """Raised when a business rule blocked a mutation."""

    code = ErrorCode.PRECONDITION_FAILED


_ERRORS_BY_CODE: dict[ErrorCode, type[OperationError]] = {
    ErrorCode.RESOURCE_UNAVAILABLE: ResourceUnavailableError,
    ErrorCode.NOT_FOUND: NotFoundError,
    ErrorCode.VALIDATION_FAILED: ValidationFailedError,
    ErrorCode.PRECONDITION_FAILED: PreconditionFailedError,
}


class OperationResult(BaseModel, Generic[T]):
    """Outcome of a store, service or discovery operation."""

    success: bool
    data: T | None = None
    error: str | None = None
    code: ErrorCode | None = None
    errors: list[str] = Field(
        default_factory=list,
        description="Every violated rule when validation failed",
    )
    warning: str | None = None

    @classmethod
    def ok(cls, data: Any = None, warning: str | None = None) -> "OperationResult":
        return cls(success=True, data=data, warning=warning)

    @classmethod
    def fail(
        cls, code: ErrorCode, error: str, errors: list[str] | None = None
    ) -> "OperationResult":
        return cls(success=False, code=code, error=error, errors=list(errors or []))

    @classmethod
    def propagate(cls, other: "OperationResult") -> "OperationResult":
        """Re-wrap a failed result so it can be returned with a different data type."""
        return cls(success=False, code=other.code, error=other.error, errors=list(other.errors))

    @classmethod
    def from_exception(cls, exc: OperationError) -> "OperationResult":
        return cls.fail(exc.code or ErrorCode.RESOURCE_UNAVAILABLE, exc.message, exc.errors)

    def unwrap(self) -> T:
        """Return ``data`` or raise the error this result carries."""
        if self.success:
            return self.data  # type: ignore[return-value]
        error_class = _ERRORS_BY_CODE.get(self.code, OperationError) if self.code else OperationError
        raise error_class(self.error or "Operation failed", self.errors)

    def to_payload(self) -> dict[str, Any]:
        """Serialise as the ``{success, data?, error?}`` shape callers consume."""
        return self.model_dump(mode="json", exclude_none=True, exclude_defaults=False)
