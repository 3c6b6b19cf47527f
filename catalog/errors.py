"""Error kinds and exceptions for the catalogue."""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Classification shared by validation results, store results and exceptions."""

    REQUIRED = "REQUIRED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    FORMAT_INVALID = "FORMAT_INVALID"
    NOT_FOUND = "NOT_FOUND"
    UNAVAILABLE = "UNAVAILABLE"
    CONFLICT = "CONFLICT"


class LibraryError(Exception):
    """
    Base catalogue exception.

    Every error names its kind. status_code is None unless the error
    dictates its own HTTP status; the API otherwise derives it from kind.
    """

    status_code: Optional[int] = None

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.kind = kind
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(LibraryError):
    """A book or borrow record does not exist."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} with id {resource_id} not found",
            ErrorKind.NOT_FOUND,
            details={"resource": resource, "id": str(resource_id)},
        )


class UnavailableError(LibraryError):
    """No free copies are left to borrow."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.UNAVAILABLE)


class ConflictError(LibraryError):
    """The requested state change contradicts the current state."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.CONFLICT)


class CatalogValidationError(LibraryError):
    """A request failed validation."""

    def __init__(self, message: str, kind: ErrorKind, field: Optional[str] = None):
        super().__init__(
            message,
            kind,
            details={"field": field} if field else {},
        )


class OperationFailedError(LibraryError):
    """
    A borrow or return was refused.

    Always a client error (400), whatever the kind of the underlying
    cause, so "book not found" and "no copies left" share a status code.
    """

    status_code = 400

    def __init__(self, message: str, cause: LibraryError):
        super().__init__(
            message,
            cause.kind,
            details={"reason": cause.message, **cause.details},
        )
        self.__cause__ = cause
