"""Error kinds raised by the Postline core and their transport status codes.

Every failure a caller can observe is one of the ``PostlineError`` subclasses
below. Front-ends never inspect ad-hoc attributes: they look the error's
``kind`` up in ``STATUS_CODES`` (or call ``status_for``) and render
``to_payload()``.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from postline.services.validation import Violation


class ErrorKind(str, Enum):
    """Closed set of failure categories."""

    VALIDATION_FAILED = "ValidationFailed"
    NOT_AUTHENTICATED = "NotAuthenticated"
    NOT_AUTHORIZED = "NotAuthorized"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    STORAGE_UNAVAILABLE = "StorageUnavailable"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORAGE_UNAVAILABLE: 500,
}


class PostlineError(Exception):
    """Base class for every categorized failure."""

    kind: ClassVar[ErrorKind] = ErrorKind.STORAGE_UNAVAILABLE
    default_message: ClassVar[str] = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return status_for(self)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body shared by every front-end."""
        return {"message": self.message, "kind": self.kind.value, "data": None}


class ValidationFailed(PostlineError):
    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Validation failed, entered data is incorrect."

    def __init__(
        self,
        violations: Sequence[Violation] = (),
        message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.violations = list(violations)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["data"] = [violation.as_dict() for violation in self.violations]
        return payload


class NotAuthenticated(PostlineError):
    kind = ErrorKind.NOT_AUTHENTICATED
    default_message = "Not authenticated."


class NotAuthorized(PostlineError):
    kind = ErrorKind.NOT_AUTHORIZED
    default_message = "Not authorized."


class NotFound(PostlineError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found."


class Conflict(PostlineError):
    kind = ErrorKind.CONFLICT
    default_message = "Resource already exists."


class StorageUnavailable(PostlineError):
    kind = ErrorKind.STORAGE_UNAVAILABLE


_ERRORS_BY_KIND: dict[ErrorKind, type[PostlineError]] = {
    ErrorKind.VALIDATION_FAILED: ValidationFailed,
    ErrorKind.NOT_AUTHENTICATED: NotAuthenticated,
    ErrorKind.NOT_AUTHORIZED: NotAuthorized,
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.CONFLICT: Conflict,
    ErrorKind.STORAGE_UNAVAILABLE: StorageUnavailable,
}


def status_for(error: BaseException) -> int:
    """Map any exception to a transport status code; uncategorized errors are 500."""
    if isinstance(error, PostlineError):
        return STATUS_CODES[error.kind]
    return 500


def error_for_kind(kind: ErrorKind, message: str | None = None) -> PostlineError:
    """Instantiate the error variant registered for ``kind``."""
    if kind is ErrorKind.VALIDATION_FAILED:
        return ValidationFailed(message=message)
    return _ERRORS_BY_KIND[kind](message)


__all__ = [
    "Conflict",
    "ErrorKind",
    "NotAuthenticated",
    "NotAuthorized",
    "NotFound",
    "PostlineError",
    "STATUS_CODES",
    "StorageUnavailable",
    "ValidationFailed",
    "error_for_kind",
    "status_for",
]
