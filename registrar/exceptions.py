"""
Registrar Backend: Exception Hierarchy
=======================================

What:  Application-specific exceptions, each tagged with an ErrorKind.
How:   Services raise these; the single handler registered in main.py looks up
       the HTTP status for `exc.kind` in STATUS_BY_KIND. Nothing at the HTTP
       boundary inspects exception classes.
Who:   Raised by the document stores and services; caught by global handlers.

Exception Hierarchy:
    RegistrarError (base, kind=INTERNAL)      → 500
    ├── ValidationError   (kind=VALIDATION)    → 400
    ├── NotFoundError     (kind=NOT_FOUND)     → 404
    ├── ConflictError     (kind=CONFLICT)      → 409
    └── DatabaseError     (kind=STORE_FAILURE) → 500

Propagation policy:
    NotFound and Conflict keep their kind all the way to the client. Any
    exception that is not a RegistrarError is wrapped into DatabaseError by the
    service that observed it, so storage-layer details never reach a response.
"""

import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    """Closed set of failure kinds an operation can signal."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE_FAILURE = "store_failure"
    INTERNAL = "internal_error"


# Fixed mapping used by the HTTP boundary; anything unlisted is a 500.
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, 500)


class RegistrarError(Exception):
    """
    Base exception for all Registrar application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx kinds)
        kind:     ErrorKind used to pick the HTTP status
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return status_for(self.kind)


class ValidationError(RegistrarError):
    """
    Raised when client input fails a business rule that schemas cannot express.

    Schema-level problems (missing fields, bad enum values) are caught by
    FastAPI before a service runs and are reshaped into the same 400 body.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(RegistrarError):
    """
    Raised when a student or course id does not resolve.

    The message always names the resource and, when known, the id, e.g.
    "Student with ID 'abc' was not found".
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource.lower()} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(RegistrarError):
    """
    Raised when a write collides with a uniqueness constraint.

    Sources: duplicate student_code, duplicate course name. Raised by the
    document store itself, so the message is passed through unchanged.
    """

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        message: str = "The resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(RegistrarError):
    """
    Raised when the underlying store call fails (connectivity, timeout, bugs).

    Security Note:
        The message returned to the client is always generic. Driver errors
        and SQL are logged server-side only.
    """

    kind = ErrorKind.STORE_FAILURE

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
