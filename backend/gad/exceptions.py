"""
GAD Backend — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the error scenarios of a CRUD backend.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages, without leaking SQL or stack
       traces to the client.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses.
Who:   Raised by services and repositories; caught by global handlers.

Exception Hierarchy:
    GadError (base)
    ├── ValidationError      → 400 Bad Request (malformed input, e.g. bad sort field)
    ├── BusinessRuleError    → 400 Bad Request (state rule, e.g. "already active")
    ├── NotFoundError        → 404 Not Found
    ├── ConflictError        → 409 Conflict (unique field already taken)
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class GadError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned only where the handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GadError):
    """
    Raised when client input fails a check that Pydantic cannot express.

    When:    Unknown sort field, malformed sort direction.
    HTTP:    400 Bad Request
    """

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


class BusinessRuleError(GadError):
    """
    Raised when a request is well-formed but violates a domain rule.

    When:    Activating an already active record, assigning an inactive role tag,
             deleting a role tag that users still reference.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Business rule violated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(GadError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; the service layer converts
    that None into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        lookup_field: str = "ID",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with {lookup_field} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(GadError):
    """
    Raised when a unique field is already used by another record.

    When:    Creating or updating a student/user with a taken email, CPF,
             SIAPE or enrollment number; a role tag with a taken code.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        field: str,
        value: Any = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["field"] = field
        super().__init__(
            message=message or f"{field} is already in use: {value}",
            context=ctx,
        )
        self.field = field


class DatabaseError(GadError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; details are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
