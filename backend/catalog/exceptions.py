"""
Catalog API: Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the error scenarios of the service.
Why:   Each exception maps to one HTTP status, so services can raise without
       knowing about HTTP and the global handlers in main.py shape the response.
How:   Each exception class carries a message and optional context dict.
Who:   Raised by services and query construction; caught by global handlers.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError    → 400 Bad Request (malformed input, store rejected write)
    ├── NotFoundError      → 404 Not Found (conditional update/delete matched nothing)
    └── DatabaseError      → 500 Internal Server Error (unexpected store failure)
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """
    Base exception for all Catalog API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails validation or the store rejects a write.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "strike_price must look like '<sym> <low> <word> <sym> <high>'",
            "details": {"field": "strike_price"}
        }
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


class NotFoundError(CatalogError):
    """
    Raised when an update or delete targets an id with no matching record.

    HTTP:    404 Not Found

    Lookups by id (GET /products/search/{id}) do not raise this; they return
    null with 200.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CatalogError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error
    is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
