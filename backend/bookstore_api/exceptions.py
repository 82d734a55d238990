"""
Bookstore API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and an optional context dict.
       Exception handlers registered in main.py turn them into HTTP
       responses; the context is logged and never sent to the client.
Who:   Raised by the CRUD handler and repositories.

Exception Hierarchy:
    BookStoreError (base)
    ├── ValidationError            → 400 Bad Request
    ├── NotFoundError              → 404 Not Found (empty body)
    ├── StoreFailureError          → 500 Internal Server Error (generic body)
    ├── StoreError                 → raised by repository reads, wrapped by the handler
    └── MappingConfigurationError  → programming error, raised at startup
"""

from typing import Any, Dict, Optional

# The only message a client ever sees for a 500
GENERIC_ERROR_MESSAGE = "Something went wrong"


class BookStoreError(Exception):
    """
    Base exception for all Bookstore application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookStoreError):
    """
    Raised when client input fails validation.

    When:    Absent body, path id < 1, or path id / body id mismatch.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Path id 5 does not match body id 7",
            "details": {"path_id": 5, "body_id": 7}
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


class NotFoundError(BookStoreError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/<Entities>/{id} with an id absent from the store.
    HTTP:    404 Not Found, empty body.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreError(BookStoreError):
    """
    Raised by repository reads when the backend fails.

    Writes report failures through StoreResult instead; reads have no result
    type to carry them, so they raise. `kind` is a FailureKind value.
    """

    def __init__(
        self,
        message: str = "Store operation failed",
        kind: str = "unknown",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["kind"] = kind
        super().__init__(message=message, context=ctx)
        self.kind = kind


class StoreFailureError(BookStoreError):
    """
    Raised by the handler when a store operation failed or an unexpected
    exception escaped an operation.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always GENERIC_ERROR_MESSAGE.
        The failure kind, operation, entity id and underlying exception
        text live in `context` and are logged server-side only.
    """

    def __init__(
        self,
        kind: str = "unknown",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["kind"] = kind
        super().__init__(message=GENERIC_ERROR_MESSAGE, context=ctx)
        self.kind = kind


class MappingConfigurationError(BookStoreError):
    """
    Raised when a mapping rule references a field or nested rule that does
    not exist. Happens while the app is being built, never per request.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)
