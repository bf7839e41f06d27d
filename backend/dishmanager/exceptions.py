"""
DishManager Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the failure cases of the dish API.
Why:   Services raise typed errors; global handlers in main.py turn them into
       the uniform `{success: false, message, error?}` envelope with the
       right HTTP status code.
Who:   Raised by DishService and route helpers; caught by global handlers.

Exception Hierarchy:
    DishManagerError (base)
    ├── ValidationError   → 400 Bad Request (missing / duplicate / empty fields)
    ├── NotFoundError     → 404 Not Found   (unknown dishId)
    └── StoreError        → 500 Internal Server Error (persistence failure)

None of these are retried by the API. A mutation that raises never publishes
a broadcast event.
"""

from typing import Any, Dict, Optional


class DishManagerError(Exception):
    """
    Base exception for all DishManager application errors.

    Attributes:
        message:  User-facing error description (returned in the envelope)
        context:  Additional debug info (logged, NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DishManagerError):
    """
    Raised when client input fails validation.

    When:    Required fields missing or blank, duplicate dishId, malformed body.
    HTTP:    400 Bad Request
    """

    status_code = 400

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


class NotFoundError(DishManagerError):
    """
    Raised when a requested resource does not exist.

    When:    PUT/DELETE/toggle on a dishId that is not in the store.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Dish",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource.lower()} was not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class StoreError(DishManagerError):
    """
    Raised when a store operation fails unexpectedly.

    When:    Connection lost, constraint violation not covered by validation, etc.
    HTTP:    500 Internal Server Error

    The message names the operation ("Error creating dish"); `error` carries
    the underlying error text and is passed through in the envelope.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A store error occurred",
        error: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.error = error
