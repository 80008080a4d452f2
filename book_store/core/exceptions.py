"""Custom exceptions for the application.

Every exception carries the HTTP status it maps to; the handlers in
``book_store.main`` turn them into JSON responses at the request boundary.
"""
from typing import Any, Optional


class AppException(Exception):
    """Base application exception."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found errors."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} not found",
            error_code="NOT_FOUND",
            details={"resource": resource, "id": resource_id},
        )


class ValidationError(AppException):
    """Validation errors.

    ``errors`` holds one entry per failing field, in the same shape the
    request-validation handler produces.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        super().__init__(
            message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )
        self.errors = errors or []


class StorageError(AppException):
    """Snapshot read/write errors.

    The message is what the client sees; the underlying cause is chained and
    logged, never returned.
    """

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message,
            error_code="STORAGE_ERROR",
            details={"path": path} if path else {},
        )
