"""Pydantic schemas for request and response validation."""
from book_store.schemas.book import (
    Book,
    BookCollection,
    BookCreate,
    BookStats,
    BookUpdate,
)
from book_store.schemas.common import (
    ErrorResponse,
    FieldError,
    MessageResponse,
    ValidationErrorResponse,
)

__all__ = [
    "Book",
    "BookCollection",
    "BookCreate",
    "BookStats",
    "BookUpdate",
    "ErrorResponse",
    "FieldError",
    "MessageResponse",
    "ValidationErrorResponse",
]
