"""Common Pydantic schemas."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str
    error_code: Optional[str] = None


class FieldError(BaseModel):
    """A single failing field of a rejected request."""

    field: str
    message: str
    location: str
    value: Optional[Any] = None


class ValidationErrorResponse(ErrorResponse):
    """Itemized validation error response."""

    errors: list[FieldError] = []
