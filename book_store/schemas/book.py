"""Book Pydantic schemas."""
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from book_store.schemas.common import BaseSchema

MIN_PUBLISHED_YEAR = 1000
ISBN_PATTERN = re.compile(r"[0-9-]{10,17}")

# Same replacements, in the same order, as validator.js ``escape``
_ESCAPES = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ("/", "&#x2F;"),
    ("\\", "&#x5C;"),
    ("`", "&#96;"),
)


def escape_markup(value: str) -> str:
    """Replace markup-significant characters with HTML entities."""
    for char, entity in _ESCAPES:
        value = value.replace(char, entity)
    return value


def current_year() -> int:
    """Upper bound for ``publishedYear``; evaluated per request."""
    return datetime.now().year


class Book(BaseSchema):
    """A stored book record.

    Stored values skip the input rules (no year range check, no escaping) and
    unknown keys written by other tools are kept. The five fields themselves
    must be present and non-null.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    title: str
    author: str
    isbn: str
    published_year: int


class BookCollection(BaseSchema):
    """The whole persisted snapshot: ``{"books": [...]}``."""

    books: list[Book] = []

    def find_index(self, book_id: str) -> Optional[int]:
        """Position of the book with ``book_id``, or None."""
        for index, book in enumerate(self.books):
            if book.id == book_id:
                return index
        return None


class BookBase(BaseSchema):
    """Fields a client submits for a book, with their validation rules."""

    title: str
    author: str
    isbn: str
    published_year: int = Field(
        ..., description="Year of publication, 1000 to the current year"
    )

    @field_validator("title", "author")
    @classmethod
    def clean_text(cls, v: str) -> str:
        v = escape_markup(v.strip())
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("isbn")
    @classmethod
    def check_isbn(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        if not ISBN_PATTERN.fullmatch(v):
            raise ValueError("must be 10 to 17 characters of digits and hyphens")
        return v

    @field_validator("published_year")
    @classmethod
    def check_year(cls, v: int) -> int:
        upper = current_year()
        if not MIN_PUBLISHED_YEAR <= v <= upper:
            raise ValueError(f"must be between {MIN_PUBLISHED_YEAR} and {upper}")
        return v


class BookCreate(BookBase):
    """Schema for creating a book. The id is assigned by the server."""

    pass


class BookUpdate(BookBase):
    """Schema for updating a book; validated with the creation rules."""

    pass


class BookStats(BaseSchema):
    """Aggregate statistics over the whole collection."""

    total_books: int
    year_stats: dict[str, int]
    top_authors: list[tuple[str, int]]
    last_updated: datetime


def dump_book(book: Book) -> dict[str, Any]:
    """Wire/snapshot form of a book, camelCase keys and extras included."""
    return book.model_dump(by_alias=True)
