"""Book service: CRUD and aggregations over the snapshot."""
import asyncio
import random
import re
import time
from collections import Counter
from contextlib import asynccontextmanager, nullcontext
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional

from book_store.core.exceptions import NotFoundError, StorageError, ValidationError
from book_store.core.logging import get_logger
from book_store.schemas.book import (
    MIN_PUBLISHED_YEAR,
    Book,
    BookCreate,
    BookStats,
    BookUpdate,
    current_year,
)
from book_store.storage import BookRepository

logger = get_logger("services.books")

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def new_book_id() -> str:
    """Current epoch time in milliseconds, as a string."""
    return str(time.time_ns() // 1_000_000)


def parse_leading_int(raw: str) -> Optional[int]:
    """Parse the integer prefix of ``raw``; trailing characters are ignored.

    ``"1990s"`` gives 1990, ``"abc"`` gives None. A prefix too long for
    ``int`` also gives None; it is far outside any year range anyway.
    """
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


class BookService:
    """
    Service for book business logic.

    Every operation loads the full snapshot and, if it mutates, saves the full
    snapshot back. Without ``lock`` concurrent mutations race and the last
    writer wins.
    """
    def __init__(
        self,
        repo: BookRepository,
        *,
        lock: Optional[asyncio.Lock] = None,
        id_factory: Callable[[], str] = new_book_id,
        rng: Optional[random.Random] = None,
        recommendation_count: int = 3,
        top_authors_limit: int = 5,
    ):
        self._repo = repo
        self._lock = lock
        self._id_factory = id_factory
        self._rng = rng or random.Random()
        self._recommendation_count = recommendation_count
        self._top_authors_limit = top_authors_limit

    @asynccontextmanager
    async def _operation(self, failure_message: str) -> AsyncIterator[None]:
        """Run one operation, reporting storage failures as ``failure_message``."""
        async with self._lock if self._lock is not None else nullcontext():
            try:
                yield
            except StorageError as e:
                logger.error(f"{failure_message}: {e.message}")
                raise StorageError(failure_message) from e

    async def list_books(self) -> list[Book]:
        """
        List all books in snapshot order.
        """
        async with self._operation("Error reading books"):
            collection = await self._repo.load()
        logger.debug(f"Listed {len(collection.books)} books")
        return collection.books

    async def create_book(self, book: BookCreate) -> Book:
        """
        Append a new book with a timestamp id. Ids are not checked for collisions.
        """
        async with self._operation("Error creating book"):
            collection = await self._repo.load()
            created = Book(id=self._id_factory(), **book.model_dump())
            collection.books.append(created)
            await self._repo.save(collection)
        logger.info(f"Created book {created.id}: {created.title!r}")
        return created

    async def update_book(self, book_id: str, book: BookUpdate) -> Book:
        """
        Merge the submitted fields over an existing book. The id never changes.
        """
        async with self._operation("Error updating book"):
            collection = await self._repo.load()
            index = collection.find_index(book_id)
            if index is None:
                raise NotFoundError("Book", book_id)
            changes = book.model_dump(exclude_unset=True)
            updated = collection.books[index].model_copy(update=changes)
            collection.books[index] = updated
            await self._repo.save(collection)
        logger.info(f"Updated book {book_id}")
        return updated

    async def delete_book(self, book_id: str) -> None:
        """
        Remove a book by id.
        """
        async with self._operation("Error deleting book"):
            collection = await self._repo.load()
            index = collection.find_index(book_id)
            if index is None:
                raise NotFoundError("Book", book_id)
            del collection.books[index]
            await self._repo.save(collection)
        logger.info(f"Deleted book {book_id}")

    async def search_books(self, query: str) -> list[Book]:
        """
        Case-insensitive match on title or author; exact-case match on isbn.
        """
        needle = query.lower()
        async with self._operation("Error searching books"):
            collection = await self._repo.load()
        return [
            b for b in collection.books
            if needle in b.title.lower()
            or needle in b.author.lower()
            or query in b.isbn
        ]

    async def recommend_books(self) -> list[Book]:
        """
        Pick up to ``recommendation_count`` distinct books at random.
        """
        async with self._operation("Error fetching recommendations"):
            collection = await self._repo.load()
        count = min(self._recommendation_count, len(collection.books))
        return self._rng.sample(collection.books, count)

    async def get_stats(self) -> BookStats:
        """
        Total count, books per year and the most prolific authors.

        Authors with equal counts keep the order in which they first appear.
        """
        async with self._operation("Error fetching statistics"):
            collection = await self._repo.load()
        books = collection.books
        per_year = Counter(b.published_year for b in books)
        per_author = Counter(b.author for b in books)
        return BookStats(
            total_books=len(books),
            year_stats={str(year): n for year, n in sorted(per_year.items())},
            top_authors=per_author.most_common(self._top_authors_limit),
            last_updated=datetime.now(timezone.utc),
        )

    async def books_by_decade(self, decade: str) -> list[Book]:
        """
        Books published in ``[decade, decade + 10)``.

        ``decade`` is the raw path segment; it must start with an integer in
        ``[1000, current year]``.
        """
        start = parse_leading_int(decade)
        if start is None or not MIN_PUBLISHED_YEAR <= start <= current_year():
            raise ValidationError(
                "Invalid decade",
                field="decade",
                errors=[{
                    "field": "decade",
                    "message": "Invalid decade",
                    "location": "path",
                    "value": decade,
                }],
            )
        async with self._operation("Error fetching books by decade"):
            collection = await self._repo.load()
        return [b for b in collection.books if start <= b.published_year < start + 10]
