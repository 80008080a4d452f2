"""BookService tests without the HTTP layer."""
import asyncio
import itertools
import random

import pytest

from book_store.core.exceptions import NotFoundError, StorageError, ValidationError
from book_store.schemas.book import BookCreate, BookUpdate, escape_markup
from book_store.services.book_service import BookService, new_book_id, parse_leading_int
from book_store.storage import InMemoryRepository
from tests.conftest import LIBRARY

HYPERION = {
    "title": "Hyperion",
    "author": "Dan Simmons",
    "isbn": "978-0553283686",
    "publishedYear": 1989,
}


class SlowRepository(InMemoryRepository):
    """Yields to the event loop between reading and returning the snapshot."""

    async def load(self):
        snapshot = await super().load()
        await asyncio.sleep(0)
        return snapshot


def counting_ids():
    counter = itertools.count(100)
    return lambda: str(next(counter))


@pytest.fixture
def service(repo):
    return BookService(repo, id_factory=counting_ids(), rng=random.Random(7))


def test_new_book_id_is_millisecond_timestamp():
    book_id = new_book_id()
    assert book_id.isdigit()
    assert len(book_id) == 13


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1990", 1990),
        ("  1990", 1990),
        ("1990s", 1990),
        ("+2000", 2000),
        ("-5", -5),
        ("19.5", 19),
        ("abc", None),
        ("", None),
        ("9" * 5000, None),
    ],
)
def test_parse_leading_int(raw, expected):
    assert parse_leading_int(raw) == expected


def test_escape_markup():
    assert escape_markup(r"""<a href="/x">'&'\`</a>""") == (
        "&lt;a href=&quot;&#x2F;x&quot;&gt;&#x27;&amp;&#x27;&#x5C;&#96;&lt;&#x2F;a&gt;"
    )


@pytest.mark.asyncio
async def test_create_uses_id_factory(service, repo):
    created = await service.create_book(BookCreate(**HYPERION))
    assert created.id == "100"
    assert repo.records()[-1]["id"] == "100"


@pytest.mark.asyncio
async def test_update_missing_raises(service, repo):
    with pytest.raises(NotFoundError):
        await service.update_book("nope", BookUpdate(**HYPERION))
    assert repo.saves == 0


@pytest.mark.asyncio
async def test_delete_missing_raises(service, repo):
    with pytest.raises(NotFoundError):
        await service.delete_book("nope")
    assert repo.saves == 0


@pytest.mark.asyncio
async def test_search_isbn_is_case_sensitive():
    repo = InMemoryRepository.from_records([{**LIBRARY[0], "isbn": "12345-6789X"}])
    service = BookService(repo)
    assert len(await service.search_books("6789X")) == 1
    assert await service.search_books("6789x") == []


@pytest.mark.asyncio
async def test_recommendations_respect_count(repo):
    service = BookService(repo, recommendation_count=5)
    picks = await service.recommend_books()
    assert len(picks) == 5
    assert len({b.id for b in picks}) == 5


@pytest.mark.asyncio
async def test_recommendations_vary(repo):
    service = BookService(repo, rng=random.Random(1))
    seen = {tuple(b.id for b in await service.recommend_books()) for _ in range(20)}
    assert len(seen) > 1


@pytest.mark.asyncio
async def test_stats_ties_keep_encounter_order():
    repo = InMemoryRepository.from_records([
        {**LIBRARY[0], "id": "a", "author": "B"},
        {**LIBRARY[0], "id": "b", "author": "A"},
        {**LIBRARY[0], "id": "c", "author": "A"},
        {**LIBRARY[0], "id": "d", "author": "B"},
        {**LIBRARY[0], "id": "e", "author": "C"},
    ])
    stats = await BookService(repo, top_authors_limit=2).get_stats()
    assert stats.top_authors == [("B", 2), ("A", 2)]
    assert stats.year_stats == {"1965": 5}
    assert stats.last_updated.tzinfo is not None


@pytest.mark.asyncio
async def test_by_decade_invalid_does_not_read():
    class NoReads(InMemoryRepository):
        async def load(self):
            raise AssertionError("snapshot should not be read")

    service = BookService(NoReads())
    with pytest.raises(ValidationError) as excinfo:
        await service.books_by_decade("nineties")
    assert excinfo.value.errors[0]["value"] == "nineties"


@pytest.mark.asyncio
async def test_storage_error_is_reworded():
    class Broken(InMemoryRepository):
        async def load(self):
            raise StorageError("Cannot read snapshot: permission denied")

    with pytest.raises(StorageError) as excinfo:
        await BookService(Broken()).get_stats()
    assert excinfo.value.message == "Error fetching statistics"
    assert "permission denied" in str(excinfo.value.__cause__)


@pytest.mark.asyncio
async def test_concurrent_creates_race_without_lock():
    repo = SlowRepository()
    service = BookService(repo, id_factory=counting_ids())
    await asyncio.gather(*(service.create_book(BookCreate(**HYPERION)) for _ in range(5)))
    # Every create read the same empty snapshot; the last write wins
    assert len(repo.records()) < 5


@pytest.mark.asyncio
async def test_concurrent_creates_with_lock():
    repo = SlowRepository()
    service = BookService(repo, lock=asyncio.Lock(), id_factory=counting_ids())
    await asyncio.gather(*(service.create_book(BookCreate(**HYPERION)) for _ in range(5)))
    assert len(repo.records()) == 5
