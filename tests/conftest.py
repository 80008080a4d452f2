"""Shared fixtures: an in-memory snapshot wired into the app."""
import copy

import pytest
from httpx import ASGITransport, AsyncClient

from book_store.dependencies import get_repository
from book_store.main import app
from book_store.storage import InMemoryRepository

LIBRARY = [
    {"id": "1", "title": "Dune", "author": "Frank Herbert",
     "isbn": "9780441013593", "publishedYear": 1965},
    {"id": "2", "title": "Dune Messiah", "author": "Frank Herbert",
     "isbn": "9780593098233", "publishedYear": 1969},
    {"id": "3", "title": "Nineteen Eighty-Four", "author": "George Orwell",
     "isbn": "978-0451524935", "publishedYear": 1949},
    {"id": "4", "title": "Neuromancer", "author": "William Gibson",
     "isbn": "978-0-441-56959-5", "publishedYear": 1984},
    {"id": "5", "title": "The Left Hand of Darkness", "author": "Ursula K. Le Guin",
     "isbn": "9780441478125", "publishedYear": 1969},
    {"id": "6", "title": "Snow Crash", "author": "Neal Stephenson",
     "isbn": "9780553380958", "publishedYear": 1992},
    {"id": "7", "title": "Cryptonomicon", "author": "Neal Stephenson",
     "isbn": "978-0060512804", "publishedYear": 1999},
]


@pytest.fixture
def records():
    """Initial snapshot contents; parametrize ``records`` to change it."""
    return copy.deepcopy(LIBRARY)


@pytest.fixture
def repo(records):
    return InMemoryRepository.from_records(records)


@pytest.fixture
async def client(repo):
    """Create test client backed by ``repo``."""
    app.dependency_overrides[get_repository] = lambda: repo
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
