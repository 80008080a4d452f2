"""FastAPI dependency providers."""
import asyncio
from functools import lru_cache

from fastapi import Depends

from book_store.config import get_settings
from book_store.services.book_service import BookService
from book_store.storage import BookRepository, JsonFileRepository


@lru_cache
def get_repository() -> BookRepository:
    """
    Dependency provider for the snapshot repository.
    """
    return JsonFileRepository(get_settings().db_file)


@lru_cache
def get_write_lock() -> asyncio.Lock | None:
    """
    Process-wide lock, only when ``serialize_writes`` is enabled.
    """
    return asyncio.Lock() if get_settings().serialize_writes else None


def get_book_service(
    repo: BookRepository = Depends(get_repository),
) -> BookService:
    """
    Dependency provider for BookService.
    """
    settings = get_settings()
    return BookService(
        repo,
        lock=get_write_lock(),
        recommendation_count=settings.recommendation_count,
        top_authors_limit=settings.top_authors_limit,
    )
