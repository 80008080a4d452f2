"""Business logic services."""
from book_store.services.book_service import BookService

__all__ = [
    "BookService",
]
