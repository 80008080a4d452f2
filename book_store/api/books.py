"""Book API routes."""
from fastapi import APIRouter, Depends, Query, status

from book_store.dependencies import get_book_service
from book_store.schemas.book import Book, BookCreate, BookStats, BookUpdate
from book_store.schemas.common import (
    ErrorResponse,
    MessageResponse,
    ValidationErrorResponse,
)
from book_store.services.book_service import BookService

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={500: {"model": ErrorResponse}},
)

_INVALID = {400: {"model": ValidationErrorResponse}}
_NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("", response_model=list[Book])
async def list_books(
    service: BookService = Depends(get_book_service),
) -> list[Book]:
    """List all books."""
    return await service.list_books()


@router.post(
    "",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    responses=_INVALID,
)
async def create_book(
    book: BookCreate,
    service: BookService = Depends(get_book_service),
) -> Book:
    """Create a new book; the server assigns its id."""
    return await service.create_book(book)


@router.put("/{book_id}", response_model=Book, responses={**_INVALID, **_NOT_FOUND})
async def update_book(
    book_id: str,
    book: BookUpdate,
    service: BookService = Depends(get_book_service),
) -> Book:
    """Update an existing book, keeping fields that were not sent."""
    return await service.update_book(book_id, book)


@router.delete("/{book_id}", response_model=MessageResponse, responses=_NOT_FOUND)
async def delete_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> MessageResponse:
    """Delete a book by its id."""
    await service.delete_book(book_id)
    return MessageResponse(message="Book deleted successfully")


@router.get("/search", response_model=list[Book], responses=_INVALID)
async def search_books(
    query: str = Query(..., description="Text matched against title, author and isbn"),
    service: BookService = Depends(get_book_service),
) -> list[Book]:
    """Search books by title, author or isbn."""
    return await service.search_books(query)


@router.get("/recommendations", response_model=list[Book])
async def recommend_books(
    service: BookService = Depends(get_book_service),
) -> list[Book]:
    """Up to three random books."""
    return await service.recommend_books()


@router.get("/stats", response_model=BookStats)
async def get_stats(
    service: BookService = Depends(get_book_service),
) -> BookStats:
    """Collection statistics."""
    return await service.get_stats()


@router.get("/by-decade/{decade}", response_model=list[Book], responses=_INVALID)
async def books_by_decade(
    decade: str,
    service: BookService = Depends(get_book_service),
) -> list[Book]:
    """Books published in the ten years starting at ``decade``."""
    return await service.books_by_decade(decade)
