"""API routes."""
from fastapi import APIRouter

from book_store.api.books import router as books_router

# Create main API router
api_router = APIRouter(prefix="/api")

api_router.include_router(books_router)

__all__ = ["api_router"]
