"""Snapshot storage for the book collection.

The whole collection is one document, ``{"books": [...]}``. Repositories only
load and save that document as a unit; all record-level logic lives in the
service.
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from book_store.core.exceptions import StorageError
from book_store.core.logging import get_logger
from book_store.schemas.book import BookCollection, dump_book

logger = get_logger("storage")


class BookRepository(Protocol):
    """
    Repository interface for the persisted snapshot.
    """
    async def load(self) -> BookCollection:
        ...
    async def save(self, collection: BookCollection) -> None:
        ...


def serialize(collection: BookCollection) -> str:
    """Render the snapshot the way it is written to disk."""
    document = {"books": [dump_book(book) for book in collection.books]}
    return json.dumps(document, indent=2, ensure_ascii=False)


class JsonFileRepository:
    """
    Snapshot stored as a single JSON file on the local filesystem.
    """
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def ensure_snapshot(self) -> bool:
        """Create an empty snapshot if none exists. Returns True if created."""
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(serialize(BookCollection()), encoding="utf-8")
        logger.info(f"Created empty snapshot at {self.path}")
        return True

    async def load(self) -> BookCollection:
        return await asyncio.to_thread(self._read)

    async def save(self, collection: BookCollection) -> None:
        await asyncio.to_thread(self._write, serialize(collection))

    def _read(self) -> BookCollection:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read snapshot: {e}", path=str(self.path)) from e
        except UnicodeDecodeError as e:
            raise StorageError(f"Snapshot is not UTF-8: {e}", path=str(self.path)) from e
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Snapshot is not valid JSON: {e}", path=str(self.path)) from e
        except RecursionError as e:
            raise StorageError("Snapshot is nested too deeply", path=str(self.path)) from e
        if not isinstance(document, dict) or not isinstance(document.get("books"), list):
            raise StorageError("Snapshot must be an object with a 'books' array", path=str(self.path))
        try:
            return BookCollection.model_validate(document)
        except PydanticValidationError as e:
            raise StorageError(f"Snapshot holds malformed records: {e}", path=str(self.path)) from e

    def _write(self, payload: str) -> None:
        # Write beside the snapshot, then rename over it
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"Cannot write snapshot: {e}", path=str(self.path)) from e


class InMemoryRepository:
    """
    In-process snapshot. Each load hands out an independent copy, the same
    way re-reading a file would.
    """
    def __init__(self, collection: BookCollection | None = None):
        self._collection = (collection or BookCollection()).model_copy(deep=True)
        self.saves = 0

    @classmethod
    def from_records(cls, records: list[dict]) -> "InMemoryRepository":
        return cls(BookCollection.model_validate({"books": records}))

    async def load(self) -> BookCollection:
        return self._collection.model_copy(deep=True)

    async def save(self, collection: BookCollection) -> None:
        self._collection = collection.model_copy(deep=True)
        self.saves += 1

    def records(self) -> list[dict]:
        """Current snapshot in its wire form."""
        return [dump_book(book) for book in self._collection.books]
