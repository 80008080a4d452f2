"""Book Store Service: CRUD and analytics over a JSON-file book collection."""

__version__ = "1.0.0"
