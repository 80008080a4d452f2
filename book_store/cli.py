"""
Book Store command line.

Usage:
    book-store serve                  # Run the HTTP service
    book-store init-db                # Create an empty db.json
    book-store stats                  # Print collection statistics
    book-store --help                 # Show help
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Colors:
    """ANSI color codes for terminal output."""
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'


def print_success(text: str):
    """Print success message."""
    print(f"{Colors.GREEN}✓ {text}{Colors.END}")


def print_error(text: str):
    """Print error message."""
    print(f"{Colors.RED}✗ {text}{Colors.END}", file=sys.stderr)


def print_warning(text: str):
    """Print warning message."""
    print(f"{Colors.YELLOW}⚠ {text}{Colors.END}")


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from book_store.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "book_store.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    from book_store.config import get_settings
    from book_store.storage import JsonFileRepository

    path = Path(args.db_file or get_settings().db_file)
    if path.exists():
        if not args.force:
            print_warning(f"{path} already exists (use --force to reset it)")
            return 1
        path.unlink()
    JsonFileRepository(path).ensure_snapshot()
    print_success(f"Created empty snapshot at {path}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    from book_store.config import get_settings
    from book_store.core.exceptions import StorageError
    from book_store.services.book_service import BookService
    from book_store.storage import JsonFileRepository

    settings = get_settings()
    service = BookService(
        JsonFileRepository(args.db_file or settings.db_file),
        top_authors_limit=settings.top_authors_limit,
    )
    try:
        stats = asyncio.run(service.get_stats())
    except StorageError as e:
        print_error(e.message)
        return 1
    print(json.dumps(stats.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="book-store",
        description="Book Store Service - CRUD and analytics over a JSON book collection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  book-store serve --port 8080                 # Serve on another port
  book-store init-db --db-file data/db.json    # Create a snapshot elsewhere
  book-store stats                             # Summarize db.json
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", help="Bind address (default: settings.host)")
    serve.add_argument("--port", type=int, help="Port (default: settings.port)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve.set_defaults(func=cmd_serve)

    init_db = subparsers.add_parser("init-db", help="Create an empty snapshot")
    init_db.add_argument("--db-file", help="Snapshot path (default: settings.db_file)")
    init_db.add_argument(
        "-f", "--force",
        action="store_true",
        help="Replace an existing snapshot",
    )
    init_db.set_defaults(func=cmd_init_db)

    stats = subparsers.add_parser("stats", help="Print collection statistics")
    stats.add_argument("--db-file", help="Snapshot path (default: settings.db_file)")
    stats.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    # Load environment variables
    load_dotenv()
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print_warning("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
