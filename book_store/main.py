"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from book_store import __version__
from book_store.api import api_router
from book_store.config import Settings, get_settings
from book_store.core.exceptions import AppException, ValidationError
from book_store.core.logging import get_logger, setup_logging
from book_store.core.middleware import RequestLoggingMiddleware
from book_store.storage import JsonFileRepository

logger = get_logger("main")


def field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten FastAPI validation errors into one entry per failing field."""
    items = []
    for error in exc.errors():
        location, *path = error["loc"]
        items.append({
            "field": ".".join(str(part) for part in path) or str(location),
            "message": error["msg"].removeprefix("Value error, "),
            "location": str(location),
            "value": None if error["type"] == "missing" else error.get("input"),
        })
    return items


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup and shutdown."""
        # Startup
        logger.info(f"Starting {settings.app_name} with snapshot {settings.db_file}")
        if settings.create_if_missing:
            JsonFileRepository(settings.db_file).ensure_snapshot()
        if settings.serialize_writes:
            logger.warning("serialize_writes is on: operations are serialized per process")
        yield
        # Shutdown
        logger.info(f"Stopping {settings.app_name}")

    app = FastAPI(
        title=settings.app_name,
        description="CRUD and analytics over a JSON-file book collection",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle validation raised by the service layer."""
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder({
                "detail": exc.message,
                "error_code": exc.error_code,
                "errors": exc.errors,
            }),
        )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle application exceptions."""
        # Server-side failures expose only the generic message
        if exc.status_code >= 500:
            content = {"detail": exc.message, "error_code": exc.error_code}
        else:
            content = {
                "detail": exc.message,
                "error_code": exc.error_code,
                "details": exc.details,
            }
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Report malformed input as 400 with one entry per failing field."""
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder({
                "detail": "Validation failed",
                "error_code": "VALIDATION_ERROR",
                "errors": field_errors(exc),
            }),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={
                    "detail": str(exc),
                    "type": type(exc).__name__,
                },
            )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Include API router
    app.include_router(api_router)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "book_store.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
