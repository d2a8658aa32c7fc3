"""
Main application entry point.

``create_app()`` wires settings, the SQLite repository, metrics and the
user store onto a new FastAPI application. Run with::

    python -m bookstore.main
"""

import logging
from typing import Optional

from fastapi import FastAPI

from bookstore.config import Settings, get_settings
from bookstore.domain.ports import BookRepository
from bookstore.infrastructure.db import SqliteBookRepository
from bookstore.api.actuator_endpoints import router as actuator_router
from bookstore.api.errors import register_exception_handlers
from bookstore.api.metrics import BookMetrics, MetricsMiddleware
from bookstore.api.security import SecurityHeadersMiddleware, UserStore, add_cors
from bookstore.api.v1.book_endpoints import router as book_router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[BookRepository] = None,
    metrics: Optional[BookMetrics] = None,
) -> FastAPI:
    """
    Build the bookstore API.

    Args:
        settings: Settings to use (default: loaded from the environment)
        repository: Book repository (default: SQLite at settings.db_path)
        metrics: Metrics sink (default: a fresh registry)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    metrics = metrics or BookMetrics()

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.book_repository = repository or SqliteBookRepository(settings.db_path)
    app.state.metrics = metrics
    app.state.user_store = UserStore.from_settings(settings)

    # Added innermost first: CORS wraps security headers, which wrap metrics.
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)
    add_cors(app, settings)

    register_exception_handlers(app)

    app.include_router(book_router, prefix="/api/v1")
    app.include_router(actuator_router)

    @app.get("/", include_in_schema=False)
    def read_root():
        """Root endpoint."""
        return {
            "message": f"Welcome to the {settings.api_title}",
            "docs": "/docs",
            "health": "/actuator/health",
        }

    logger.info(f"{settings.api_title} {settings.api_version} ready")
    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "bookstore.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
