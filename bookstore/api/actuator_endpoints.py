"""
Operational endpoints under ``/actuator``.

health and info are public. prometheus needs the ADMIN or MONITOR role and
bookstats needs ADMIN; both use HTTP basic auth (see ``security.py``).
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from bookstore.config import Settings
from bookstore.domain.ports import BookRepository
from bookstore.domain.services import BookService
from bookstore.api.metrics import BookMetrics
from bookstore.api.security import ROLE_ADMIN, ROLE_MONITOR, User, require_roles
from bookstore.api.v1 import schemas as api
from bookstore.api.v1.converters import domain_stats_to_api
from bookstore.api.v1.dependencies import get_book_repository, get_book_service, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actuator", tags=["actuator"])


def _get_book_metrics(request: Request) -> BookMetrics:
    return request.app.state.metrics


@router.get("/health")
def health(repository: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    """
    Report service health with a database component.

    Returns 200 with status UP, or 503 with status DOWN when the catalog
    cannot be queried.
    """
    try:
        total = repository.count()
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "DOWN",
                "components": {"db": {"status": "DOWN", "details": {"error": str(e)}}},
            },
        )

    return JSONResponse(
        content={
            "status": "UP",
            "components": {"db": {"status": "UP", "details": {"books": total}}},
        }
    )


@router.get("/info")
def info(settings: Settings = Depends(get_settings)) -> dict:
    """Application name, version and description."""
    return {
        "app": {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": settings.api_description,
        }
    }


@router.get("/prometheus")
def prometheus(
    metrics: BookMetrics = Depends(_get_book_metrics),
    user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MONITOR)),
) -> Response:
    """Prometheus text exposition of the application's metrics."""
    return metrics.render()


@router.get("/bookstats", response_model=api.BookStats, response_model_exclude_none=True)
def bookstats(
    service: BookService = Depends(get_book_service),
    metrics: BookMetrics = Depends(_get_book_metrics),
    user: User = Depends(require_roles(ROLE_ADMIN)),
) -> api.BookStats:
    """
    Stock summary of the catalog.

    Also refreshes the ``bookstore_books_total`` gauge.
    """
    stats = service.get_inventory_stats()
    metrics.update_total_books(stats.total_books)
    return domain_stats_to_api(stats)
