"""
FastAPI dependencies for dependency injection.

The repository, metrics and settings are built once per application by
create_app() and attached to ``app.state``; these providers read them back
for FastAPI's Depends() system. Nothing here is process-global, so several
applications (e.g., one per test) can coexist.

The BookService is cheap and stateless, so one is built per request.
"""

from typing import List

from fastapi import Depends, Query, Request

from bookstore.config import Settings
from bookstore.domain.exceptions import ValidationError
from bookstore.domain.ports import BookRepository, MetricsRecorder
from bookstore.domain.services import BookService
from bookstore.domain.value_objects import PageRequest
from bookstore.api.v1.validation import parse_sort, validate_paging


def get_settings(request: Request) -> Settings:
    """Provide the settings the application was created with."""
    return request.app.state.settings


def get_book_repository(request: Request) -> BookRepository:
    """Provide the application's book repository."""
    return request.app.state.book_repository


def get_metrics(request: Request) -> MetricsRecorder:
    """Provide the application's metrics recorder."""
    return request.app.state.metrics


def get_book_service(
    repository: BookRepository = Depends(get_book_repository),
) -> BookService:
    """Provide a Book Service wired to the application's repository."""
    return BookService(repository)


def get_page_request(
    page: int = Query(default=0, description="Zero-based page index"),
    size: int | None = Query(default=None, description="Page size (default 10, max 100)"),
    sort: List[str] = Query(
        default=[],
        description="Sort order as 'field' or 'field,asc|desc'; repeatable (default: title)",
    ),
    settings: Settings = Depends(get_settings),
) -> PageRequest:
    """
    Build a PageRequest from the paging query parameters.

    Raises:
        ValidationError: If page, size or sort are out of range or unknown
    """
    if size is None:
        size = settings.default_page_size

    errors = validate_paging(page, size, settings.max_page_size)
    orders, sort_errors = parse_sort(sort)
    errors.extend(sort_errors)
    if errors:
        raise ValidationError([str(error) for error in errors])

    return PageRequest(page=page, size=size, sort=orders)
