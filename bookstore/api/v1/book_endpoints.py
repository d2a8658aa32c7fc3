"""
API endpoints for the book catalog.

This module defines the FastAPI routes for creating, reading, updating,
deleting and searching books. It handles HTTP concerns (validation, status
codes, paging headers) and delegates business rules to the BookService.
Errors propagate to the handlers in ``bookstore.api.errors``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from bookstore.domain.exceptions import BookNotFoundError, ValidationError
from bookstore.domain.ports import MetricsRecorder
from bookstore.domain.services import BookService
from bookstore.domain.value_objects import BookData, Page, PageRequest
from bookstore.api.v1 import schemas as api
from bookstore.api.v1.converters import (
    api_request_to_domain,
    domain_book_to_api,
    domain_page_to_api,
)
from bookstore.api.v1.dependencies import get_book_service, get_metrics, get_page_request
from bookstore.api.v1.validation import MAX_SQL_INTEGER, validate_book_request

router = APIRouter(prefix="/books", tags=["books"])


def _page_response(response: Response, page: Page) -> api.BookPage:
    response.headers["X-Total-Count"] = str(page.total_elements)
    response.headers["X-Page-Count"] = str(page.total_pages)
    return domain_page_to_api(page)


def _validated(request: api.BookRequest) -> BookData:
    errors = validate_book_request(request)
    if errors:
        raise ValidationError([str(error) for error in errors])
    return api_request_to_domain(request)


@router.get("", response_model=api.BookPage)
def list_books(
    response: Response,
    page_request: PageRequest = Depends(get_page_request),
    service: BookService = Depends(get_book_service),
) -> api.BookPage:
    """
    List the catalog one page at a time.

    Query params:
        page: Zero-based page index (default 0)
        size: Page size, 1..100 (default 10)
        sort: ``field`` or ``field,asc|desc``, repeatable (default: title)
    """
    return _page_response(response, service.get_all(page_request))


@router.get("/search", response_model=api.BookPage)
def search_books(
    response: Response,
    title: Optional[str] = Query(default=None, description="Title contains (case-insensitive)"),
    author: Optional[str] = Query(default=None, description="Author contains (case-insensitive)"),
    category: Optional[str] = Query(default=None, description="Category contains (case-insensitive)"),
    q: Optional[str] = Query(
        default=None,
        description="Keyword matched against title OR author; used only without other filters",
    ),
    page_request: PageRequest = Depends(get_page_request),
    service: BookService = Depends(get_book_service),
    metrics: MetricsRecorder = Depends(get_metrics),
) -> api.BookPage:
    """
    Search books by title, author or category.

    Only one filter is applied, in this order of precedence: title and
    author together, title, author, category. Without any of them the
    ``q`` keyword is matched against title or author; with nothing at all
    the whole catalog is returned.
    """
    with metrics.track("searched"):
        if any(value and value.strip() for value in (title, author, category)):
            page = service.search(title, author, category, page_request)
        else:
            page = service.keyword_search(q, page_request)

    return _page_response(response, page)


@router.get("/in-stock", response_model=api.BookPage)
def list_books_in_stock(
    response: Response,
    page_request: PageRequest = Depends(get_page_request),
    service: BookService = Depends(get_book_service),
) -> api.BookPage:
    """List books with at least one unit in stock."""
    return _page_response(response, service.get_in_stock(page_request))


@router.get("/isbn/{isbn}", response_model=api.Book)
def get_book_by_isbn(
    isbn: str,
    service: BookService = Depends(get_book_service),
    metrics: MetricsRecorder = Depends(get_metrics),
) -> api.Book:
    """
    Get a book by its ISBN (exact match).

    Raises:
        404: Book not found
    """
    with metrics.track("viewed"):
        book = service.get_by_isbn(isbn)
        if book is None:
            raise BookNotFoundError(isbn, field="ISBN")

    return domain_book_to_api(book)


@router.get("/{book_id}", response_model=api.Book)
def get_book_by_id(
    book_id: int = Path(ge=1, le=MAX_SQL_INTEGER),
    service: BookService = Depends(get_book_service),
    metrics: MetricsRecorder = Depends(get_metrics),
) -> api.Book:
    """
    Get a book by its unique identifier.

    Args:
        book_id: ID of the book to retrieve

    Returns:
        Book details

    Raises:
        404: Book not found
    """
    with metrics.track("viewed"):
        book = service.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(book_id)

    return domain_book_to_api(book)


@router.post("", response_model=api.Book, status_code=status.HTTP_201_CREATED)
def create_book(
    request: api.BookCreateRequest,
    service: BookService = Depends(get_book_service),
    metrics: MetricsRecorder = Depends(get_metrics),
) -> api.Book:
    """
    Add a book to the catalog.

    Raises:
        400: Validation failed, malformed body, or ISBN already exists
    """
    data = _validated(request)

    with metrics.track("created"):
        book = service.create(data)

    return domain_book_to_api(book)


@router.put("/{book_id}", response_model=api.Book)
def update_book(
    request: api.BookUpdateRequest,
    book_id: int = Path(ge=1, le=MAX_SQL_INTEGER),
    service: BookService = Depends(get_book_service),
    metrics: MetricsRecorder = Depends(get_metrics),
) -> api.Book:
    """
    Replace every mutable field of a book.

    Fields missing from the body are cleared (stock falls back to 0).

    Raises:
        400: Validation failed, malformed body, or ISBN held by another book
        404: Book not found
    """
    data = _validated(request)

    with metrics.track("updated"):
        book = service.update(book_id, data)

    return domain_book_to_api(book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_book(
    book_id: int = Path(ge=1, le=MAX_SQL_INTEGER),
    service: BookService = Depends(get_book_service),
    metrics: MetricsRecorder = Depends(get_metrics),
) -> Response:
    """
    Delete a book.

    Raises:
        404: Book not found
    """
    with metrics.track("deleted"):
        service.delete(book_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
