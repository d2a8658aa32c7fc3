"""
Converters between domain entities/value objects and API schemas.

This module centralizes all conversion logic between the domain layer
and the API layer, maintaining clean separation of concerns.
"""

from dataclasses import asdict

from bookstore.domain import entities as domain
from bookstore.domain import value_objects as domain_vo
from bookstore.api.v1 import schemas as api


def domain_book_to_api(book: domain.Book) -> api.Book:
    """
    Convert a domain Book entity to an API Book model.

    Args:
        book: Domain Book entity (must be persisted)

    Returns:
        API Book model
    """
    return api.Book(**asdict(book))


def domain_page_to_api(page: domain_vo.Page[domain.Book]) -> api.BookPage:
    """
    Convert a domain Page of books to an API BookPage model.

    Args:
        page: Domain Page value object

    Returns:
        API BookPage model
    """
    return api.BookPage(
        content=[domain_book_to_api(book) for book in page.items],
        total_elements=page.total_elements,
        total_pages=page.total_pages,
        page_number=page.page,
        page_size=page.size,
        number_of_elements=page.number_of_elements,
        first=page.is_first,
        last=page.is_last,
        empty=page.is_empty,
    )


def api_request_to_domain(request: api.BookRequest) -> domain_vo.BookData:
    """
    Convert a validated create/update request to a domain BookData value object.

    Optional short text fields are stripped, and blank ones become None
    so that empty ISBNs never collide.

    Args:
        request: API request model that passed validate_book_request()

    Returns:
        Domain BookData value object
    """
    def text(value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    return domain_vo.BookData(
        title=request.title,
        author=request.author,
        price=request.price,
        isbn=text(request.isbn),
        description=request.description,
        category=text(request.category),
        publisher=text(request.publisher),
        publication_date=request.publication_date,
        pages=request.pages,
        stock_quantity=request.stock_quantity,
        image_url=text(request.image_url),
    )


def domain_stats_to_api(stats: domain_vo.InventoryStats) -> api.BookStats:
    """
    Convert domain InventoryStats to the API BookStats model.

    Percentages are formatted like "62.50%" and omitted for an empty catalog.
    """
    in_stock = stats.in_stock_percentage()
    out_of_stock = stats.out_of_stock_percentage()
    return api.BookStats(
        total_books=stats.total_books,
        books_in_stock=stats.books_in_stock,
        books_out_of_stock=stats.books_out_of_stock,
        in_stock_percentage=f"{in_stock:.2f}%" if in_stock is not None else None,
        out_of_stock_percentage=f"{out_of_stock:.2f}%" if out_of_stock is not None else None,
    )
