"""
Request and response contracts for the books API.

JSON uses camelCase keys (``stockQuantity``, ``publicationDate``); the
request models also accept snake_case. Request models only check JSON
types; range and length rules live in ``validation.py``.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# request bodies of POST / and PUT /{id}

class BookRequest(CamelModel):
    """
    Fields a client may set on a book.

    Unknown keys, including ``id``, ``createdAt`` and ``updatedAt``, are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, description="Book title (required, max 255)")
    author: str | None = Field(default=None, description="Author name (required, max 255)")
    price: Decimal | None = Field(default=None, description="Unit price (required, > 0)")
    isbn: str | None = Field(default=None, description="ISBN, unique (max 20)")
    description: str | None = Field(default=None, description="Book description/summary")
    category: str | None = Field(default=None, description="Category/genre (max 100)")
    publisher: str | None = Field(default=None, description="Publisher name (max 255)")
    publication_date: date | None = Field(default=None, description="Publication date (yyyy-MM-dd)")
    pages: int | None = Field(default=None, description="Number of pages (>= 1)")
    stock_quantity: int | None = Field(default=None, description="Units in stock (>= 0, default 0)")
    image_url: str | None = Field(default=None, description="Cover image URL (max 500)")


class BookCreateRequest(BookRequest):
    """
    Request body for POST /api/v1/books.
    """


class BookUpdateRequest(BookRequest):
    """
    Request body for PUT /api/v1/books/{id}.

    Full replacement: fields left out are cleared on the stored book.
    """


# response bodies

class Book(CamelModel):
    """
    API representation of a Book entity.

    Maps from the domain Book entity for API responses.
    """

    id: int = Field(description="Unique identifier for this book in our system")
    title: str = Field(description="Book title")
    author: str = Field(description="Author name")
    price: Decimal = Field(description="Unit price")
    isbn: str | None = Field(default=None, description="International Standard Book Number")
    description: str | None = Field(default=None, description="Book description/summary")
    category: str | None = Field(default=None, description="Category/genre")
    publisher: str | None = Field(default=None, description="Publisher name")
    publication_date: date | None = Field(default=None, description="Publication date")
    pages: int | None = Field(default=None, description="Number of pages")
    stock_quantity: int = Field(default=0, description="Units in stock")
    image_url: str | None = Field(default=None, description="Cover image URL")
    created_at: datetime = Field(description="When this book was added to our catalog")
    updated_at: datetime = Field(description="When this book was last updated")

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class BookPage(CamelModel):
    """
    One page of books plus paging metadata.
    """
    content: list[Book] = Field(description="Books on this page")
    total_elements: int = Field(description="Matching books across all pages")
    total_pages: int = Field(description="Number of pages")
    page_number: int = Field(description="Zero-based index of this page")
    page_size: int = Field(description="Requested page size")
    number_of_elements: int = Field(description="Books on this page")
    first: bool = Field(description="Whether this is the first page")
    last: bool = Field(description="Whether this is the last page")
    empty: bool = Field(description="Whether this page has no books")


class ErrorResponse(CamelModel):
    """
    Error body returned for every failed request.
    """
    timestamp: datetime = Field(description="When the error occurred")
    status: int = Field(description="HTTP status code")
    error: str = Field(description="Short reason phrase")
    message: str = Field(description="Human-readable message")
    path: str = Field(description="Request path")
    validation_errors: list[str] | None = Field(
        default=None,
        description="Per-field errors formatted as '<field>: <message>'",
    )


class BookStats(CamelModel):
    """
    Stock summary for the operational stats endpoint.
    """
    total_books: int
    books_in_stock: int
    books_out_of_stock: int
    in_stock_percentage: str | None = None
    out_of_stock_percentage: str | None = None
    status: str = "healthy"
