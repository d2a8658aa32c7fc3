"""
Value objects for the domain layer.

Value objects are immutable objects that represent descriptive aspects
of the domain with no conceptual identity.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")

SORTABLE_FIELDS = (
    "id",
    "title",
    "author",
    "price",
    "isbn",
    "category",
    "publisher",
    "publication_date",
    "pages",
    "stock_quantity",
    "created_at",
    "updated_at",
)


@dataclass(frozen=True)
class BookData:
    """
    The mutable fields of a book, as supplied by a create or update request.

    Identity and timestamps are not part of it: the catalog assigns them.
    """

    title: str
    author: str
    price: Decimal
    isbn: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    publisher: Optional[str] = None
    publication_date: Optional[date] = None
    pages: Optional[int] = None
    stock_quantity: Optional[int] = None
    image_url: Optional[str] = None


class SortDirection(str, Enum):
    """Sort direction for paged queries."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortOrder:
    """A single ordering clause: field name plus direction."""

    attribute: str
    """Book attribute name (snake_case)"""

    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        """Validate the attribute against the sortable whitelist."""
        if self.attribute not in SORTABLE_FIELDS:
            raise ValueError(
                f"Cannot sort by '{self.attribute}'. Allowed fields: {', '.join(SORTABLE_FIELDS)}"
            )


@dataclass(frozen=True)
class PageRequest:
    """
    A request for one window of an ordered result set.

    Pages are zero-based. An empty ``sort`` means the repository default
    (title ascending).
    """

    page: int = 0
    """Zero-based page index"""

    size: int = 10
    """Maximum number of items per page"""

    sort: Tuple[SortOrder, ...] = field(default_factory=tuple)
    """Ordering clauses, applied in sequence"""

    def __post_init__(self) -> None:
        """Validate paging constraints."""
        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")

        if self.size < 1:
            raise ValueError(f"size must be >= 1, got {self.size}")

    @property
    def offset(self) -> int:
        """Number of items to skip before this page starts."""
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    A bounded slice of an ordered result set plus total-count metadata.
    """

    items: List[T]
    """Items on this page"""

    total_elements: int
    """Number of matching items across all pages"""

    page: int
    """Zero-based index of this page"""

    size: int
    """Requested page size"""

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def number_of_elements(self) -> int:
        return len(self.items)

    @property
    def is_first(self) -> bool:
        return self.page == 0

    @property
    def is_last(self) -> bool:
        return self.page + 1 >= self.total_pages

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class InventoryStats:
    """
    Stock summary over the whole catalog.
    """

    total_books: int
    books_in_stock: int

    @property
    def books_out_of_stock(self) -> int:
        return self.total_books - self.books_in_stock

    def in_stock_percentage(self) -> Optional[float]:
        """Share of books in stock (0-100), or None for an empty catalog."""
        if self.total_books == 0:
            return None
        return self.books_in_stock / self.total_books * 100

    def out_of_stock_percentage(self) -> Optional[float]:
        """Share of books out of stock (0-100), or None for an empty catalog."""
        if self.total_books == 0:
            return None
        return self.books_out_of_stock / self.total_books * 100
