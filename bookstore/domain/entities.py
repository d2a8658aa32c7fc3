"""
Domain entities for the bookstore catalog.

Entities are objects with a unique identity that runs through time and
different representations. The Book is the only entity of this domain.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Optional

from .value_objects import BookData


@dataclass
class Book:
    """
    Represents a book in the catalog.

    A book is identified by a system-generated integer id, assigned by the
    repository on first save. Until then ``id`` is None. The ISBN is an
    optional business key, unique across the catalog when present.
    """

    title: str
    """Book title"""

    author: str
    """Author name"""

    price: Decimal
    """Unit price, strictly positive"""

    isbn: Optional[str] = None
    """International Standard Book Number, unique when present"""

    description: Optional[str] = None
    """Book description/summary"""

    category: Optional[str] = None
    """Category/genre (e.g., 'Fiction')"""

    publisher: Optional[str] = None
    """Publisher name"""

    publication_date: Optional[date] = None
    """Publication date"""

    pages: Optional[int] = None
    """Number of pages"""

    stock_quantity: int = 0
    """Units available for sale"""

    image_url: Optional[str] = None
    """Cover image URL"""

    id: Optional[int] = None
    """Unique identifier assigned by the catalog"""

    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    """When this book was added to the catalog"""

    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    """When this book was last modified"""

    def __post_init__(self) -> None:
        """Guard the invariants the storage layer relies on."""
        if self.stock_quantity is None:
            self.stock_quantity = 0

        if self.stock_quantity < 0:
            raise ValueError(
                f"stock_quantity cannot be negative, got {self.stock_quantity}"
            )

        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be earlier than created_at")

    def __eq__(self, other: object) -> bool:
        """Two persisted books are equal if they have the same ID."""
        if not isinstance(other, Book):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else id(self)

    def is_persisted(self) -> bool:
        """Check if the book has been assigned an id by the catalog."""
        return self.id is not None

    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    def apply(self, data: BookData) -> "Book":
        """
        Return a copy of this book with every mutable field replaced.

        Replacement is total: a field left as None in ``data`` becomes None
        here too (stock quantity falls back to 0). Identity and timestamps
        are carried over unchanged; the repository refreshes ``updated_at``.

        Args:
            data: New values for all mutable fields

        Returns:
            A new Book sharing this book's id and timestamps
        """
        return replace(
            self,
            title=data.title,
            author=data.author,
            price=data.price,
            isbn=data.isbn,
            description=data.description,
            category=data.category,
            publisher=data.publisher,
            publication_date=data.publication_date,
            pages=data.pages,
            stock_quantity=data.stock_quantity if data.stock_quantity is not None else 0,
            image_url=data.image_url,
        )

    @staticmethod
    def create_new(data: BookData) -> "Book":
        """
        Factory method to build an unsaved book from incoming data.

        Args:
            data: Values for all mutable fields

        Returns:
            A Book without id; timestamps are assigned on save
        """
        now = datetime.now(UTC)
        return Book(
            title=data.title,
            author=data.author,
            price=data.price,
            isbn=data.isbn,
            description=data.description,
            category=data.category,
            publisher=data.publisher,
            publication_date=data.publication_date,
            pages=data.pages,
            stock_quantity=data.stock_quantity if data.stock_quantity is not None else 0,
            image_url=data.image_url,
            created_at=now,
            updated_at=now,
        )
