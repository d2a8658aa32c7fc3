"""
Domain layer - Core business logic and entities.

This layer contains the Book entity, value objects, the error taxonomy, and
defines the ports (interfaces) that the infrastructure layer must implement.

It has NO dependencies on external frameworks, databases, or APIs.
"""

from .entities import Book
from .exceptions import (
    BookstoreError,
    BookNotFoundError,
    DuplicateIsbnError,
    MalformedRequestError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from .value_objects import BookData, InventoryStats, Page, PageRequest, SortDirection, SortOrder

__all__ = [
    # Entities
    "Book",
    # Value Objects
    "BookData",
    "InventoryStats",
    "Page",
    "PageRequest",
    "SortDirection",
    "SortOrder",
    # Errors
    "BookstoreError",
    "BookNotFoundError",
    "DuplicateIsbnError",
    "MalformedRequestError",
    "NotFoundError",
    "UnexpectedError",
    "ValidationError",
]
