"""
Custom exceptions for the bookstore domain.

These exceptions represent domain-level and request-level errors and are
independent of infrastructure concerns (HTTP, database, etc.). The API layer
is the only place that translates them into status codes.
"""

from typing import List, Optional


class BookstoreError(Exception):
    """Base exception for all bookstore errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BookstoreError):
    """Raised when a requested resource does not exist."""


class BookNotFoundError(NotFoundError):
    """Raised when no book matches the given id or business key."""

    def __init__(self, value: object, field: str = "ID"):
        super().__init__(
            message=f"Book not found with {field}: {value}",
            details={"field": field, "value": value},
        )


class DuplicateIsbnError(BookstoreError):
    """Raised when an ISBN is already held by another book."""

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(
            message=f"Book with ISBN {isbn} already exists",
            details={"isbn": isbn},
        )


class ValidationError(BookstoreError):
    """
    Raised when input is malformed or out of range.

    Carries one "<field>: <message>" string per violated constraint.
    """

    def __init__(self, errors: List[str], message: str = "Invalid input data"):
        self.errors = list(errors)
        super().__init__(message=message, details={"errors": self.errors})


class MalformedRequestError(BookstoreError):
    """Raised when a request body cannot be parsed at all."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            message="Malformed JSON request",
            details={"reason": reason} if reason else None,
        )


class UnexpectedError(BookstoreError):
    """
    Catch-all for failures with no more specific kind.

    The message is never shown to clients.
    """

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            message="An unexpected error occurred",
            details={"reason": reason} if reason else None,
        )
