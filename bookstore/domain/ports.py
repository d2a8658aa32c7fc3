"""
Port interfaces (protocols) for the domain layer.

Ports define the contracts between the domain and infrastructure layers.
They are implemented by adapters in the infrastructure layer, allowing
the domain to remain independent of technical details.

Following Hexagonal Architecture principles, the domain layer depends only
on these abstract protocols, never on concrete implementations.
"""

from typing import ContextManager, List, Optional, Protocol

from .entities import Book
from .value_objects import Page, PageRequest


class BookRepository(Protocol):
    """
    Port for persisting and querying books in the catalog.

    This repository is the authoritative owner of Book records. It abstracts
    away the persistence mechanism (SQLite, PostgreSQL, etc.).

    Implementations should handle:
    - A storage-level unique constraint on isbn (non-null values only)
    - Case-insensitive substring matching for the search methods
    - Assigning ids and timestamps on save
    """

    def find_by_id(self, book_id: int) -> Optional[Book]:
        """
        Retrieve a book by its id.

        Args:
            book_id: The unique identifier of the book

        Returns:
            The Book entity if found, None otherwise
        """
        ...

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        """
        Retrieve a book by exact (case-sensitive) ISBN match.

        Args:
            isbn: ISBN to look up

        Returns:
            The Book entity if found, None otherwise
        """
        ...

    def find_all(self, page_request: PageRequest) -> Page[Book]:
        """
        Retrieve one page of the whole catalog.

        Args:
            page_request: Window and ordering

        Returns:
            Page of books with the total catalog size
        """
        ...

    def search_by_title(self, title: str, page_request: PageRequest) -> Page[Book]:
        """Books whose title contains ``title``, ignoring case."""
        ...

    def search_by_author(self, author: str, page_request: PageRequest) -> Page[Book]:
        """Books whose author contains ``author``, ignoring case."""
        ...

    def search_by_category(self, category: str, page_request: PageRequest) -> Page[Book]:
        """Books whose category contains ``category``, ignoring case."""
        ...

    def search_by_title_and_author(
        self,
        title: Optional[str],
        author: Optional[str],
        page_request: PageRequest,
    ) -> Page[Book]:
        """
        Books matching both optional substring filters.

        A None filter matches every book for that field, so passing two
        Nones is equivalent to find_all().

        Args:
            title: Substring of the title, or None
            author: Substring of the author, or None
            page_request: Window and ordering

        Returns:
            Page of books satisfying every given filter
        """
        ...

    def search_by_title_or_author(self, keyword: str) -> List[Book]:
        """
        All books whose title or author contains ``keyword``, ignoring case.

        Args:
            keyword: Free-text keyword

        Returns:
            Matching books, ordered by title
        """
        ...

    def search_by_title_or_author_paged(
        self, keyword: str, page_request: PageRequest
    ) -> Page[Book]:
        """Paged variant of search_by_title_or_author()."""
        ...

    def find_in_stock(self, page_request: PageRequest) -> Page[Book]:
        """Books with stock_quantity > 0."""
        ...

    def count_in_stock(self) -> int:
        """Number of books with stock_quantity > 0."""
        ...

    def count_by_category(self, category: str) -> int:
        """Number of books in ``category`` (case-insensitive exact match)."""
        ...

    def exists_by_title_and_author(self, title: str, author: str) -> bool:
        """
        Check if a book with this title and author exists.

        Both fields are compared case-insensitively and exactly.
        """
        ...

    def exists_by_title_and_author_excluding_id(
        self, title: str, author: str, exclude_id: int
    ) -> bool:
        """
        Same check as exists_by_title_and_author(), ignoring one record.

        Used to ask whether any *other* book collides with the one being
        updated.
        """
        ...

    def save(self, book: Book) -> Book:
        """
        Insert or fully update a book.

        A book without id is inserted: the repository assigns the id and
        sets created_at and updated_at to the same instant. A book with an
        id replaces the stored row; only updated_at is refreshed.

        Args:
            book: The book entity to persist

        Returns:
            The stored book, as it would be read back

        Raises:
            DuplicateIsbnError: If the isbn is held by another book
            RuntimeError: If a database error occurs
        """
        ...

    def delete_by_id(self, book_id: int) -> None:
        """
        Delete a book. Callers must check existence first.

        Args:
            book_id: ID of the book to delete
        """
        ...

    def exists_by_id(self, book_id: int) -> bool:
        """Check if a book with this id exists."""
        ...

    def count(self) -> int:
        """
        Get the total number of books in the catalog.

        Returns:
            Total book count
        """
        ...


class MetricsRecorder(Protocol):
    """
    Port for reporting book operations to an observability sink.

    Passed explicitly to the API layer; the domain service never sees it.
    """

    def record_operation(self, operation: str, duration_seconds: float) -> None:
        """
        Count one completed operation and observe its duration.

        Args:
            operation: One of created, updated, deleted, viewed, searched
            duration_seconds: Wall-clock time spent in the operation
        """
        ...

    def track(self, operation: str) -> ContextManager[None]:
        """
        Time the enclosed block and record it as ``operation`` if it succeeds.

        Args:
            operation: One of created, updated, deleted, viewed, searched
        """
        ...

    def record_request(
        self, method: str, endpoint: str, status_code: int, duration_seconds: float
    ) -> None:
        """
        Count one HTTP request keyed by route template and status code.

        Args:
            method: HTTP method
            endpoint: Route template (e.g., '/api/v1/books/{book_id}')
            status_code: Response status code
            duration_seconds: Wall-clock time spent handling the request
        """
        ...
