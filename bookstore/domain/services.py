"""
Domain services for the bookstore catalog.

Services orchestrate domain logic that doesn't naturally belong to a single
entity. They coordinate between entities and ports to implement use cases.

Following Hexagonal Architecture principles, services depend only on domain
entities, value objects, and port protocols (never on concrete implementations).
"""

import logging
from typing import Optional

from .entities import Book
from .exceptions import BookNotFoundError, DuplicateIsbnError
from .ports import BookRepository
from .value_objects import BookData, InventoryStats, Page, PageRequest

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    """Treat blank search filters as absent."""
    if value is None or not value.strip():
        return None
    return value


class BookService:
    """
    Enforces catalog business rules on top of the book repository.

    This service is the single entry point for mutations:
    1. ISBN uniqueness is checked before create and update
    2. Existence is checked before update and delete
    3. Search requests are dispatched to the matching repository query

    The uniqueness check is a best-effort pre-check; the repository's
    storage-level constraint remains the final guard and raises the same
    DuplicateIsbnError when two writers race.
    """

    def __init__(self, repository: BookRepository) -> None:
        """
        Initialize the service with its repository.

        Args:
            repository: Persistence port for Book records
        """
        self._repository = repository

    def get_all(self, page_request: PageRequest) -> Page[Book]:
        logger.debug(f"Fetching all books: {page_request}")
        return self._repository.find_all(page_request)

    def get_by_id(self, book_id: int) -> Optional[Book]:
        logger.debug(f"Fetching book with ID: {book_id}")
        return self._repository.find_by_id(book_id)

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        logger.debug(f"Fetching book with ISBN: {isbn}")
        return self._repository.find_by_isbn(isbn)

    def create(self, data: BookData) -> Book:
        """
        Create a new book.

        Args:
            data: Values for the new book

        Returns:
            The stored book with its assigned id and timestamps

        Raises:
            DuplicateIsbnError: If data.isbn is already in the catalog
        """
        logger.info(f"Creating new book: {data.title}")

        if data.isbn is not None and self._repository.find_by_isbn(data.isbn) is not None:
            logger.warning(f"Rejected create: ISBN {data.isbn} already exists")
            raise DuplicateIsbnError(data.isbn)

        created = self._repository.save(Book.create_new(data))
        logger.info(f"Created book {created.id}: {created.title}")
        return created

    def update(self, book_id: int, data: BookData) -> Book:
        """
        Replace every mutable field of an existing book.

        Fields left empty in ``data`` are cleared on the stored record. The
        id and created_at never change; updated_at is refreshed on save.

        Args:
            book_id: ID of the book to update
            data: New values for all mutable fields

        Returns:
            The updated book

        Raises:
            BookNotFoundError: If no book has this id
            DuplicateIsbnError: If the isbn changes to one another book holds
        """
        logger.info(f"Updating book with ID: {book_id}")

        existing = self._repository.find_by_id(book_id)
        if existing is None:
            raise BookNotFoundError(book_id)

        isbn_changed = data.isbn is not None and data.isbn != existing.isbn
        if isbn_changed and self._repository.find_by_isbn(data.isbn) is not None:
            logger.warning(f"Rejected update of {book_id}: ISBN {data.isbn} already exists")
            raise DuplicateIsbnError(data.isbn)

        return self._repository.save(existing.apply(data))

    def delete(self, book_id: int) -> None:
        """
        Delete a book.

        Args:
            book_id: ID of the book to delete

        Raises:
            BookNotFoundError: If no book has this id
        """
        logger.info(f"Deleting book with ID: {book_id}")

        if not self._repository.exists_by_id(book_id):
            raise BookNotFoundError(book_id)

        self._repository.delete_by_id(book_id)

    def search(
        self,
        title: Optional[str],
        author: Optional[str],
        category: Optional[str],
        page_request: PageRequest,
    ) -> Page[Book]:
        """
        Search the catalog with a fixed filter precedence.

        Only one query runs per call, chosen in this order:
        title+author, title, author, category, then no filter (all books).
        Category is never combined with title or author.

        Args:
            title: Title substring, or None
            author: Author substring, or None
            category: Category substring, or None
            page_request: Window and ordering

        Returns:
            Page of matching books
        """
        title, author, category = _clean(title), _clean(author), _clean(category)
        logger.debug(
            f"Searching books: title={title!r}, author={author!r}, category={category!r}"
        )

        if title is not None and author is not None:
            return self._repository.search_by_title_and_author(title, author, page_request)
        if title is not None:
            return self._repository.search_by_title(title, page_request)
        if author is not None:
            return self._repository.search_by_author(author, page_request)
        if category is not None:
            return self._repository.search_by_category(category, page_request)
        return self._repository.find_all(page_request)

    def keyword_search(self, keyword: Optional[str], page_request: PageRequest) -> Page[Book]:
        """
        Match a keyword against title OR author.

        A blank keyword returns the whole catalog.
        """
        keyword = _clean(keyword)
        if keyword is None:
            return self._repository.find_all(page_request)
        return self._repository.search_by_title_or_author_paged(keyword, page_request)

    def get_in_stock(self, page_request: PageRequest) -> Page[Book]:
        logger.debug("Fetching books in stock")
        return self._repository.find_in_stock(page_request)

    def get_inventory_stats(self) -> InventoryStats:
        """Summarize stock levels across the catalog."""
        return InventoryStats(
            total_books=self._repository.count(),
            books_in_stock=self._repository.count_in_stock(),
        )
