"""
SQLite implementation of the BookRepository port.

This adapter persists Book entities to a SQLite database, handling
serialization/deserialization, paging and sorting, and enforcing the unique
constraint on isbn at the storage level.
"""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from bookstore.domain.entities import Book
from bookstore.domain.exceptions import BookNotFoundError, DuplicateIsbnError
from bookstore.domain.ports import BookRepository
from bookstore.domain.value_objects import Page, PageRequest, SortDirection, SortOrder

logger = logging.getLogger(__name__)

_PRICE_QUANTUM = Decimal("0.01")

_DEFAULT_SORT = (SortOrder("title"),)

_COLUMNS = (
    "title, author, price, isbn, description, category, publisher, "
    "publication_date, pages, stock_quantity, image_url, created_at, updated_at"
)


def _casefold(value: Optional[str]) -> Optional[str]:
    """Full Unicode case folding, registered as the SQL function ``casefold``."""
    return value.casefold() if isinstance(value, str) else value


def _contains_pattern(value: str) -> str:
    """Build a LIKE pattern matching ``value`` literally anywhere in a column."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _order_by(sort: Sequence[SortOrder]) -> str:
    """
    Render an ORDER BY clause from whitelisted sort orders.

    ``id`` is appended as a tiebreaker so that pages never overlap when the
    requested ordering has ties.
    """
    orders = list(sort) or list(_DEFAULT_SORT)
    clauses = [
        f"{order.attribute} {'DESC' if order.direction == SortDirection.DESC else 'ASC'}"
        for order in orders
    ]
    if all(order.attribute != "id" for order in orders):
        clauses.append("id ASC")
    return "ORDER BY " + ", ".join(clauses)


class SqliteBookRepository(BookRepository):
    """
    The unique constraint on isbn is enforced for records where isbn is non-null.
    Books without isbn are not deduplicated (any number of them may exist).
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the repository with a database path
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one unit of work; commit on success, always close."""
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Create the books table if it doesn't exist."""
        with self._get_connection() as conn:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS books (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                author TEXT NOT NULL,
                price NUMERIC(10, 2) NOT NULL CHECK (price > 0),
                isbn TEXT UNIQUE,
                description TEXT,
                category TEXT,
                publisher TEXT,
                publication_date TEXT,
                pages INTEGER CHECK (pages IS NULL OR pages >= 1),
                stock_quantity INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0),
                image_url TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_books_title ON books(title)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_books_author ON books(author)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_books_category ON books(category)")

    def _book_to_row(self, book: Book) -> dict:
        """Convert a Book entity to a database row dict."""
        return {
            "id": book.id,
            "title": book.title,
            "author": book.author,
            "price": str(Decimal(book.price).quantize(_PRICE_QUANTUM)),
            "isbn": book.isbn,
            "description": book.description,
            "category": book.category,
            "publisher": book.publisher,
            "publication_date": book.publication_date.isoformat() if book.publication_date else None,
            "pages": book.pages,
            "stock_quantity": book.stock_quantity,
            "image_url": book.image_url,
            "created_at": book.created_at.isoformat(),
            "updated_at": book.updated_at.isoformat(),
        }

    def _row_to_book(self, row: sqlite3.Row) -> Book:
        """Convert a database row to a Book entity."""
        publication_date = None
        if row["publication_date"]:
            publication_date = date.fromisoformat(row["publication_date"])

        return Book(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            price=Decimal(str(row["price"])).quantize(_PRICE_QUANTUM),
            isbn=row["isbn"],
            description=row["description"],
            category=row["category"],
            publisher=row["publisher"],
            publication_date=publication_date,
            pages=row["pages"],
            stock_quantity=row["stock_quantity"],
            image_url=row["image_url"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _query_page(
        self,
        where: str,
        params: Sequence[object],
        page_request: PageRequest,
    ) -> Page[Book]:
        """Count and slice one filtered result set inside a single connection."""
        where_clause = f"WHERE {where}" if where else ""
        with self._get_connection() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM books {where_clause}", tuple(params)
            ).fetchone()["cnt"]

            rows = conn.execute(
                f"SELECT * FROM books {where_clause} {_order_by(page_request.sort)} "
                "LIMIT ? OFFSET ?",
                (*params, page_request.size, page_request.offset),
            ).fetchall()

        return Page(
            items=[self._row_to_book(row) for row in rows],
            total_elements=total,
            page=page_request.page,
            size=page_request.size,
        )

    def _exists(self, where: str, params: Sequence[object]) -> bool:
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT EXISTS(SELECT 1 FROM books WHERE {where}) AS found", tuple(params)
            ).fetchone()
            return bool(row["found"])

    def count(self) -> int:
        """Get the total number of books in the catalog."""
        with self._get_connection() as conn:
            result = conn.execute("SELECT COUNT(*) as cnt FROM books").fetchone()
            return result["cnt"]

    def find_by_id(self, book_id: int) -> Optional[Book]:
        """Retrieve a book by its id."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM books WHERE id = ?",
                (book_id,)
            ).fetchone()

            if row is None:
                return None

            return self._row_to_book(row)

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        """Retrieve a book by exact ISBN."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM books WHERE isbn = ?",
                (isbn,)
            ).fetchone()

            if row is None:
                return None

            return self._row_to_book(row)

    def find_all(self, page_request: PageRequest) -> Page[Book]:
        return self._query_page("", (), page_request)

    def search_by_title(self, title: str, page_request: PageRequest) -> Page[Book]:
        return self._query_page(
            "casefold(title) LIKE casefold(?) ESCAPE '\\'", (_contains_pattern(title),), page_request
        )

    def search_by_author(self, author: str, page_request: PageRequest) -> Page[Book]:
        return self._query_page(
            "casefold(author) LIKE casefold(?) ESCAPE '\\'", (_contains_pattern(author),), page_request
        )

    def search_by_category(self, category: str, page_request: PageRequest) -> Page[Book]:
        return self._query_page(
            "casefold(category) LIKE casefold(?) ESCAPE '\\'",
            (_contains_pattern(category),),
            page_request,
        )

    def search_by_title_and_author(
        self,
        title: Optional[str],
        author: Optional[str],
        page_request: PageRequest,
    ) -> Page[Book]:
        conditions: List[str] = []
        params: List[object] = []
        if title is not None:
            conditions.append("casefold(title) LIKE casefold(?) ESCAPE '\\'")
            params.append(_contains_pattern(title))
        if author is not None:
            conditions.append("casefold(author) LIKE casefold(?) ESCAPE '\\'")
            params.append(_contains_pattern(author))
        return self._query_page(" AND ".join(conditions), params, page_request)

    def search_by_title_or_author(self, keyword: str) -> List[Book]:
        pattern = _contains_pattern(keyword)
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM books WHERE "
                "casefold(title) LIKE casefold(?) ESCAPE '\\' "
                "OR casefold(author) LIKE casefold(?) ESCAPE '\\' "
                f"{_order_by(_DEFAULT_SORT)}",
                (pattern, pattern),
            ).fetchall()
            return [self._row_to_book(row) for row in rows]

    def search_by_title_or_author_paged(
        self, keyword: str, page_request: PageRequest
    ) -> Page[Book]:
        pattern = _contains_pattern(keyword)
        return self._query_page(
            "(casefold(title) LIKE casefold(?) ESCAPE '\\' "
            "OR casefold(author) LIKE casefold(?) ESCAPE '\\')",
            (pattern, pattern),
            page_request,
        )

    def find_in_stock(self, page_request: PageRequest) -> Page[Book]:
        return self._query_page("stock_quantity > 0", (), page_request)

    def count_in_stock(self) -> int:
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) AS cnt FROM books WHERE stock_quantity > 0"
            ).fetchone()["cnt"]

    def count_by_category(self, category: str) -> int:
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) AS cnt FROM books WHERE casefold(category) = casefold(?)",
                (category,),
            ).fetchone()["cnt"]

    def exists_by_title_and_author(self, title: str, author: str) -> bool:
        return self._exists(
            "casefold(title) = casefold(?) AND casefold(author) = casefold(?)", (title, author)
        )

    def exists_by_title_and_author_excluding_id(
        self, title: str, author: str, exclude_id: int
    ) -> bool:
        return self._exists(
            "casefold(title) = casefold(?) AND casefold(author) = casefold(?) AND id != ?",
            (title, author, exclude_id),
        )

    def exists_by_id(self, book_id: int) -> bool:
        return self._exists("id = ?", (book_id,))

    def save(self, book: Book) -> Book:
        """Insert a new book or fully update an existing one."""
        now = datetime.now(UTC)
        if book.id is None:
            stored = replace(book, created_at=now, updated_at=now)
        else:
            # never move updated_at backwards, even if the clock does
            stored = replace(book, updated_at=max(now, book.updated_at, book.created_at))

        row = self._book_to_row(stored)

        try:
            with self._get_connection() as conn:
                if stored.id is None:
                    cursor = conn.execute(f"""
                        INSERT INTO books ({_COLUMNS})
                        VALUES
                        (:title, :author, :price, :isbn, :description, :category, :publisher,
                         :publication_date, :pages, :stock_quantity, :image_url,
                         :created_at, :updated_at)
                    """, row)
                    stored = replace(stored, id=cursor.lastrowid)
                    logger.debug(f"Inserted book {stored.id}")
                else:
                    cursor = conn.execute("""
                        UPDATE books SET
                            title=:title,
                            author=:author,
                            price=:price,
                            isbn=:isbn,
                            description=:description,
                            category=:category,
                            publisher=:publisher,
                            publication_date=:publication_date,
                            pages=:pages,
                            stock_quantity=:stock_quantity,
                            image_url=:image_url,
                            updated_at=:updated_at
                        WHERE id=:id
                    """, row)
                    if cursor.rowcount == 0:
                        raise BookNotFoundError(stored.id)
                    logger.debug(f"Updated book {stored.id}")

        except sqlite3.IntegrityError as e:
            if "books.isbn" in str(e):
                raise DuplicateIsbnError(book.isbn) from e
            raise ValueError(f"Book violates catalog constraints: {e}") from e
        except sqlite3.Error as e:
            raise RuntimeError(f"Database error while saving book: {e}") from e

        return self.find_by_id(stored.id) or stored

    def delete_by_id(self, book_id: int) -> None:
        """Delete a book from the catalog."""
        try:
            with self._get_connection() as conn:
                conn.execute(
                    "DELETE FROM books WHERE id = ?",
                    (book_id,)
                )
        except sqlite3.Error as e:
            raise RuntimeError(f"Database error while deleting book: {e}") from e
