#!/usr/bin/env python3
"""
Catalog Seeding Script.

Loads a handful of sample books into the bookstore database through the
BookService, so the same business rules apply as for API clients. Books
whose ISBN is already in the catalog are skipped, so the script can be run
repeatedly.

Usage:
    python -m scripts.seed_catalog --db-path data/bookstore.db
"""

import argparse
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List

from bookstore.config import get_settings
from bookstore.domain.exceptions import DuplicateIsbnError
from bookstore.domain.services import BookService
from bookstore.domain.value_objects import BookData
from bookstore.infrastructure.db import SqliteBookRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SAMPLE_BOOKS: List[BookData] = [
    BookData(
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        price=Decimal("12.99"),
        isbn="978-0-7432-7356-5",
        description="A classic American novel set in the Jazz Age.",
        category="Fiction",
        publisher="Scribner",
        publication_date=date(1925, 4, 10),
        pages=180,
        stock_quantity=50,
        image_url="https://example.com/gatsby.jpg",
    ),
    BookData(
        title="1984",
        author="George Orwell",
        price=Decimal("13.99"),
        isbn="978-0-452-28423-4",
        description="A dystopian social science fiction novel.",
        category="Fiction",
        publisher="Signet Classic",
        publication_date=date(1949, 6, 8),
        pages=328,
        stock_quantity=40,
        image_url="https://example.com/1984.jpg",
    ),
    BookData(
        title="To Kill a Mockingbird",
        author="Harper Lee",
        price=Decimal("14.99"),
        isbn="978-0-06-112008-4",
        description="A novel about racial injustice and childhood innocence.",
        category="Fiction",
        publisher="J. B. Lippincott & Co.",
        publication_date=date(1960, 7, 11),
        pages=281,
        stock_quantity=0,
        image_url="https://example.com/mockingbird.jpg",
    ),
    BookData(
        title="Pride and Prejudice",
        author="Jane Austen",
        price=Decimal("9.99"),
        isbn="978-0-14-143951-8",
        description="A romantic novel of manners.",
        category="Romance",
        publisher="Penguin Classics",
        publication_date=date(1813, 1, 28),
        pages=432,
        stock_quantity=25,
    ),
    BookData(
        title="Animal Farm",
        author="George Orwell",
        price=Decimal("8.99"),
        isbn="978-0-452-28424-1",
        description="An allegorical novella about a farmyard revolution.",
        category="Political Satire",
        publisher="Signet Classic",
        publication_date=date(1945, 8, 17),
        pages=112,
        stock_quantity=0,
    ),
]


def main(db_path: Path) -> int:
    """
    Seed the catalog at ``db_path``.

    Args:
        db_path: SQLite database file (created if missing)

    Returns:
        Number of books added
    """
    logger.info(f"Seeding catalog at {db_path}")
    service = BookService(SqliteBookRepository(db_path))

    added = 0
    for data in SAMPLE_BOOKS:
        try:
            book = service.create(data)
        except DuplicateIsbnError:
            logger.info(f"Skipping '{data.title}': ISBN {data.isbn} already in catalog")
            continue
        added += 1
        logger.info(f"Added book {book.id}: {book.title}")

    logger.info(f"Seeding complete: {added} added, {len(SAMPLE_BOOKS) - added} skipped")
    return added


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load sample books into the bookstore database")
    parser.add_argument(
        "--db-path", "-d",
        type=Path,
        default=None,
        help="SQLite database path (default: BOOKSTORE_DB_PATH or data/bookstore.db)"
    )

    args = parser.parse_args()
    main(args.db_path or get_settings().db_path)
