# Database infrastructure package
"""
Relational persistence adapters.

This package contains:
- SqliteBookRepository: BookRepository port backed by a SQLite table
"""

from .sqlite_book_repository import SqliteBookRepository

__all__ = ["SqliteBookRepository"]
