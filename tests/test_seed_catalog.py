"""
Tests for the catalog seeding script.
"""

from bookstore.infrastructure.db import SqliteBookRepository
from scripts.seed_catalog import SAMPLE_BOOKS, main


class TestSeedCatalog:

    def test_seeds_sample_books(self, tmp_path):
        # Act
        added = main(tmp_path / "seed.db")

        # Assert
        assert added == len(SAMPLE_BOOKS)
        repo = SqliteBookRepository(tmp_path / "seed.db")
        assert repo.count() == len(SAMPLE_BOOKS)
        assert repo.find_by_isbn("978-0-7432-7356-5").title == "The Great Gatsby"

    def test_second_run_skips_existing_isbns(self, tmp_path):
        # Arrange
        main(tmp_path / "seed.db")

        # Act
        added = main(tmp_path / "seed.db")

        # Assert
        assert added == 0
        assert SqliteBookRepository(tmp_path / "seed.db").count() == len(SAMPLE_BOOKS)
