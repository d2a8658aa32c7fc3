"""
Shared fixtures for the HTTP API tests.

Every test gets its own application, SQLite file and metrics registry.
"""

import pytest
from fastapi.testclient import TestClient

from bookstore.config import Settings
from bookstore.main import create_app


@pytest.fixture
def settings(tmp_path):
    # lowest cost bcrypt accepts
    return Settings(
        _env_file=None,
        db_path=tmp_path / "bookstore.db",
        password_hash_rounds=4,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def gatsby_payload():
    return {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "isbn": "978-0-7432-7356-5",
        "price": 10.99,
        "description": "A classic American novel",
        "category": "Fiction",
        "publisher": "Scribner",
        "publicationDate": "1925-04-10",
        "pages": 180,
        "stockQuantity": 50,
        "imageUrl": "https://example.com/gatsby.jpg",
    }
