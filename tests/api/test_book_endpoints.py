"""
Tests for the /api/v1/books endpoints.

Exercises the full stack (router, validation, service, SQLite repository,
error handlers) through FastAPI's TestClient.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from bookstore.main import create_app

BOOKS = "/api/v1/books"


def book(title, author, /, **fields):
    payload = {"title": title, "author": author, "price": 9.99}
    payload.update(fields)
    return payload


@pytest.fixture
def seeded(client):
    """Five books with mixed stock and categories; returns their ids by title."""
    payloads = [
        book("The Great Gatsby", "F. Scott Fitzgerald", category="Fiction", stockQuantity=50,
             price=10.99),
        book("To Kill a Mockingbird", "Harper Lee", category="Fiction", stockQuantity=0,
             price=12.99),
        book("1984", "George Orwell", category="Dystopian Fiction", stockQuantity=40,
             price=13.99),
        book("Animal Farm", "George Orwell", category="Political Satire", stockQuantity=0,
             price=8.99),
        book("Pride and Prejudice", "Jane Austen", category="Romance", stockQuantity=25,
             price=9.99),
    ]
    ids = {}
    for payload in payloads:
        response = client.post(BOOKS, json=payload)
        assert response.status_code == 201
        ids[payload["title"]] = response.json()["id"]
    return ids


def parse(timestamp):
    return datetime.fromisoformat(timestamp)


def titles(response):
    return [item["title"] for item in response.json()["content"]]


class TestCreateBook:
    """Tests for POST /api/v1/books."""

    def test_returns_201_with_new_record(self, client, gatsby_payload):
        # Act
        response = client.post(BOOKS, json=gatsby_payload)

        # Assert
        assert response.status_code == 201
        body = response.json()
        assert isinstance(body["id"], int)
        assert body["title"] == "The Great Gatsby"
        assert body["price"] == 10.99
        assert body["publicationDate"] == "1925-04-10"
        assert body["stockQuantity"] == 50
        assert body["imageUrl"] == "https://example.com/gatsby.jpg"
        assert body["createdAt"] == body["updatedAt"]

    def test_accepts_snake_case_keys(self, client):
        # Act
        response = client.post(BOOKS, json={
            "title": "T", "author": "A", "price": 5, "stock_quantity": 3,
        })

        # Assert
        assert response.status_code == 201
        assert response.json()["stockQuantity"] == 3

    def test_ignores_client_supplied_id_and_timestamps(self, client):
        # Act
        response = client.post(BOOKS, json={
            "id": 999, "title": "T", "author": "A", "price": 5,
            "createdAt": "2000-01-01T00:00:00Z",
        })

        # Assert
        assert response.status_code == 201
        assert response.json()["id"] != 999
        assert not response.json()["createdAt"].startswith("2000")

    def test_stock_defaults_to_zero(self, client):
        # Act
        response = client.post(BOOKS, json=book("T", "A"))

        # Assert
        assert response.json()["stockQuantity"] == 0

    def test_duplicate_isbn_is_rejected(self, client, gatsby_payload):
        # Arrange
        client.post(BOOKS, json=gatsby_payload)

        # Act
        response = client.post(BOOKS, json=book("Other", "Someone", isbn=gatsby_payload["isbn"]))

        # Assert
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Bad Request"
        assert body["message"] == "Book with ISBN 978-0-7432-7356-5 already exists"
        assert body["path"] == BOOKS
        assert client.get(BOOKS).json()["totalElements"] == 1

    def test_missing_required_fields(self, client):
        # Act
        response = client.post(BOOKS, json={"description": "no title"})

        # Assert
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation Failed"
        assert body["message"] == "Invalid input data"
        assert "title: Title is required" in body["validationErrors"]
        assert "author: Author is required" in body["validationErrors"]
        assert "price: Price is required" in body["validationErrors"]

    @pytest.mark.parametrize(
        "fields, expected",
        [
            ({"title": "   "}, "title: Title is required"),
            ({"price": 0}, "price: Price must be greater than 0"),
            ({"price": -5}, "price: Price must be greater than 0"),
            ({"title": "x" * 256}, "title: Title cannot exceed 255 characters"),
            ({"isbn": "1" * 21}, "isbn: ISBN cannot exceed 20 characters"),
            ({"category": "c" * 101}, "category: Category cannot exceed 100 characters"),
            ({"pages": 0}, "pages: Pages must be at least 1"),
            ({"stockQuantity": -1}, "stockQuantity: Stock quantity cannot be negative"),
            ({"imageUrl": "u" * 501}, "imageUrl: Image URL cannot exceed 500 characters"),
            ({"price": 0.001}, "price: Price cannot have more than 2 decimal places"),
            ({"price": 12.999}, "price: Price cannot have more than 2 decimal places"),
            ({"pages": 10**20}, "pages: Pages cannot exceed 2147483647"),
            ({"stockQuantity": 10**20}, "stockQuantity: Stock quantity cannot exceed 2147483647"),
        ],
    )
    def test_constraint_violations(self, client, fields, expected):
        # Act
        response = client.post(BOOKS, json=book("T", "A", **fields))

        # Assert
        assert response.status_code == 400
        assert expected in response.json()["validationErrors"]
        assert client.get(BOOKS).json()["totalElements"] == 0

    def test_wrong_field_type(self, client):
        # Act
        response = client.post(BOOKS, json=book("T", "A", pages="many"))

        # Assert
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation Failed"
        assert any(entry.startswith("pages:") for entry in body["validationErrors"])

    def test_malformed_json(self, client):
        # Act
        response = client.post(
            BOOKS, content="{not json", headers={"Content-Type": "application/json"}
        )

        # Assert
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Bad Request"
        assert body["message"] == "Malformed JSON request"


class TestGetBook:
    """Tests for GET /api/v1/books/{id} and /isbn/{isbn}."""

    def test_get_by_id(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        response = client.get(f"{BOOKS}/{created['id']}")

        # Assert
        assert response.status_code == 200
        assert response.json() == created

    def test_get_by_id_not_found(self, client):
        # Act
        response = client.get(f"{BOOKS}/999")

        # Assert
        assert response.status_code == 404
        body = response.json()
        assert body["status"] == 404
        assert body["error"] == "Not Found"
        assert body["message"] == "Book not found with ID: 999"
        assert body["path"] == f"{BOOKS}/999"
        assert "validationErrors" not in body

    def test_non_integer_id(self, client):
        # Act
        response = client.get(f"{BOOKS}/abc")

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid parameter type: book_id"

    @pytest.mark.parametrize("book_id", ["99999999999999999999", "0", "-99999999999999999999"])
    def test_id_outside_storable_range(self, client, book_id):
        # Act
        response = client.get(f"{BOOKS}/{book_id}")

        # Assert
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid parameter type: book_id"
        assert body["validationErrors"][0].startswith("book_id:")

    def test_gatsby_round_trip_by_isbn(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        response = client.get(f"{BOOKS}/isbn/978-0-7432-7356-5")

        # Assert
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert response.json()["title"] == "The Great Gatsby"

    def test_get_by_isbn_not_found(self, client):
        # Act
        response = client.get(f"{BOOKS}/isbn/nope")

        # Assert
        assert response.status_code == 404
        assert response.json()["message"] == "Book not found with ISBN: nope"


class TestUpdateBook:
    """Tests for PUT /api/v1/books/{id}."""

    def test_full_replacement(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        response = client.put(
            f"{BOOKS}/{created['id']}", json=book("The Great Gatsby", "F. Scott Fitzgerald")
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert body["price"] == 9.99
        assert body["isbn"] is None
        assert body["description"] is None
        assert body["stockQuantity"] == 0

    def test_keeps_created_at_and_advances_updated_at(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        updated = client.put(f"{BOOKS}/{created['id']}", json=gatsby_payload).json()

        # Assert
        assert updated["createdAt"] == created["createdAt"]
        assert parse(updated["updatedAt"]) > parse(created["updatedAt"])

    def test_missing_book_is_not_created(self, client):
        # Act
        response = client.put(f"{BOOKS}/999", json=book("T", "A"))

        # Assert
        assert response.status_code == 404
        assert response.json()["message"] == "Book not found with ID: 999"
        assert client.get(BOOKS).json()["totalElements"] == 0

    def test_isbn_taken_by_another_book(self, client):
        # Arrange
        client.post(BOOKS, json=book("First", "A", isbn="111"))
        second = client.post(BOOKS, json=book("Second", "B", isbn="222")).json()

        # Act
        response = client.put(f"{BOOKS}/{second['id']}", json=book("Second", "B", isbn="111"))

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "Book with ISBN 111 already exists"
        assert client.get(f"{BOOKS}/{second['id']}").json()["isbn"] == "222"

    def test_invalid_body(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        response = client.put(f"{BOOKS}/{created['id']}", json=book("T", "A", price=0))

        # Assert
        assert response.status_code == 400
        assert response.json()["error"] == "Validation Failed"

    def test_id_outside_storable_range(self, client):
        # Act
        response = client.put(f"{BOOKS}/99999999999999999999", json=book("T", "A"))

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid parameter type: book_id"
        assert client.get(BOOKS).json()["totalElements"] == 0

    def test_sub_cent_price_is_rejected_not_rounded(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        response = client.put(
            f"{BOOKS}/{created['id']}", json=book("T", "A", price=12.999)
        )

        # Assert
        assert response.status_code == 400
        assert response.json()["validationErrors"] == [
            "price: Price cannot have more than 2 decimal places"
        ]
        assert client.get(f"{BOOKS}/{created['id']}").json()["title"] == "The Great Gatsby"


class TestDeleteBook:
    """Tests for DELETE /api/v1/books/{id}."""

    def test_delete_then_delete_again(self, client, gatsby_payload):
        # Arrange
        created = client.post(BOOKS, json=gatsby_payload).json()

        # Act
        first = client.delete(f"{BOOKS}/{created['id']}")
        second = client.delete(f"{BOOKS}/{created['id']}")

        # Assert
        assert first.status_code == 204
        assert first.content == b""
        assert second.status_code == 404
        assert client.get(f"{BOOKS}/{created['id']}").status_code == 404

    def test_id_outside_storable_range(self, client):
        # Act
        response = client.delete(f"{BOOKS}/99999999999999999999")

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid parameter type: book_id"


class TestListBooks:
    """Tests for GET /api/v1/books paging and sorting."""

    def test_empty_catalog(self, client):
        # Act
        response = client.get(BOOKS)

        # Assert
        assert response.status_code == 200
        assert response.json() == {
            "content": [],
            "totalElements": 0,
            "totalPages": 0,
            "pageNumber": 0,
            "pageSize": 10,
            "numberOfElements": 0,
            "first": True,
            "last": True,
            "empty": True,
        }

    def test_pages_are_disjoint(self, client, seeded):
        # Act
        pages = [client.get(BOOKS, params={"page": n, "size": 2}).json() for n in range(3)]

        # Assert
        ids = [item["id"] for page in pages for item in page["content"]]
        assert len(ids) == len(set(ids)) == 5
        assert set(ids) == set(seeded.values())
        assert pages[0]["first"] and not pages[0]["last"]
        assert pages[2]["last"]
        assert pages[2]["numberOfElements"] == 1

    def test_paging_headers(self, client, seeded):
        # Act
        response = client.get(BOOKS, params={"size": 2})

        # Assert
        assert response.headers["X-Total-Count"] == "5"
        assert response.headers["X-Page-Count"] == "3"

    def test_default_order_is_title(self, client, seeded):
        # Act
        response = client.get(BOOKS)

        # Assert
        assert titles(response) == sorted(seeded)

    def test_sort_by_price_descending(self, client, seeded):
        # Act
        response = client.get(BOOKS, params={"sort": "price,desc"})

        # Assert
        prices = [item["price"] for item in response.json()["content"]]
        assert prices == sorted(prices, reverse=True)

    def test_sort_accepts_camel_case(self, client, seeded):
        # Act
        response = client.get(BOOKS, params=[("sort", "stockQuantity,desc"), ("sort", "title")])

        # Assert
        assert response.status_code == 200
        assert titles(response)[0] == "The Great Gatsby"

    @pytest.mark.parametrize(
        "params, expected",
        [
            ({"page": -1}, "page: must be greater than or equal to 0"),
            ({"size": 0}, "size: must be greater than or equal to 1"),
            ({"size": 101}, "size: must be less than or equal to 100"),
            ({"page": 10**19}, "page: must be less than or equal to 922337203685477580"),
            ({"page": 10**19, "size": 1}, "page: must be less than or equal to 9223372036854775807"),
        ],
    )
    def test_paging_out_of_range(self, client, params, expected):
        # Act
        response = client.get(BOOKS, params=params)

        # Assert
        assert response.status_code == 400
        assert response.json()["validationErrors"] == [expected]

    def test_unknown_sort_field(self, client):
        # Act
        response = client.get(BOOKS, params={"sort": "password"})

        # Assert
        assert response.status_code == 400
        assert response.json()["validationErrors"][0].startswith("sort: Cannot sort by 'password'")

    def test_non_integer_page(self, client):
        # Act
        response = client.get(BOOKS, params={"page": "first"})

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid parameter type: page"


class TestSearchBooks:
    """Tests for GET /api/v1/books/search."""

    def test_title_and_author_combined(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search", params={"title": "farm", "author": "orwell"})

        # Assert
        assert titles(response) == ["Animal Farm"]

    def test_title_takes_precedence_over_category(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search", params={"title": "1984", "category": "Romance"})

        # Assert
        assert titles(response) == ["1984"]

    def test_author_only(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search", params={"author": "ORWELL"})

        # Assert
        assert titles(response) == ["1984", "Animal Farm"]

    def test_category_only(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search", params={"category": "fiction"})

        # Assert
        assert set(titles(response)) == {"1984", "The Great Gatsby", "To Kill a Mockingbird"}

    def test_keyword_matches_title_or_author(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search", params={"q": "austen"})

        # Assert
        assert titles(response) == ["Pride and Prejudice"]

    def test_no_filters_returns_all(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search")

        # Assert
        assert response.json()["totalElements"] == 5

    def test_search_is_paged(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/search", params={"category": "fiction", "size": 2})

        # Assert
        body = response.json()
        assert body["totalElements"] == 3
        assert body["numberOfElements"] == 2

    def test_accented_text_ignores_case(self, client):
        # Arrange
        client.post(BOOKS, json=book("Élan Vital", "Émile Zola", category="Études"))

        # Act
        by_title = client.get(f"{BOOKS}/search", params={"title": "élan"})
        by_author = client.get(f"{BOOKS}/search", params={"author": "ÉMILE"})
        by_keyword = client.get(f"{BOOKS}/search", params={"q": "élan"})

        # Assert
        assert titles(by_title) == ["Élan Vital"]
        assert titles(by_author) == ["Élan Vital"]
        assert titles(by_keyword) == ["Élan Vital"]


class TestInStock:
    """Tests for GET /api/v1/books/in-stock."""

    def test_only_books_with_stock(self, client, seeded):
        # Act
        response = client.get(f"{BOOKS}/in-stock")

        # Assert
        body = response.json()
        assert body["totalElements"] == 3
        assert all(item["stockQuantity"] > 0 for item in body["content"])


class BrokenRepository:
    """Repository whose every query fails."""

    def find_all(self, page_request):
        raise RuntimeError("disk on fire")

    def count(self):
        raise RuntimeError("disk on fire")


class TestUnexpectedErrors:
    """Unhandled failures become a generic 500 without leaking details."""

    def test_internal_error_is_hidden(self, settings):
        # Arrange
        app = create_app(settings, repository=BrokenRepository())
        client = TestClient(app, raise_server_exceptions=False)

        # Act
        response = client.get(BOOKS)

        # Assert
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert body["message"] == "An unexpected error occurred"
        assert "disk on fire" not in response.text

    def test_internal_error_keeps_security_headers(self, settings):
        # Arrange
        app = create_app(settings, repository=BrokenRepository())
        client = TestClient(app, raise_server_exceptions=False)

        # Act
        response = client.get(BOOKS)

        # Assert
        assert response.status_code == 500
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Content-Security-Policy"] == settings.content_security_policy
