"""
Explicit validation of book requests and paging parameters.

Each validator returns a list of FieldError; an empty list means the input
is acceptable. The endpoints raise ValidationError when any are found, before
the domain service is called.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from bookstore.domain.value_objects import SORTABLE_FIELDS, SortDirection, SortOrder
from bookstore.api.v1.schemas import BookRequest


@dataclass(frozen=True)
class FieldError:
    """A violated constraint on one request field."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


# (attribute, json field, label, max length)
_MAX_LENGTHS: Tuple[Tuple[str, str, str, int], ...] = (
    ("title", "title", "Title", 255),
    ("author", "author", "Author", 255),
    ("isbn", "isbn", "ISBN", 20),
    ("category", "category", "Category", 100),
    ("publisher", "publisher", "Publisher", 255),
    ("image_url", "imageUrl", "Image URL", 500),
)

# Largest value an SQLite INTEGER column or LIMIT/OFFSET can hold
MAX_SQL_INTEGER = 2**63 - 1

# Largest page count or stock quantity (32-bit signed)
MAX_COUNT = 2**31 - 1

_CENT = Decimal("0.01")

_CAMEL_TO_SNAKE: Dict[str, str] = {
    re.sub(r"_([a-z])", lambda m: m.group(1).upper(), name): name for name in SORTABLE_FIELDS
}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_book_request(request: BookRequest) -> List[FieldError]:
    """
    Check a create or update request against the Book constraints.

    Args:
        request: Parsed request body

    Returns:
        One FieldError per violated constraint, in field order
    """
    errors: List[FieldError] = []

    if _is_blank(request.title):
        errors.append(FieldError("title", "Title is required"))
    if _is_blank(request.author):
        errors.append(FieldError("author", "Author is required"))

    if request.price is None:
        errors.append(FieldError("price", "Price is required"))
    elif not request.price.is_finite() or request.price <= Decimal("0"):
        errors.append(FieldError("price", "Price must be greater than 0"))
    elif request.price >= Decimal("100000000"):
        errors.append(FieldError("price", "Price cannot exceed 8 integer digits"))
    elif request.price != request.price.quantize(_CENT):
        errors.append(FieldError("price", "Price cannot have more than 2 decimal places"))

    for attribute, json_name, label, limit in _MAX_LENGTHS:
        value = getattr(request, attribute)
        if value is not None and len(value) > limit:
            errors.append(FieldError(json_name, f"{label} cannot exceed {limit} characters"))

    if request.pages is not None and request.pages < 1:
        errors.append(FieldError("pages", "Pages must be at least 1"))
    elif request.pages is not None and request.pages > MAX_COUNT:
        errors.append(FieldError("pages", f"Pages cannot exceed {MAX_COUNT}"))

    if request.stock_quantity is not None and request.stock_quantity < 0:
        errors.append(FieldError("stockQuantity", "Stock quantity cannot be negative"))
    elif request.stock_quantity is not None and request.stock_quantity > MAX_COUNT:
        errors.append(
            FieldError("stockQuantity", f"Stock quantity cannot exceed {MAX_COUNT}")
        )

    return errors


def validate_paging(page: int, size: int, max_size: int) -> List[FieldError]:
    """Check zero-based page index and page size bounds."""
    errors: List[FieldError] = []
    max_page = MAX_SQL_INTEGER // max(size, 1)
    if page < 0:
        errors.append(FieldError("page", "must be greater than or equal to 0"))
    elif page > max_page:
        errors.append(FieldError("page", f"must be less than or equal to {max_page}"))
    if size < 1:
        errors.append(FieldError("size", "must be greater than or equal to 1"))
    elif size > max_size:
        errors.append(FieldError("size", f"must be less than or equal to {max_size}"))
    return errors


def parse_sort(values: List[str]) -> Tuple[Tuple[SortOrder, ...], List[FieldError]]:
    """
    Parse ``sort`` query values of the form ``field`` or ``field,asc|desc``.

    Field names may be camelCase or snake_case.

    Returns:
        The parsed orders and any errors found
    """
    orders: List[SortOrder] = []
    errors: List[FieldError] = []

    for raw in values:
        parts = [part.strip() for part in raw.split(",") if part.strip()]
        if not parts:
            continue

        name = _CAMEL_TO_SNAKE.get(parts[0], parts[0])
        direction = SortDirection.ASC
        if len(parts) > 1:
            try:
                direction = SortDirection(parts[1].lower())
            except ValueError:
                errors.append(FieldError("sort", f"Invalid sort direction '{parts[1]}'"))
                continue

        try:
            orders.append(SortOrder(name, direction))
        except ValueError as e:
            errors.append(FieldError("sort", str(e)))

    return tuple(orders), errors
