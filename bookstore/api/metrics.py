"""
Prometheus metrics for the bookstore API.

Tracks HTTP traffic per route and status, and book operations (create,
update, delete, view, search). Each BookMetrics instance owns its registry,
so applications and tests never share counters.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator

from fastapi import Request, Response
from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, generate_latest)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from bookstore.domain.ports import MetricsRecorder

logger = logging.getLogger(__name__)

BOOK_OPERATIONS = ("created", "updated", "deleted", "viewed", "searched")

_MUTATIONS = ("created", "updated", "deleted")


class BookMetrics(MetricsRecorder):
    """
    Metric families for one application instance.

    Implements the MetricsRecorder port consumed by the API layer.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        self.http_requests_total = Counter(
            "bookstore_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=self.registry,
        )
        self.http_request_duration_seconds = Histogram(
            "bookstore_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry,
        )

        self.book_operations = {
            operation: Counter(
                f"bookstore_books_{operation}_total",
                f"Number of books {operation}",
                registry=self.registry,
            )
            for operation in BOOK_OPERATIONS
        }
        self.book_operation_duration_seconds = Histogram(
            "bookstore_book_operation_duration_seconds",
            "Time taken by book operations",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self.registry,
        )

        self.active_operations = Gauge(
            "bookstore_books_active_operations",
            "Number of book mutations in progress",
            registry=self.registry,
        )
        self.total_books = Gauge(
            "bookstore_books_total",
            "Total number of books in the catalog",
            registry=self.registry,
        )

    def record_operation(self, operation: str, duration_seconds: float) -> None:
        if operation not in self.book_operations:
            raise ValueError(f"Unknown book operation: {operation}")
        self.book_operations[operation].inc()
        self.book_operation_duration_seconds.labels(operation=operation).observe(
            duration_seconds
        )

    def record_request(
        self, method: str, endpoint: str, status_code: int, duration_seconds: float
    ) -> None:
        self.http_requests_total.labels(
            method=method, endpoint=endpoint, status=str(status_code)
        ).inc()
        self.http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
            duration_seconds
        )

    def update_total_books(self, count: int) -> None:
        self.total_books.set(count)

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """
        Time a book operation and count it once it completes.

        Mutations are also reflected in the active-operations gauge while
        they run. Failed operations are not counted.
        """
        is_mutation = operation in _MUTATIONS
        if is_mutation:
            self.active_operations.inc()
        start = time.perf_counter()
        try:
            yield
            self.record_operation(operation, time.perf_counter() - start)
        finally:
            if is_mutation:
                self.active_operations.dec()

    def render(self) -> Response:
        """Prometheus text exposition of this registry."""
        return Response(content=generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)


def _endpoint_label(request: Request) -> str:
    """Route template for the request, to keep label cardinality bounded."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path:
        return path
    return "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Record count and duration of every HTTP request.

    Operational endpoints under ``/actuator`` are not tracked.
    """

    def __init__(self, app: ASGIApp, metrics: MetricsRecorder, skip_prefix: str = "/actuator"):
        super().__init__(app)
        self._metrics = metrics
        self._skip_prefix = skip_prefix

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(self._skip_prefix):
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._metrics.record_request(
                request.method, _endpoint_label(request), 500, time.perf_counter() - start
            )
            raise

        self._metrics.record_request(
            request.method,
            _endpoint_label(request),
            response.status_code,
            time.perf_counter() - start,
        )
        return response
