"""
Prometheus metrics for the labyrinth service.

Tracks HTTP traffic, repository operations, searches and logins.
"""

from fastapi import Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Gauge, Histogram,
                               generate_latest)

# Request metrics
http_requests_total = Counter(
    "lob_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "lob_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# Repository metrics
lob_cell_operations_total = Counter(
    "lob_cell_operations_total",
    "Cell repository operations by outcome",
    ["operation", "status"],
)

lob_cells = Gauge("lob_cells", "Number of stored cells")

# User interaction metrics
lob_search_queries_total = Counter(
    "lob_search_queries_total", "Search queries by kind", ["kind"]
)

lob_logins_total = Counter("lob_logins_total", "Login attempts", ["status"])


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_cell_operation(operation: str, success: bool):
    """Track a repository mutation."""
    status = "success" if success else "failure"
    lob_cell_operations_total.labels(operation=operation, status=status).inc()


def track_search_query(kind: str):
    lob_search_queries_total.labels(kind=kind).inc()


def track_login(success: bool):
    lob_logins_total.labels(status="success" if success else "failure").inc()


def update_cell_count(count: int):
    lob_cells.set(count)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
