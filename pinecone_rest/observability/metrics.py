"""Prometheus metrics for client operations.

Provides metrics instrumentation for:
- Operation latency and counts, by outcome
- Batch sizes and the number of wire requests a batch was split into
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

REQUEST_DURATION = Histogram(
    "pinecone_request_duration_seconds",
    "Client operation duration in seconds",
    ["operation", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

REQUEST_TOTAL = Counter(
    "pinecone_requests_total",
    "Total client operations",
    ["operation", "status"],
)

BATCH_SIZE = Histogram(
    "pinecone_batch_size",
    "Items per batch operation",
    ["operation"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000],
)

WIRE_REQUESTS = Histogram(
    "pinecone_wire_requests",
    "Wire requests issued per batch operation",
    ["operation"],
    buckets=[1, 2, 5, 10, 25, 50, 100],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_request(
    operation: str,
    duration: float,
    status: str = "success",
) -> None:
    """Track one client operation.

    Args:
        operation: Operation name, e.g. "upsert".
        duration: Operation duration in seconds.
        status: "success", or the error code of the raised exception.
    """
    REQUEST_DURATION.labels(operation=operation, status=status).observe(duration)
    REQUEST_TOTAL.labels(operation=operation, status=status).inc()


def track_batch(
    operation: str,
    batch_size: int,
    wire_requests: int,
) -> None:
    """Track the shape of a batch operation.

    Args:
        operation: Operation name.
        batch_size: Number of caller items.
        wire_requests: Number of wire requests the batch was split into.
    """
    BATCH_SIZE.labels(operation=operation).observe(batch_size)
    WIRE_REQUESTS.labels(operation=operation).observe(wire_requests)
