"""Observability module for client metrics."""

from pinecone_rest.observability.metrics import (
    get_metrics,
    get_metrics_content_type,
    track_batch,
    track_request,
)

__all__ = [
    "get_metrics",
    "get_metrics_content_type",
    "track_batch",
    "track_request",
]
