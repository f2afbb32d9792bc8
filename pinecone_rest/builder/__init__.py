"""Request builder module."""

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.builder.service import (
    DEFAULT_MAX_BATCH_SIZE,
    MAX_BATCH_SIZE_LIMIT,
    RequestBuilder,
)

__all__ = [
    "DEFAULT_MAX_BATCH_SIZE",
    "MAX_BATCH_SIZE_LIMIT",
    "RequestBuilder",
    "WireRequest",
]
