"""Async REST client for Pinecone vector indexes."""

__version__ = "0.1.0"

import logging

from pinecone_rest.client import ClientConfig, IndexClient
from pinecone_rest.exceptions import (
    AuthError,
    ClientError,
    ConfigurationError,
    DecodeError,
    ErrorCode,
    InvalidVector,
    ItemOutcome,
    NotFound,
    PartialFailure,
    PineconeClientError,
    RateLimited,
    ServerError,
    ServerValidationError,
    TransportError,
    TransportErrorKind,
    ValidationError,
)
from pinecone_rest.payload import (
    And,
    Field,
    FetchResult,
    IndexDescriptor,
    IndexStats,
    Metric,
    NamespaceSummary,
    Or,
    QueryMatch,
    QueryRequest,
    QueryResult,
    SparseValues,
    UpdateRequest,
    UpsertResult,
    Vector,
)
from pinecone_rest.transport import (
    BrowserTransport,
    NativeTransport,
    Transport,
    default_transport,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "And",
    "AuthError",
    "BrowserTransport",
    "ClientConfig",
    "ClientError",
    "ConfigurationError",
    "DecodeError",
    "ErrorCode",
    "FetchResult",
    "Field",
    "IndexClient",
    "IndexDescriptor",
    "IndexStats",
    "InvalidVector",
    "ItemOutcome",
    "Metric",
    "NamespaceSummary",
    "NativeTransport",
    "NotFound",
    "Or",
    "PartialFailure",
    "PineconeClientError",
    "QueryMatch",
    "QueryRequest",
    "QueryResult",
    "RateLimited",
    "ServerError",
    "ServerValidationError",
    "SparseValues",
    "Transport",
    "TransportError",
    "TransportErrorKind",
    "UpdateRequest",
    "UpsertResult",
    "ValidationError",
    "Vector",
    "__version__",
]
