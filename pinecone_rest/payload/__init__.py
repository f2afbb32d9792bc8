"""Payload model module."""

from pinecone_rest.payload.filters import (
    And,
    Condition,
    Field,
    FilterExpression,
    MetadataFilter,
    Operator,
    Or,
    filter_to_wire,
)
from pinecone_rest.payload.models import (
    MAX_TOP_K,
    FetchResult,
    IndexDescriptor,
    IndexStats,
    IndexStatus,
    Metric,
    NamespaceSummary,
    QueryMatch,
    QueryRequest,
    QueryResult,
    SparseValues,
    UpdateRequest,
    UpsertResult,
    Vector,
)

__all__ = [
    "MAX_TOP_K",
    "And",
    "Condition",
    "FetchResult",
    "Field",
    "FilterExpression",
    "IndexDescriptor",
    "IndexStats",
    "IndexStatus",
    "MetadataFilter",
    "Metric",
    "NamespaceSummary",
    "Operator",
    "Or",
    "QueryMatch",
    "QueryRequest",
    "QueryResult",
    "SparseValues",
    "UpdateRequest",
    "UpsertResult",
    "Vector",
    "filter_to_wire",
]
