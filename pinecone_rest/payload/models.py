"""Vector and index data models.

Wire names are camelCase aliases; Python attributes are snake_case. Metadata
is kept in a plain dict, which preserves insertion order through validation,
serialization and JSON encoding.
"""

import math
from enum import Enum
from typing import Any, Self, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pinecone_rest.exceptions import InvalidVector, ValidationError

MetadataValue = Union[str, bool, int, float, list[str]]

# Largest top_k the service accepts for a single query.
MAX_TOP_K = 10_000


class WireModel(BaseModel):
    """Base model accepting both attribute names and wire aliases.

    Input of the wrong shape raises the library's ValidationError rather
    than pydantic's.
    """

    model_config = ConfigDict(populate_by_name=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except pydantic.ValidationError as e:
            raise _invalid_input(type(self), e) from e

    @classmethod
    def model_validate(cls, obj: Any, **kwargs: Any) -> Self:
        try:
            return super().model_validate(obj, **kwargs)
        except pydantic.ValidationError as e:
            raise _invalid_input(cls, e) from e

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire aliases, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _invalid_input(model: type, error: pydantic.ValidationError) -> ValidationError:
    problems = [
        {"loc": ".".join(str(part) for part in item["loc"]), "msg": item["msg"]}
        for item in error.errors(include_url=False)
    ]
    first = problems[0] if problems else {"loc": "", "msg": str(error)}
    return ValidationError(
        f"Invalid {model.__name__}: {first['loc']}: {first['msg']}",
        details={"model": model.__name__, "errors": problems},
    )


def _check_finite(values: list[float], what: str) -> list[float]:
    for position, value in enumerate(values):
        if not math.isfinite(value):
            raise InvalidVector(
                f"{what} contains a non-finite component at position {position}",
                details={"position": position, "value": repr(value)},
            )
    return values


def _check_metadata(
    metadata: dict[str, MetadataValue] | None,
) -> dict[str, MetadataValue] | None:
    for key, value in (metadata or {}).items():
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidVector(
                f"Metadata value of {key!r} is not finite",
                details={"key": key, "value": repr(value)},
            )
    return metadata


class Metric(str, Enum):
    """Similarity metric of an index."""

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOTPRODUCT = "dotproduct"

    @property
    def higher_is_better(self) -> bool:
        """Whether a larger score means a closer match.

        Cosine and dot-product scores are similarities; euclidean scores are
        distances.
        """
        return self is not Metric.EUCLIDEAN


class SparseValues(WireModel):
    """Sparse vector component as parallel index/value lists."""

    indices: list[int] = Field(description="Non-zero positions")
    values: list[float] = Field(description="Values at those positions")

    @field_validator("values")
    @classmethod
    def _finite_values(cls, values: list[float]) -> list[float]:
        return _check_finite(values, "Sparse vector")

    @model_validator(mode="after")
    def _parallel_lists(self) -> "SparseValues":
        if len(self.indices) != len(self.values):
            raise InvalidVector(
                "Sparse vector indices and values differ in length",
                details={"indices": len(self.indices), "values": len(self.values)},
            )
        if any(i < 0 for i in self.indices):
            raise InvalidVector("Sparse vector indices must be non-negative")
        return self


class Vector(WireModel):
    """A vector stored in an index.

    Attributes:
        id: Identifier, unique within a namespace.
        values: Dense components.
        sparse_values: Optional sparse components.
        metadata: Optional ordered metadata mapping.
    """

    id: str = Field(description="Vector identifier")
    values: list[float] = Field(default_factory=list, description="Dense values")
    sparse_values: SparseValues | None = Field(
        default=None,
        alias="sparseValues",
        description="Sparse values",
    )
    metadata: dict[str, MetadataValue] | None = Field(
        default=None,
        description="Metadata payload",
    )

    @field_validator("id")
    @classmethod
    def _non_empty_id(cls, value: str) -> str:
        if not value:
            raise ValidationError("Vector id must not be empty")
        return value

    @field_validator("values")
    @classmethod
    def _finite_values(cls, values: list[float]) -> list[float]:
        return _check_finite(values, "Vector")

    @field_validator("metadata")
    @classmethod
    def _finite_metadata(
        cls,
        metadata: dict[str, MetadataValue] | None,
    ) -> dict[str, MetadataValue] | None:
        return _check_metadata(metadata)

    @property
    def dimension(self) -> int:
        return len(self.values)


class QueryRequest(WireModel):
    """Parameters of a similarity query.

    Exactly one of ``vector`` or ``id`` selects the query point. When
    ``namespace`` is None the client's default namespace is used.
    """

    top_k: int = Field(alias="topK", description="Number of matches to return")
    vector: list[float] | None = Field(default=None, description="Query vector")
    id: str | None = Field(default=None, description="Query by stored vector id")
    sparse_vector: SparseValues | None = Field(default=None, alias="sparseVector")
    filter: Any = Field(default=None, description="Metadata filter expression")
    namespace: str | None = Field(default=None)
    include_values: bool = Field(default=False, alias="includeValues")
    include_metadata: bool = Field(default=False, alias="includeMetadata")

    @field_validator("vector")
    @classmethod
    def _finite_vector(cls, values: list[float] | None) -> list[float] | None:
        if values is None:
            return None
        return _check_finite(values, "Query vector")


class QueryMatch(WireModel):
    """One query match.

    The score's direction depends on the index metric, see
    :attr:`Metric.higher_is_better`.
    """

    id: str = Field(description="Matched vector id")
    score: float = Field(default=0.0, description="Similarity score or distance")
    values: list[float] = Field(default_factory=list)
    sparse_values: SparseValues | None = Field(default=None, alias="sparseValues")
    metadata: dict[str, MetadataValue] | None = Field(default=None)


class QueryResult(WireModel):
    """Matches of a query in the order the service ranked them."""

    matches: list[QueryMatch] = Field(default_factory=list)
    namespace: str = Field(default="")


class FetchResult(WireModel):
    """Vectors fetched by id, keyed by id."""

    vectors: dict[str, Vector] = Field(default_factory=dict)
    namespace: str = Field(default="")


class UpsertResult(WireModel):
    upserted_count: int = Field(default=0, alias="upsertedCount")


class UpdateRequest(WireModel):
    """Partial update of a stored vector.

    ``set_metadata`` merges into existing metadata rather than replacing it.
    """

    id: str = Field(description="Vector to update")
    values: list[float] | None = Field(default=None)
    sparse_values: SparseValues | None = Field(default=None, alias="sparseValues")
    set_metadata: dict[str, MetadataValue] | None = Field(
        default=None,
        alias="setMetadata",
    )
    namespace: str | None = Field(default=None)

    @field_validator("values")
    @classmethod
    def _finite_values(cls, values: list[float] | None) -> list[float] | None:
        if values is None:
            return None
        return _check_finite(values, "Vector")

    @field_validator("set_metadata")
    @classmethod
    def _finite_metadata(
        cls,
        metadata: dict[str, MetadataValue] | None,
    ) -> dict[str, MetadataValue] | None:
        return _check_metadata(metadata)


class IndexStatus(WireModel):
    ready: bool = Field(default=False)
    state: str = Field(default="Unknown")


class IndexDescriptor(WireModel):
    """Read-only description of an index, as reported by the controller."""

    name: str
    dimension: int
    metric: Metric = Field(default=Metric.COSINE)
    pods: int = Field(default=1)
    replicas: int = Field(default=1)
    shards: int = Field(default=1)
    pod_type: str = Field(default="")
    status: IndexStatus = Field(default_factory=IndexStatus)


class NamespaceSummary(WireModel):
    name: str = Field(default="")
    vector_count: int = Field(default=0, alias="vectorCount")


class IndexStats(WireModel):
    """Index statistics from the data plane."""

    dimension: int = Field(default=0)
    index_fullness: float = Field(default=0.0, alias="indexFullness")
    total_vector_count: int = Field(default=0, alias="totalVectorCount")
    namespaces: dict[str, NamespaceSummary] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _name_namespaces(self) -> "IndexStats":
        for name, summary in self.namespaces.items():
            summary.name = name
        return self
