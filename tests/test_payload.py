"""Tests for payload models and filter expressions."""

import math

import pytest

from pinecone_rest.exceptions import (
    ErrorCode,
    InvalidVector,
    PineconeClientError,
    ValidationError,
)
from pinecone_rest.payload import (
    And,
    Condition,
    Field,
    IndexDescriptor,
    IndexStats,
    Metric,
    Operator,
    Or,
    QueryRequest,
    QueryResult,
    SparseValues,
    UpdateRequest,
    Vector,
    filter_to_wire,
)


class TestVector:
    """Tests for Vector model."""

    def test_create_vector(self) -> None:
        """Vector can be created with required fields."""
        vector = Vector(id="v1", values=[0.1, 0.2, 0.3])
        assert vector.id == "v1"
        assert vector.dimension == 3
        assert vector.metadata is None

    def test_integer_values_coerced(self) -> None:
        """Integer components are stored as floats."""
        vector = Vector(id="v1", values=[1, 2])
        assert vector.values == [1.0, 2.0]

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, bad: float) -> None:
        """NaN and infinities raise InvalidVector at construction."""
        with pytest.raises(InvalidVector) as exc_info:
            Vector(id="v1", values=[0.1, bad])
        assert exc_info.value.code == ErrorCode.INVALID_VECTOR
        assert exc_info.value.details["position"] == 1

    def test_invalid_vector_is_validation_error(self) -> None:
        """InvalidVector is a ValidationError."""
        with pytest.raises(ValidationError):
            Vector(id="v1", values=[math.nan])

    def test_empty_id_rejected(self) -> None:
        """Vector ids must not be empty."""
        with pytest.raises(ValidationError):
            Vector(id="", values=[0.1])

    def test_metadata_order_preserved(self) -> None:
        """Metadata keeps insertion order through serialization."""
        vector = Vector(
            id="v1",
            values=[0.1],
            metadata={"zeta": 1, "alpha": 2.5, "flag": False, "tags": ["x", "y"]},
        )
        wire = vector.to_wire()
        assert list(wire["metadata"]) == ["zeta", "alpha", "flag", "tags"]
        assert wire["metadata"]["flag"] is False
        assert wire["metadata"]["zeta"] == 1

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_metadata_rejected(self, bad: float) -> None:
        """Metadata numbers must be finite to be encodable as JSON."""
        with pytest.raises(InvalidVector) as exc_info:
            Vector(id="v1", values=[0.1], metadata={"ok": 1.5, "score": bad})
        assert exc_info.value.details["key"] == "score"

    def test_wrong_types_raise_library_error(self) -> None:
        """Badly typed input raises the library ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            Vector(id="a", values=["x"])  # type: ignore[list-item]
        assert isinstance(exc_info.value, PineconeClientError)
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.details["model"] == "Vector"
        assert exc_info.value.details["errors"][0]["loc"] == "values.0"

    def test_nested_metadata_rejected(self) -> None:
        """Metadata values cannot be nested mappings."""
        with pytest.raises(ValidationError) as exc_info:
            Vector(id="a", values=[0.1], metadata={"k": {"nested": 1}})
        assert exc_info.value.details["model"] == "Vector"

    def test_model_validate_missing_field(self) -> None:
        """model_validate reports missing fields with the library error."""
        with pytest.raises(ValidationError) as exc_info:
            Vector.model_validate({"values": [1.0]})
        assert exc_info.value.details["errors"][0]["loc"] == "id"

    def test_wire_aliases_accepted(self) -> None:
        """Vectors decode from camelCase wire data."""
        vector = Vector.model_validate(
            {"id": "v1", "values": [1.0], "sparseValues": {"indices": [0], "values": [2.0]}}
        )
        assert vector.sparse_values is not None
        assert vector.sparse_values.indices == [0]


class TestSparseValues:
    """Tests for SparseValues model."""

    def test_length_mismatch(self) -> None:
        """Indices and values must be parallel."""
        with pytest.raises(InvalidVector):
            SparseValues(indices=[1, 2], values=[0.5])

    def test_negative_index(self) -> None:
        """Indices must be non-negative."""
        with pytest.raises(InvalidVector):
            SparseValues(indices=[-1], values=[0.5])

    def test_non_finite(self) -> None:
        """Sparse values must be finite."""
        with pytest.raises(InvalidVector):
            SparseValues(indices=[1], values=[math.inf])


class TestQueryModels:
    """Tests for query request and result models."""

    def test_defaults(self) -> None:
        """Query request has sensible defaults."""
        request = QueryRequest(top_k=3, vector=[0.1])
        assert request.namespace is None
        assert request.include_values is False
        assert request.include_metadata is False

    def test_non_finite_query_vector(self) -> None:
        """Query vectors must be finite."""
        with pytest.raises(InvalidVector):
            QueryRequest(top_k=1, vector=[math.nan])

    def test_decode_result(self) -> None:
        """Results decode from wire data, keeping match order."""
        result = QueryResult.model_validate(
            {
                "matches": [
                    {"id": "b", "score": 0.9, "metadata": {"k": "v"}},
                    {"id": "a", "score": 0.5},
                ],
                "namespace": "ns",
            }
        )
        assert [m.id for m in result.matches] == ["b", "a"]
        assert result.matches[0].metadata == {"k": "v"}
        assert result.matches[1].values == []

    def test_update_non_finite(self) -> None:
        """Update values must be finite."""
        with pytest.raises(InvalidVector):
            UpdateRequest(id="a", values=[math.inf])

    def test_update_non_finite_metadata(self) -> None:
        """Merged metadata must be finite."""
        with pytest.raises(InvalidVector) as exc_info:
            UpdateRequest(id="a", set_metadata={"rank": math.inf})
        assert exc_info.value.details["key"] == "rank"

    def test_wrong_top_k_type(self) -> None:
        """A non-integer top_k raises the library ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            QueryRequest(top_k="x", vector=[0.1])  # type: ignore[arg-type]
        assert exc_info.value.details["model"] == "QueryRequest"
        assert exc_info.value.details["errors"][0]["loc"] == "top_k"


class TestIndexModels:
    """Tests for index description models."""

    @pytest.mark.parametrize(
        "metric,higher",
        [(Metric.COSINE, True), (Metric.DOTPRODUCT, True), (Metric.EUCLIDEAN, False)],
    )
    def test_score_direction(self, metric: Metric, higher: bool) -> None:
        """Score direction depends on the metric."""
        assert metric.higher_is_better is higher

    def test_descriptor_defaults(self) -> None:
        """Descriptor needs only name and dimension."""
        descriptor = IndexDescriptor(name="idx", dimension=8)
        assert descriptor.metric == Metric.COSINE
        assert descriptor.status.ready is False

    def test_stats_namespace_names(self) -> None:
        """Namespace summaries carry their names in service order."""
        stats = IndexStats.model_validate(
            {
                "namespaces": {"b": {"vectorCount": 2}, "": {"vectorCount": 1}},
                "dimension": 3,
                "totalVectorCount": 3,
            }
        )
        assert [(n.name, n.vector_count) for n in stats.namespaces.values()] == [
            ("b", 2),
            ("", 1),
        ]


class TestFilters:
    """Tests for filter expressions."""

    def test_condition(self) -> None:
        """Conditions render as field/operator/value."""
        assert Field("genre").eq("jazz").to_wire() == {"genre": {"$eq": "jazz"}}
        assert Field("year").lt(2000).to_wire() == {"year": {"$lt": 2000}}
        assert Field("tag").exists().to_wire() == {"tag": {"$exists": True}}

    def test_nested_order(self) -> None:
        """Combinators keep clause order."""
        expr = Or(
            And(Field("b").gt(1), Field("a").lte(2)),
            Field("c").is_in(["x", "y"]),
        )
        assert expr.to_wire() == {
            "$or": [
                {"$and": [{"b": {"$gt": 1}}, {"a": {"$lte": 2}}]},
                {"c": {"$in": ["x", "y"]}},
            ]
        }

    def test_operators_compose(self) -> None:
        """& and | build combinators."""
        expr = Field("a").eq(1) & Field("b").ne(2)
        assert isinstance(expr, And)
        assert (Field("a").eq(1) | Field("b").eq(2)).to_wire()["$or"][1] == {
            "b": {"$eq": 2}
        }

    def test_in_requires_list(self) -> None:
        """$in and $nin need a non-empty list."""
        with pytest.raises(ValidationError):
            Field("a").is_in([])
        with pytest.raises(ValidationError):
            Condition("a", Operator.NIN, "x")

    def test_scalar_required(self) -> None:
        """Comparison operators need scalars."""
        with pytest.raises(ValidationError):
            Condition("a", Operator.EQ, {"nested": 1})

    def test_field_name_rules(self) -> None:
        """Field names are non-empty and not operators."""
        with pytest.raises(ValidationError):
            Field("").eq(1)
        with pytest.raises(ValidationError):
            Field("$and").eq(1)

    def test_raw_mapping_passthrough(self) -> None:
        """Raw filters pass through in order."""
        raw = {"b": {"$eq": 1}, "$or": [{"a": {"$gt": 2}}]}
        assert list(filter_to_wire(raw)) == ["b", "$or"]

    def test_raw_mapping_unknown_operator(self) -> None:
        """Unknown operators in raw filters are rejected."""
        with pytest.raises(ValidationError):
            filter_to_wire({"a": {"$regex": "x"}})

    def test_none_and_bad_types(self) -> None:
        """None means no filter; other types are rejected."""
        assert filter_to_wire(None) is None
        with pytest.raises(ValidationError):
            filter_to_wire(["a"])  # type: ignore[arg-type]

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_condition(self, bad: float) -> None:
        """Comparison values must be finite."""
        with pytest.raises(ValidationError):
            Field("x").gt(bad)
        with pytest.raises(ValidationError):
            Field("x").is_in([1.0, bad])

    def test_raw_mapping_non_finite(self) -> None:
        """Raw filters with non-finite values are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            filter_to_wire({"$or": [{"x": {"$lt": math.nan}}]})
        assert exc_info.value.details["field"] == "$or[0].x.$lt"

    def test_raw_mapping_non_string_key(self) -> None:
        """Raw filter keys must be strings."""
        with pytest.raises(ValidationError):
            filter_to_wire({1: {"$eq": 1}})  # type: ignore[dict-item]

    def test_unknown_operator_in_condition(self) -> None:
        """Conditions reject operators the service does not know."""
        with pytest.raises(ValidationError):
            Condition("a", "$regex", 1)  # type: ignore[arg-type]
