"""Metadata filter expressions.

Filters are small expression trees over metadata fields. The service reads
clauses in the order they appear in the JSON document, so every node emits
its clauses in construction order.

    >>> expr = And(Field("genre").eq("jazz"), Field("year").gte(2000))
    >>> expr.to_wire()
    {'$and': [{'genre': {'$eq': 'jazz'}}, {'year': {'$gte': 2000}}]}
"""

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

from pinecone_rest.exceptions import ValidationError

Scalar = Union[str, int, float, bool]


class Operator(str, Enum):
    """Comparison operators understood by the service."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    EXISTS = "$exists"


_LOGICAL = frozenset({"$and", "$or"})
_OPERATORS = frozenset(op.value for op in Operator)


class FilterExpression:
    """Base class for filter tree nodes."""

    def to_wire(self) -> dict[str, Any]:
        raise NotImplementedError

    def __and__(self, other: "FilterExpression") -> "And":
        return And(self, other)

    def __or__(self, other: "FilterExpression") -> "Or":
        return Or(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterExpression):
            return NotImplemented
        return self.to_wire() == other.to_wire()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_wire()!r})"


def _check_operand(value: Any, field: str) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(
            f"Filter value for {field!r} is not finite",
            details={"field": field, "value": repr(value)},
        )


class Condition(FilterExpression):
    """A single comparison of one metadata field against a value."""

    def __init__(self, field: str, op: Operator, value: Any) -> None:
        if not isinstance(field, str) or not field:
            raise ValidationError("Filter field name must be a non-empty string")
        if field.startswith("$"):
            raise ValidationError(
                f"Filter field name cannot start with '$': {field}",
                details={"field": field},
            )
        try:
            op = Operator(op)
        except ValueError as e:
            raise ValidationError(
                f"Unknown filter operator: {op}",
                details={"field": field},
            ) from e
        if op in (Operator.IN, Operator.NIN):
            if not isinstance(value, (list, tuple)) or not value:
                raise ValidationError(
                    f"{op.value} requires a non-empty list",
                    details={"field": field},
                )
            value = list(value)
            for item in value:
                _check_operand(item, field)
        elif op == Operator.EXISTS:
            if not isinstance(value, bool):
                raise ValidationError(
                    "$exists requires a boolean",
                    details={"field": field},
                )
        elif not isinstance(value, (str, int, float, bool)):
            raise ValidationError(
                f"{op.value} requires a scalar value",
                details={"field": field, "type": type(value).__name__},
            )
        else:
            _check_operand(value, field)
        self.field = field
        self.op = op
        self.value = value

    def to_wire(self) -> dict[str, Any]:
        return {self.field: {self.op.value: self.value}}


class _Combinator(FilterExpression):
    keyword = ""

    def __init__(self, *clauses: FilterExpression) -> None:
        if len(clauses) < 1:
            raise ValidationError(f"{self.keyword} requires at least one clause")
        self.clauses = list(clauses)

    def to_wire(self) -> dict[str, Any]:
        return {self.keyword: [clause.to_wire() for clause in self.clauses]}


class And(_Combinator):
    """All clauses must match."""

    keyword = "$and"


class Or(_Combinator):
    """At least one clause must match."""

    keyword = "$or"


class Field:
    """Builder for conditions on one metadata field."""

    def __init__(self, name: str) -> None:
        self.name = name

    def eq(self, value: Scalar) -> Condition:
        return Condition(self.name, Operator.EQ, value)

    def ne(self, value: Scalar) -> Condition:
        return Condition(self.name, Operator.NE, value)

    def gt(self, value: int | float) -> Condition:
        return Condition(self.name, Operator.GT, value)

    def gte(self, value: int | float) -> Condition:
        return Condition(self.name, Operator.GTE, value)

    def lt(self, value: int | float) -> Condition:
        return Condition(self.name, Operator.LT, value)

    def lte(self, value: int | float) -> Condition:
        return Condition(self.name, Operator.LTE, value)

    def is_in(self, values: list[Scalar]) -> Condition:
        return Condition(self.name, Operator.IN, values)

    def not_in(self, values: list[Scalar]) -> Condition:
        return Condition(self.name, Operator.NIN, values)

    def exists(self, flag: bool = True) -> Condition:
        return Condition(self.name, Operator.EXISTS, flag)


MetadataFilter = Union[FilterExpression, Mapping[str, Any]]


def _check_raw(node: Any, path: str) -> None:
    if isinstance(node, Mapping):
        for key, value in node.items():
            if not isinstance(key, str):
                raise ValidationError(
                    "Filter keys must be strings",
                    details={"path": path or "<root>", "key": repr(key)},
                )
            if key.startswith("$") and key not in _LOGICAL | _OPERATORS:
                raise ValidationError(
                    f"Unknown filter operator: {key}",
                    details={"path": path or "<root>"},
                )
            _check_raw(value, f"{path}.{key}" if path else key)
    elif isinstance(node, list):
        for position, item in enumerate(node):
            _check_raw(item, f"{path}[{position}]")
    else:
        _check_operand(node, path)


def filter_to_wire(expr: MetadataFilter | None) -> dict[str, Any] | None:
    """Convert a filter expression or raw mapping to its wire form.

    Raw mappings are passed through with their key order intact after the
    operators have been checked.

    Raises:
        ValidationError: On unknown operators or unsupported types.
    """
    if expr is None:
        return None
    if isinstance(expr, FilterExpression):
        return expr.to_wire()
    if isinstance(expr, Mapping):
        _check_raw(expr, "")
        return dict(expr)
    raise ValidationError(
        "Filter must be a FilterExpression or a mapping",
        details={"type": type(expr).__name__},
    )
