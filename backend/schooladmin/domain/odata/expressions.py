"""Filter expression model for OData ``$filter`` clauses.

Five immutable node types describe a boolean filter:

* **LogicalFilter**: ``field op value`` comparison.
* **MethodFilter**: ``contains`` / ``startswith`` / ``endswith`` call.
* **InFilter**: membership test against a list of values.
* **CompoundFilter**: AND/OR of two expressions.
* **NotFilter**: negation of an expression.

The constructor functions at the bottom of the module are the intended
way to assemble trees; rendering to wire syntax lives in
``schooladmin.infra.odata.serializer``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..common.errors import InvalidArgumentError

Scalar = Union[str, int, float, bool]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ComparisonOperator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"


class MethodOperator(str, Enum):
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"


class LogicalJoin(str, Enum):
    AND = "and"
    OR = "or"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogicalFilter:
    """Leaf: ``Name eq 'John'``."""

    field: str
    operator: ComparisonOperator
    value: Scalar


@dataclass(frozen=True)
class MethodFilter:
    """Leaf: ``contains(Name,'John')``."""

    operator: MethodOperator
    field: str
    value: Scalar


@dataclass(frozen=True)
class InFilter:
    """Leaf: ``ID in (1,2,3)``."""

    field: str
    values: tuple[Scalar, ...]


@dataclass(frozen=True)
class CompoundFilter:
    """Binary AND/OR of two expressions."""

    operator: LogicalJoin
    left: FilterExpression
    right: FilterExpression


@dataclass(frozen=True)
class NotFilter:
    filter: FilterExpression


FilterExpression = Union[LogicalFilter, MethodFilter, InFilter, CompoundFilter, NotFilter]


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def filter_(field: str, operator: ComparisonOperator | str, value: Scalar) -> LogicalFilter:
    """Build a comparison such as ``filter_("IsActive", "eq", True)``."""
    return LogicalFilter(field=field, operator=ComparisonOperator(operator), value=value)


def method_filter(operator: MethodOperator | str, field: str, value: Scalar) -> MethodFilter:
    return MethodFilter(operator=MethodOperator(operator), field=field, value=value)


def in_filter(field: str, values) -> InFilter:
    return InFilter(field=field, values=tuple(values))


def _fold(join: LogicalJoin, filters: tuple[FilterExpression, ...]) -> FilterExpression:
    if not filters:
        raise InvalidArgumentError(f"{join.value.upper()} requires at least one filter")
    result = filters[0]
    for expr in filters[1:]:
        result = CompoundFilter(operator=join, left=result, right=expr)
    return result


def and_(*filters: FilterExpression) -> FilterExpression:
    """Combine expressions with AND, left to right.

    A single argument is returned unchanged; ``and_(a, b, c)`` yields
    ``((a AND b) AND c)``.

    Raises:
        InvalidArgumentError: when called with no expressions.
    """
    return _fold(LogicalJoin.AND, filters)


def or_(*filters: FilterExpression) -> FilterExpression:
    """Combine expressions with OR, left to right (see :func:`and_`)."""
    return _fold(LogicalJoin.OR, filters)


def not_(expr: FilterExpression) -> NotFilter:
    return NotFilter(filter=expr)


__all__ = [
    "Scalar",
    "ComparisonOperator",
    "MethodOperator",
    "LogicalJoin",
    "LogicalFilter",
    "MethodFilter",
    "InFilter",
    "CompoundFilter",
    "NotFilter",
    "FilterExpression",
    "filter_",
    "method_filter",
    "in_filter",
    "and_",
    "or_",
    "not_",
]
