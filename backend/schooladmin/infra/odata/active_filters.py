"""Translate flat UI ``ActiveFilter`` lists into an OData ``$filter`` string.

This path does not go through the expression tree.  Values arrive as
strings from the URL, so formatting is driven by the field's declared
type rather than by the Python type of the value.  Distinct filters join
with lowercase ``and``; the fluent builder uses uppercase ``AND``.  Both
are accepted by the backend and the two call paths are kept separate.

Fields with no metadata are skipped silently so stale metadata never
breaks a whole query.  Fields flagged ``client_side`` are skipped too and
returned by :func:`get_client_side_filters` for in-memory filtering.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from schooladmin.domain.odata.filter_metadata import (
    METHOD_OPERATORS,
    ActiveFilter,
    FilterFieldMetadata,
    FilterFieldType,
    FilterSchema,
    ODataOperator,
)

logger = logging.getLogger(__name__)

MetadataSource = Union[Mapping[str, FilterFieldMetadata], FilterSchema, Sequence[FilterFieldMetadata]]


def _as_mapping(metadata: MetadataSource) -> Mapping[str, FilterFieldMetadata]:
    if isinstance(metadata, FilterSchema):
        return metadata.metadata
    if isinstance(metadata, Mapping):
        return metadata
    # An unkeyed sequence cannot be looked up by field name.
    return {}


# ── Wire clauses ────────────────────────────────────────────────────────


def format_odata_value(value: str, field_type: FilterFieldType) -> str:
    if field_type == FilterFieldType.NUMBER:
        return value
    if field_type == FilterFieldType.BOOLEAN:
        return value.lower()
    # string, enum, reference, date
    return f"'{value}'"


def build_single_value_clause(
    field: str,
    operator: ODataOperator,
    value: str,
    field_type: FilterFieldType,
) -> str:
    if operator in METHOD_OPERATORS:
        return f"{operator.value}({field},'{value}')"
    if operator == ODataOperator.IN:
        values = ",".join(f"'{v.strip()}'" for v in value.split(","))
        return f"{field} in ({values})"
    return f"{field} {operator.value} {format_odata_value(value, field_type)}"


def build_filter_clause(
    field: str,
    operator: ODataOperator,
    value: Union[str, Sequence[str]],
    field_type: FilterFieldType,
) -> Optional[str]:
    """One filter's clause.  Multi-select values become an OR group."""
    if isinstance(value, str):
        return build_single_value_clause(field, operator, value, field_type)

    values = list(value)
    if not values:
        return None
    if len(values) == 1:
        return build_single_value_clause(field, operator, values[0], field_type)
    clauses = [build_single_value_clause(field, operator, v, field_type) for v in values]
    return f"({' or '.join(clauses)})"


def build_odata_filter(
    active_filters: Sequence[ActiveFilter],
    metadata: MetadataSource,
) -> Optional[str]:
    """Build the ``$filter`` string for *active_filters*, or None if nothing applies."""
    if not active_filters:
        return None

    lookup = _as_mapping(metadata)
    clauses: list[str] = []

    for active in active_filters:
        meta = lookup.get(active.field)
        if meta is None:
            logger.debug("No filter metadata for field %s, skipping", active.field)
            continue
        if meta.client_side:
            continue

        clause = build_filter_clause(
            active.field, ODataOperator(active.operator), active.value, meta.type
        )
        if clause:
            clauses.append(clause)

    return " and ".join(clauses) if clauses else None


def get_client_side_filters(
    active_filters: Sequence[ActiveFilter],
    metadata: MetadataSource,
) -> list[ActiveFilter]:
    """Return the filters ``build_odata_filter`` left out as client-side."""
    if not active_filters:
        return []
    lookup = _as_mapping(metadata)
    return [
        active for active in active_filters
        if active.field in lookup and lookup[active.field].client_side
    ]


# ── In-memory evaluation ────────────────────────────────────────────────


def _parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def _value_matches(actual: Any, operator: ODataOperator, expected: str) -> bool:
    if actual is None:
        return False
    if operator == ODataOperator.CONTAINS:
        return expected.lower() in str(actual).lower()
    if operator == ODataOperator.EQ:
        return str(actual) == expected
    if operator in (ODataOperator.GT, ODataOperator.GE, ODataOperator.LT, ODataOperator.LE):
        left, right = _parse_date(actual), _parse_date(expected)
        if left is None or right is None:
            return False
        if operator == ODataOperator.GT:
            return left > right
        if operator == ODataOperator.GE:
            return left >= right
        if operator == ODataOperator.LT:
            return left < right
        return left <= right
    return False


def matches_client_side_filters(record: Mapping[str, Any], filters: Iterable[ActiveFilter]) -> bool:
    """True when *record* satisfies every client-side filter.

    A navigation field ``entity/Field`` matches when ANY expanded
    ``record[entity]`` row matches.  Plain fields were already filtered
    by the server and always match.
    """
    for active in filters:
        if "/" not in active.field:
            continue
        entity, _, field_name = active.field.partition("/")
        related = record.get(entity)
        if not isinstance(related, list) or not related:
            return False
        operator = ODataOperator(active.operator)
        expected = active.value_as_string()
        if not any(
            isinstance(row, Mapping) and _value_matches(row.get(field_name), operator, expected)
            for row in related
        ):
            return False
    return True


def apply_client_side_filters(
    records: Sequence[Mapping[str, Any]],
    filters: Sequence[ActiveFilter],
) -> list[Mapping[str, Any]]:
    if not filters:
        return list(records)
    return [r for r in records if matches_client_side_filters(r, filters)]


__all__ = [
    "format_odata_value",
    "build_single_value_clause",
    "build_filter_clause",
    "build_odata_filter",
    "get_client_side_filters",
    "matches_client_side_filters",
    "apply_client_side_filters",
]
