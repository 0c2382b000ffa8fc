"""UI-facing filter state and per-field filter metadata.

``ActiveFilter`` is the flat (field, operator, value) record a table
toolbar produces.  It is deliberately a different type from the
expression tree in :mod:`.expressions`; the two meet only at the wire
format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union


class ODataOperator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    IN = "in"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"


METHOD_OPERATORS = frozenset({
    ODataOperator.CONTAINS,
    ODataOperator.STARTSWITH,
    ODataOperator.ENDSWITH,
})


class FilterFieldType(str, Enum):
    BOOLEAN = "boolean"
    STRING = "string"
    ENUM = "enum"
    NUMBER = "number"
    DATE = "date"
    REFERENCE = "reference"


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: str


@dataclass(frozen=True)
class FilterFieldMetadata:
    """Declares how one field may be filtered.

    ``operators[0]`` is the field's default operator: it is what a bare
    ``f[Field]=value`` URL parameter decodes to.  ``client_side`` marks
    fields the backend cannot filter on (typically navigation properties
    such as ``ad_user/Phone``); they are applied in memory after fetch.
    """

    label: str
    type: FilterFieldType
    operators: tuple[ODataOperator, ...]
    client_side: bool = False
    searchable: bool = False
    options: tuple[FilterOption, ...] = ()
    model_name: Optional[str] = None  # reference fields only

    @property
    def default_operator(self) -> ODataOperator:
        return self.operators[0] if self.operators else ODataOperator.EQ


ModelFilterMetadata = Mapping[str, FilterFieldMetadata]


@dataclass(frozen=True)
class ActiveFilter:
    """Runtime filter state.  A tuple ``value`` is a multi-select."""

    field: str
    operator: ODataOperator
    value: Union[str, tuple[str, ...]]

    def value_as_string(self) -> str:
        if isinstance(self.value, tuple):
            return ",".join(self.value)
        return str(self.value)


@dataclass(frozen=True)
class FilterGroup:
    id: str
    title: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class FilterSchema:
    metadata: Mapping[str, FilterFieldMetadata]
    groups: tuple[FilterGroup, ...] = field(default=())
    model_name: Optional[str] = None


def field_metadata(
    label: str,
    type: FilterFieldType | str,
    operators,
    **kwargs,
) -> FilterFieldMetadata:
    """Shorthand that accepts plain strings for type and operators."""
    return FilterFieldMetadata(
        label=label,
        type=FilterFieldType(type),
        operators=tuple(ODataOperator(op) for op in operators),
        **kwargs,
    )


def generate_filter_schema(model_name: str, metadata: ModelFilterMetadata) -> FilterSchema:
    """Group a model's filterable fields for toolbar display.

    Boolean fields become "Status", enum/reference fields
    "Classification", searchable strings "Personal Information".  Date
    fields get their own range picker and are not grouped.
    """
    names = list(metadata)
    groups: list[FilterGroup] = []

    booleans = tuple(n for n in names if metadata[n].type == FilterFieldType.BOOLEAN)
    if booleans:
        groups.append(FilterGroup(id="status", title="Status", fields=booleans))

    classification = tuple(
        n for n in names
        if metadata[n].type in (FilterFieldType.ENUM, FilterFieldType.REFERENCE)
    )
    if classification:
        groups.append(FilterGroup(id="classification", title="Classification", fields=classification))

    personal = tuple(
        n for n in names
        if metadata[n].type == FilterFieldType.STRING and metadata[n].searchable
    )
    if personal:
        groups.append(FilterGroup(id="personal", title="Personal Information", fields=personal))

    return FilterSchema(metadata=dict(metadata), groups=tuple(groups), model_name=model_name)


__all__ = [
    "ODataOperator",
    "METHOD_OPERATORS",
    "FilterFieldType",
    "FilterOption",
    "FilterFieldMetadata",
    "ModelFilterMetadata",
    "ActiveFilter",
    "FilterGroup",
    "FilterSchema",
    "field_metadata",
    "generate_filter_schema",
]
