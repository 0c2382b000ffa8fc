"""Bidirectional sync between table filter state and URL query parameters.

Each active filter is stored as ``f[Field]=value``, or as
``f[Field][operator]=value`` when the operator is not the field's
default or when several filters share the field (date ranges:
``f[Created][ge]=...&f[Created][le]=...``).  Free-text search lives in
``q``.  Every other parameter on the URL is left alone.

Decoding never fails: keys that do not parse are skipped.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import parse_qsl, unquote, urlencode

from fastapi import Request

from schooladmin.domain.odata.filter_metadata import (
    ActiveFilter,
    FilterFieldMetadata,
    FilterSchema,
    ODataOperator,
)
from schooladmin.domain.odata.ports import UrlNavigator

logger = logging.getLogger(__name__)

FILTER_PARAM_PREFIX = "f"
SEARCH_PARAM = "q"

_FILTER_KEY_RE = re.compile(r"^f\[([^\]]+)\](?:\[([^\]]+)\])?$")

QueryParams = Union[str, Mapping[str, str], Iterable[tuple[str, str]]]


# ---------------------------------------------------------------------------
# Param list helpers
# ---------------------------------------------------------------------------


def to_pairs(query_params: QueryParams) -> list[tuple[str, str]]:
    """Normalise a query string, mapping or pair list into ordered pairs."""
    if isinstance(query_params, str):
        return parse_qsl(query_params.lstrip("?"), keep_blank_values=True)
    if hasattr(query_params, "multi_items"):
        # starlette QueryParams keeps repeated keys
        return list(query_params.multi_items())
    if isinstance(query_params, Mapping):
        return [(k, str(v)) for k, v in query_params.items()]
    return [(k, str(v)) for k, v in query_params]


def is_filter_key(key: str) -> bool:
    if key.startswith(f"{FILTER_PARAM_PREFIX}["):
        return True
    return key.lower().startswith(f"{FILTER_PARAM_PREFIX}%5b")


def _default_operator(metadata: Mapping[str, FilterFieldMetadata], field_name: str) -> ODataOperator:
    meta = metadata.get(field_name)
    return meta.default_operator if meta is not None else ODataOperator.EQ


def _metadata_of(schema: Union[FilterSchema, Mapping[str, FilterFieldMetadata]]) -> Mapping[str, FilterFieldMetadata]:
    return schema.metadata if isinstance(schema, FilterSchema) else schema


# ---------------------------------------------------------------------------
# Encoding / decoding
# ---------------------------------------------------------------------------


def filter_param_key(active: ActiveFilter, with_operator: bool) -> str:
    key = f"{FILTER_PARAM_PREFIX}[{active.field}]"
    if with_operator:
        key += f"[{ODataOperator(active.operator).value}]"
    return key


def encode_filter_params(
    filters: Sequence[ActiveFilter],
    schema: Union[FilterSchema, Mapping[str, FilterFieldMetadata]],
) -> list[tuple[str, str]]:
    """Encode *filters* as ``(key, value)`` URL pairs."""
    metadata = _metadata_of(schema)
    per_field = Counter(f.field for f in filters)
    pairs = []
    for active in filters:
        with_operator = (
            per_field[active.field] > 1
            or ODataOperator(active.operator) != _default_operator(metadata, active.field)
        )
        pairs.append((filter_param_key(active, with_operator), active.value_as_string()))
    return pairs


def decode_active_filters(
    query_params: QueryParams,
    schema: Union[FilterSchema, Mapping[str, FilterFieldMetadata]],
) -> list[ActiveFilter]:
    """Parse every ``f[...]`` parameter into an ``ActiveFilter``."""
    metadata = _metadata_of(schema)
    filters: list[ActiveFilter] = []

    for raw_key, value in to_pairs(query_params):
        if not is_filter_key(raw_key):
            continue
        match = _FILTER_KEY_RE.match(unquote(raw_key))
        if match is None:
            logger.debug("Skipping unparseable filter key %r", raw_key)
            continue
        field_name, operator_token = match.group(1), match.group(2)
        if operator_token is None:
            operator = _default_operator(metadata, field_name)
        else:
            try:
                operator = ODataOperator(operator_token)
            except ValueError:
                logger.debug("Skipping filter %r with unknown operator %r", field_name, operator_token)
                continue
        filters.append(ActiveFilter(field=field_name, operator=operator, value=value))

    return filters


def decode_search_query(query_params: QueryParams) -> str:
    for key, value in to_pairs(query_params):
        if key == SEARCH_PARAM:
            return value
    return ""


def _render(pairs: list[tuple[str, str]]) -> str:
    return f"?{urlencode(pairs)}" if pairs else "?"


# ---------------------------------------------------------------------------
# Stateful view over one URL
# ---------------------------------------------------------------------------


class TableFilterState:
    """Filter/search state read from a URL, written back through a navigator.

    Writes use ``navigator.replace`` so typing in the search box or
    toggling filters does not pile up history entries; ``reset_all``
    uses ``push``.
    """

    def __init__(
        self,
        query_params: QueryParams,
        schema: Union[FilterSchema, Mapping[str, FilterFieldMetadata]],
        navigator: UrlNavigator,
    ):
        self._pairs = to_pairs(query_params)
        self.schema = schema
        self.navigator = navigator

    @property
    def query_params(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    @property
    def active_filters(self) -> list[ActiveFilter]:
        return decode_active_filters(self._pairs, self.schema)

    @property
    def search_query(self) -> str:
        return decode_search_query(self._pairs)

    def set_active_filters(self, filters: Sequence[ActiveFilter]) -> str:
        kept = [(k, v) for k, v in self._pairs if not is_filter_key(k)]
        self._pairs = kept + encode_filter_params(filters, self.schema)
        url = _render(self._pairs)
        self.navigator.replace(url)
        return url

    def set_search_query(self, query: str) -> str:
        kept = [(k, v) for k, v in self._pairs if k != SEARCH_PARAM]
        if query:
            kept.append((SEARCH_PARAM, query))
        self._pairs = kept
        url = _render(self._pairs)
        self.navigator.replace(url)
        return url

    def reset_all(self) -> str:
        self._pairs = []
        self.navigator.push("?")
        return "?"

    def is_filter_active(self, field_name: str, value: str) -> bool:
        return any(
            f.field == field_name and f.value_as_string() == value
            for f in self.active_filters
        )


@dataclass
class RecordingNavigator:
    """Navigator that records target URLs instead of moving a browser.

    Server-side handlers use it to compute the canonical URL to redirect
    or link to.
    """

    history: list[str] = field(default_factory=list)
    location: Optional[str] = None

    def replace(self, url: str) -> None:
        self.location = url

    def push(self, url: str) -> None:
        self.history.append(url)
        self.location = url


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


def table_filter_state_dependency(
    schema: Union[FilterSchema, Mapping[str, FilterFieldMetadata]],
) -> Callable[[Request], TableFilterState]:
    """Build a ``Depends()`` target decoding the request's filter state."""

    def _dependency(request: Request) -> TableFilterState:
        return TableFilterState(request.query_params, schema, RecordingNavigator())

    return _dependency


__all__ = [
    "FILTER_PARAM_PREFIX",
    "SEARCH_PARAM",
    "to_pairs",
    "is_filter_key",
    "filter_param_key",
    "encode_filter_params",
    "decode_active_filters",
    "decode_search_query",
    "TableFilterState",
    "RecordingNavigator",
    "table_filter_state_dependency",
]
