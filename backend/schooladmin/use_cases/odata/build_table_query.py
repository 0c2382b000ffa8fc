"""BuildTableQueryUseCase: OData params for one page of a data table.

This use case owns the rules for turning table state into a request:
  1. Default sort ``Name asc`` unless the table has a sorting state
  2. Map UI column ids to API field names for ``$orderby``
  3. Add a ``contains`` clause for the search box, but only when the
     searchable field's metadata allows it
  4. Pending (not yet URL-synced) filters override URL filters
  5. Join everything with lowercase ``and``

Client-side filters are split off and returned alongside the params.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from schooladmin.domain.odata.filter_metadata import ActiveFilter, FilterSchema
from schooladmin.domain.odata.models import ODataQueryParams
from schooladmin.infra.odata.active_filters import (
    build_odata_filter,
    get_client_side_filters,
)

logger = logging.getLogger(__name__)

DEFAULT_ORDER_BY = "Name asc"
DEFAULT_TABLE_PAGE_SIZE = 10


# ── Query (input) ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SortState:
    """One column of the table's sorting state."""

    id: str
    desc: bool = False


@dataclass(frozen=True)
class BuildTableQuery:
    """Immutable description of the table's current state."""

    schema: FilterSchema
    active_filters: tuple[ActiveFilter, ...] = ()
    search_query: str = ""
    searchable_field: Optional[str] = None
    page_size: int = DEFAULT_TABLE_PAGE_SIZE
    current_page: int = 1
    sorting: tuple[SortState, ...] = ()
    field_name_map: Mapping[str, str] = field(default_factory=dict)
    pending_filters: Optional[tuple[ActiveFilter, ...]] = None
    default_order_by: str = DEFAULT_ORDER_BY


# ── Result (output) ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class BuildTableQueryResult:
    params: ODataQueryParams
    client_side_filters: tuple[ActiveFilter, ...] = ()


# ── Use Case ────────────────────────────────────────────────────────────


class BuildTableQueryUseCase:
    """Compute OData query params from table filter/sort/paging state."""

    def execute(self, query: BuildTableQuery) -> BuildTableQueryResult:
        order_by = query.default_order_by
        if query.sorting:
            order_by = ", ".join(
                f"{query.field_name_map.get(s.id, s.id)} {'desc' if s.desc else 'asc'}"
                for s in query.sorting
            )

        effective = query.pending_filters if query.pending_filters is not None else query.active_filters

        clauses: list[str] = []
        if query.search_query and query.searchable_field:
            meta = query.schema.metadata.get(query.searchable_field)
            if meta is not None and meta.searchable:
                clauses.append(f"contains({query.searchable_field},'{query.search_query}')")
            else:
                logger.debug(
                    "Field %s is not searchable, ignoring search %r",
                    query.searchable_field,
                    query.search_query,
                )

        filter_string = build_odata_filter(list(effective), query.schema)
        if filter_string:
            clauses.append(filter_string)

        params = ODataQueryParams(
            orderby=order_by,
            top=query.page_size,
            skip=(query.current_page - 1) * query.page_size,
            filter=" and ".join(clauses) if clauses else None,
        )
        return BuildTableQueryResult(
            params=params,
            client_side_filters=tuple(get_client_side_filters(list(effective), query.schema)),
        )
