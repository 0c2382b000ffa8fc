"""Sort, expand and iDempiere option types that make up a query.

``QueryConfig`` is the plain-data counterpart of the fluent
``QueryBuilder``: callers that already know every part of the query can
fill one in and hand it to ``build_query``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .expressions import FilterExpression, Scalar


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class OrderByClause:
    """``$orderby`` entry.  ``order=None`` leaves the direction implicit (ascending)."""

    field: str
    order: Optional[SortOrder] = None


@dataclass(frozen=True)
class ExpandClause:
    """``$expand`` entry with optional nested query options.

    Renders as ``C_OrderLine($select=Line; $filter=LineNetAmt gt 1000)``,
    or ``C_Order.salesrep_id(...)`` when ``custom_join_key`` is set.
    """

    field: str
    select: tuple[str, ...] = ()
    filter: Optional[FilterExpression] = None
    order_by: Optional[OrderByClause] = None
    top: Optional[int] = None
    skip: Optional[int] = None
    custom_join_key: Optional[str] = None


@dataclass
class IdempiereOptions:
    """iDempiere-specific query parameters."""

    valrule: Optional[Union[str, int]] = None
    # Insertion order is the wire order of ``$context``.
    context: dict[str, Scalar] = field(default_factory=dict)
    showsql: bool = False
    showsql_no_data: bool = False
    label: Optional[str] = None
    showlabel: Optional[Union[bool, list[str]]] = None


@dataclass
class QueryConfig:
    """Complete query = filter + sort + paging + projection + expansion."""

    filter: Optional[FilterExpression] = None
    order_by: Optional[Union[OrderByClause, list[OrderByClause]]] = None
    top: Optional[int] = None
    skip: Optional[int] = None
    select: list[str] = field(default_factory=list)
    expand: Optional[Union[ExpandClause, list[ExpandClause]]] = None
    idempiere: Optional[IdempiereOptions] = None


def order_by(field_name: str, order: SortOrder | str | None = None) -> OrderByClause:
    return OrderByClause(field=field_name, order=SortOrder(order) if order is not None else None)


def expand(
    field_name: str,
    *,
    select=(),
    filter: Optional[FilterExpression] = None,
    order_by: Optional[OrderByClause] = None,
    top: Optional[int] = None,
    skip: Optional[int] = None,
    custom_join_key: Optional[str] = None,
) -> ExpandClause:
    return ExpandClause(
        field=field_name,
        select=tuple(select),
        filter=filter,
        order_by=order_by,
        top=top,
        skip=skip,
        custom_join_key=custom_join_key,
    )


__all__ = [
    "SortOrder",
    "OrderByClause",
    "ExpandClause",
    "IdempiereOptions",
    "QueryConfig",
    "order_by",
    "expand",
]
