"""Fluent query builder for the iDempiere REST API.

Accumulates filter / sort / paging / projection / expansion state and
renders it through :mod:`.serializer`::

    params = (
        QueryBuilder()
        .filter("Name", "eq", "John")
        .and_("IsActive", "eq", True)
        .order_by("Created", "desc")
        .top(10)
        .build()
        .params
    )
    # {"$filter": "Name eq 'John' AND IsActive eq true",
    #  "$orderby": "Created desc", "$top": "10"}

A builder is mutable and meant for one logical query; ``clone()`` before
branching.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Union

from schooladmin.domain.odata.expressions import (
    CompoundFilter,
    FilterExpression,
    InFilter,
    LogicalFilter,
    LogicalJoin,
    MethodFilter,
    NotFilter,
    Scalar,
    filter_,
    in_filter,
    method_filter,
)
from schooladmin.domain.odata.query_config import (
    ExpandClause,
    IdempiereOptions,
    OrderByClause,
    QueryConfig,
    order_by as make_order_by,
)

from . import serializer

_EXPRESSION_TYPES = (LogicalFilter, MethodFilter, InFilter, CompoundFilter, NotFilter)


@dataclass
class BuiltQuery:
    params: dict[str, str] = field(default_factory=dict)
    url: str = ""


class QueryBuilder:
    """Mutable, chainable OData query builder."""

    def __init__(self) -> None:
        self._config = QueryConfig()

    # -- Filters -----------------------------------------------------------

    def where(self, expr: FilterExpression) -> QueryBuilder:
        """Replace the current filter with a prebuilt expression."""
        self._config.filter = expr
        return self

    def filter(
        self,
        field_or_expr: Union[str, FilterExpression],
        operator=None,
        value: Scalar = None,
    ) -> QueryBuilder:
        """Start a new filter chain.

        Accepts either ``(field, operator, value)`` or a single prebuilt
        expression such as ``and_(filter_(...), filter_(...))``.
        """
        return self.where(self._coerce(field_or_expr, operator, value))

    def method_filter(self, operator, field_name: str, value: Scalar) -> QueryBuilder:
        return self.where(method_filter(operator, field_name, value))

    def in_filter(self, field_name: str, values) -> QueryBuilder:
        return self.where(in_filter(field_name, values))

    def and_(self, field_or_expr, operator=None, value: Scalar = None) -> QueryBuilder:
        return self._combine(LogicalJoin.AND, self._coerce(field_or_expr, operator, value))

    def or_(self, field_or_expr, operator=None, value: Scalar = None) -> QueryBuilder:
        return self._combine(LogicalJoin.OR, self._coerce(field_or_expr, operator, value))

    def not_(self) -> QueryBuilder:
        """Negate the current filter; no-op when there is none."""
        if self._config.filter is not None:
            self._config.filter = NotFilter(filter=self._config.filter)
        return self

    def _combine(self, join: LogicalJoin, expr: FilterExpression) -> QueryBuilder:
        current = self._config.filter
        if current is None:
            return self.where(expr)
        return self.where(CompoundFilter(operator=join, left=current, right=expr))

    @staticmethod
    def _coerce(field_or_expr, operator, value) -> FilterExpression:
        if isinstance(field_or_expr, _EXPRESSION_TYPES):
            return field_or_expr
        return filter_(field_or_expr, operator, value)

    # -- Sorting / paging --------------------------------------------------

    def order_by(self, field_name: str, order=None) -> QueryBuilder:
        self._config.order_by = make_order_by(field_name, order)
        return self

    def order_by_multiple(self, *clauses: OrderByClause) -> QueryBuilder:
        self._config.order_by = list(clauses)
        return self

    def top(self, count: int) -> QueryBuilder:
        self._config.top = count
        return self

    def skip(self, count: int) -> QueryBuilder:
        self._config.skip = count
        return self

    def paginate(self, page: int, page_size: int) -> QueryBuilder:
        """Set ``$skip``/``$top`` for a 1-based *page*."""
        self._config.skip = (page - 1) * page_size
        self._config.top = page_size
        return self

    # -- Projection / expansion --------------------------------------------

    def select(self, *fields: str) -> QueryBuilder:
        self._config.select = list(fields)
        return self

    def expand(self, *clauses: ExpandClause) -> QueryBuilder:
        self._config.expand = clauses[0] if len(clauses) == 1 else list(clauses)
        return self

    # -- iDempiere options -------------------------------------------------

    def _options(self) -> IdempiereOptions:
        if self._config.idempiere is None:
            self._config.idempiere = IdempiereOptions()
        return self._config.idempiere

    def with_idempiere_options(self, options: IdempiereOptions) -> QueryBuilder:
        """Merge *options* over the current ones; unset fields are kept."""
        current = self._options()
        if options.valrule is not None:
            current.valrule = options.valrule
        if options.context:
            current.context = {**current.context, **options.context}
        current.showsql = current.showsql or options.showsql
        current.showsql_no_data = current.showsql_no_data or options.showsql_no_data
        if options.label is not None:
            current.label = options.label
        if options.showlabel is not None:
            current.showlabel = copy.copy(options.showlabel)
        return self

    def with_val_rule(self, valrule: Union[str, int]) -> QueryBuilder:
        self._options().valrule = valrule
        return self

    def with_context(self, name: str, value: Scalar) -> QueryBuilder:
        self._options().context[name] = value
        return self

    def with_show_sql(self, no_data: bool = False) -> QueryBuilder:
        if no_data:
            self._options().showsql_no_data = True
        else:
            self._options().showsql = True
        return self

    def with_label(self, label: str) -> QueryBuilder:
        self._options().label = label
        return self

    def with_show_label(self, columns=True) -> QueryBuilder:
        self._options().showlabel = True if columns is True else list(columns)
        return self

    # -- Output ------------------------------------------------------------

    def to_config(self) -> QueryConfig:
        return copy.deepcopy(self._config)

    def build(self) -> BuiltQuery:
        return BuiltQuery(params=serializer.render_params(self._config))

    def to_query_string(self) -> str:
        return serializer.encode_params(self.build().params)

    def reset(self) -> QueryBuilder:
        self._config = QueryConfig()
        return self

    def clone(self) -> QueryBuilder:
        cloned = QueryBuilder()
        cloned._config = copy.deepcopy(self._config)
        return cloned


# ── Config-driven helpers ───────────────────────────────────────────────


def build_query(config: QueryConfig) -> BuiltQuery:
    """Build params from a ready-made ``QueryConfig``."""
    builder = QueryBuilder()
    if config.filter is not None:
        builder.where(config.filter)
    if config.order_by:
        if isinstance(config.order_by, OrderByClause):
            builder.order_by(config.order_by.field, config.order_by.order)
        else:
            builder.order_by_multiple(*config.order_by)
    if config.top is not None:
        builder.top(config.top)
    if config.skip is not None:
        builder.skip(config.skip)
    if config.select:
        builder.select(*config.select)
    if config.expand:
        if isinstance(config.expand, ExpandClause):
            builder.expand(config.expand)
        else:
            builder.expand(*config.expand)
    if config.idempiere is not None:
        builder.with_idempiere_options(config.idempiere)
    return builder.build()


def to_query_string(config: QueryConfig) -> str:
    return serializer.encode_params(build_query(config).params)


__all__ = [
    "BuiltQuery",
    "QueryBuilder",
    "build_query",
    "to_query_string",
]
