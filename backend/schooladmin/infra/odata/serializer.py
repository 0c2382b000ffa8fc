"""Render filter expressions and query configuration as OData wire syntax.

Every function here is pure and total: any well-formed expression or
``QueryConfig`` renders without raising.

String values are wrapped in single quotes with no escaping of embedded
quotes.  The backend does not accept ``''`` escapes consistently, so
values are passed through verbatim; callers must not feed untrusted input
into quoted positions expecting injection safety.
"""

from __future__ import annotations

from typing import Mapping, Sequence, Union
from urllib.parse import urlencode

from schooladmin.domain.odata.expressions import (
    CompoundFilter,
    FilterExpression,
    InFilter,
    LogicalFilter,
    MethodFilter,
    NotFilter,
    Scalar,
)
from schooladmin.domain.odata.query_config import (
    ExpandClause,
    IdempiereOptions,
    OrderByClause,
    QueryConfig,
)

# ── Parameter names ─────────────────────────────────────────────────────

FILTER = "$filter"
ORDERBY = "$orderby"
TOP = "$top"
SKIP = "$skip"
SELECT = "$select"
EXPAND = "$expand"
VALRULE = "$valrule"
CONTEXT = "$context"
SHOWSQL = "showsql"
LABEL = "label"
SHOWLABEL = "showlabel"


# ── Values ──────────────────────────────────────────────────────────────


def quote(value: object) -> str:
    return f"'{value}'"


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def format_value(value: Scalar) -> str:
    """Render a scalar by its Python type: strings quoted, the rest bare."""
    # bool first: it is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return quote(value)


# ── Filters ─────────────────────────────────────────────────────────────


def render_filter(expr: FilterExpression, nested: bool = False) -> str:
    """Render *expr* as a ``$filter`` string.

    A compound rendered as the operand of another compound (or of NOT)
    is parenthesised so the original grouping survives; the top-level
    expression never is.
    """
    if isinstance(expr, LogicalFilter):
        return f"{expr.field} {expr.operator.value} {format_value(expr.value)}"
    if isinstance(expr, MethodFilter):
        return f"{expr.operator.value}({expr.field},{quote(expr.value)})"
    if isinstance(expr, InFilter):
        values = ",".join(format_value(v) for v in expr.values)
        return f"{expr.field} in ({values})"
    if isinstance(expr, CompoundFilter):
        left = render_filter(expr.left, nested=True)
        right = render_filter(expr.right, nested=True)
        expression = f"{left} {expr.operator.value.upper()} {right}"
        return f"({expression})" if nested else expression
    if isinstance(expr, NotFilter):
        return f"NOT {render_filter(expr.filter, nested=True)}"
    raise TypeError(f"Unsupported filter node: {type(expr).__name__}")


# ── Order / expand ──────────────────────────────────────────────────────


def render_order_by(order_by: Union[OrderByClause, Sequence[OrderByClause]]) -> str:
    clauses = [order_by] if isinstance(order_by, OrderByClause) else list(order_by)
    return ",".join(
        f"{c.field} {c.order.value}" if c.order is not None else c.field
        for c in clauses
    )


def render_single_expand(clause: ExpandClause) -> str:
    expression = clause.field
    if clause.custom_join_key:
        expression = f"{clause.field}.{clause.custom_join_key}"

    nested: list[str] = []
    if clause.select:
        nested.append(f"{SELECT}={','.join(clause.select)}")
    if clause.filter is not None:
        nested.append(f"{FILTER}={render_filter(clause.filter)}")
    if clause.order_by is not None:
        nested.append(f"{ORDERBY}={render_order_by(clause.order_by)}")
    if clause.top is not None:
        nested.append(f"{TOP}={clause.top}")
    if clause.skip is not None:
        nested.append(f"{SKIP}={clause.skip}")

    if nested:
        expression += f"({'; '.join(nested)})"
    return expression


def render_expand(expand: Union[ExpandClause, Sequence[ExpandClause]]) -> str:
    clauses = [expand] if isinstance(expand, ExpandClause) else list(expand)
    return ",".join(render_single_expand(c) for c in clauses)


# ── iDempiere options ───────────────────────────────────────────────────


def render_context(context: Mapping[str, Scalar]) -> str:
    return ",".join(f"{key}:{_plain(value)}" for key, value in context.items())


def _plain(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def render_idempiere_options(options: IdempiereOptions) -> dict[str, str]:
    params: dict[str, str] = {}
    if options.valrule is not None:
        params[VALRULE] = str(options.valrule)
    if options.context:
        params[CONTEXT] = render_context(options.context)
    if options.showsql:
        params[SHOWSQL] = "true"
    if options.showsql_no_data:
        params[SHOWSQL] = "nodata"
    if options.label:
        params[LABEL] = options.label
    if options.showlabel is True:
        params[SHOWLABEL] = "true"
    elif isinstance(options.showlabel, (list, tuple)):
        params[SHOWLABEL] = ",".join(options.showlabel)
    return params


# ── Whole query ─────────────────────────────────────────────────────────


def render_params(config: QueryConfig) -> dict[str, str]:
    """Render *config* as a flat ``{param_name: value}`` map."""
    params: dict[str, str] = {}
    if config.filter is not None:
        params[FILTER] = render_filter(config.filter)
    if config.order_by:
        params[ORDERBY] = render_order_by(config.order_by)
    if config.top is not None:
        params[TOP] = str(config.top)
    if config.skip is not None:
        params[SKIP] = str(config.skip)
    if config.select:
        params[SELECT] = ",".join(config.select)
    if config.expand:
        params[EXPAND] = render_expand(config.expand)
    if config.idempiere is not None:
        params.update(render_idempiere_options(config.idempiere))
    return params


def encode_params(params: Mapping[str, str]) -> str:
    """Percent-encode a param map as a URL query string."""
    return urlencode(list(params.items()))


__all__ = [
    "FILTER",
    "ORDERBY",
    "TOP",
    "SKIP",
    "SELECT",
    "EXPAND",
    "VALRULE",
    "CONTEXT",
    "SHOWSQL",
    "LABEL",
    "SHOWLABEL",
    "quote",
    "format_number",
    "format_value",
    "render_filter",
    "render_order_by",
    "render_single_expand",
    "render_expand",
    "render_context",
    "render_idempiere_options",
    "render_params",
    "encode_params",
]
