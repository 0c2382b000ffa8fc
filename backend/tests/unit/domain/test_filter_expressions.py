"""Unit tests for the filter expression constructors."""

import pytest

from schooladmin.domain.common.errors import InvalidArgumentError
from schooladmin.domain.odata.expressions import (
    ComparisonOperator,
    CompoundFilter,
    InFilter,
    LogicalFilter,
    LogicalJoin,
    MethodFilter,
    MethodOperator,
    NotFilter,
    and_,
    filter_,
    in_filter,
    method_filter,
    not_,
    or_,
)


class TestLeafConstructors:
    def test_filter_coerces_operator_string(self):
        expr = filter_("Name", "eq", "John")
        assert expr == LogicalFilter("Name", ComparisonOperator.EQ, "John")

    def test_method_filter_coerces_operator_string(self):
        expr = method_filter("contains", "Name", "John")
        assert expr == MethodFilter(MethodOperator.CONTAINS, "Name", "John")

    def test_in_filter_stores_values_as_tuple(self):
        expr = in_filter("C_BPartner_ID", [1, 2, 3])
        assert expr == InFilter("C_BPartner_ID", (1, 2, 3))

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValueError):
            filter_("Name", "like", "John")

    def test_nodes_are_immutable(self):
        expr = filter_("Name", "eq", "John")
        with pytest.raises(AttributeError):
            expr.value = "Jane"


class TestCombinators:
    def test_single_filter_returned_unchanged(self):
        a = filter_("IsActive", "eq", True)
        assert and_(a) is a
        assert or_(a) is a

    def test_and_folds_left(self):
        a, b, c = filter_("A", "eq", 1), filter_("B", "eq", 2), filter_("C", "eq", 3)
        expr = and_(a, b, c)
        assert expr == CompoundFilter(
            LogicalJoin.AND,
            CompoundFilter(LogicalJoin.AND, a, b),
            c,
        )

    def test_or_uses_or_join(self):
        a, b = filter_("A", "eq", 1), filter_("B", "eq", 2)
        assert or_(a, b).operator == LogicalJoin.OR

    @pytest.mark.parametrize("combinator", [and_, or_])
    def test_empty_combination_raises(self, combinator):
        with pytest.raises(InvalidArgumentError):
            combinator()

    def test_empty_combination_is_value_error(self):
        with pytest.raises(ValueError):
            and_()

    def test_not_wraps_expression(self):
        a = filter_("IsActive", "eq", True)
        assert not_(a) == NotFilter(a)
