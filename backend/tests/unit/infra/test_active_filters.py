"""Unit tests for the ActiveFilter → OData $filter adapter."""

import pytest

from schooladmin.domain.odata.filter_metadata import (
    ActiveFilter,
    FilterFieldType,
    ODataOperator,
    field_metadata,
)
from schooladmin.infra.odata.active_filters import (
    apply_client_side_filters,
    build_filter_clause,
    build_odata_filter,
    format_odata_value,
    get_client_side_filters,
    matches_client_side_filters,
)


def _active(field, operator, value):
    return ActiveFilter(field=field, operator=ODataOperator(operator), value=value)


class TestFormatValue:
    @pytest.mark.parametrize(
        "value, field_type, expected",
        [
            ("42", "number", "42"),
            ("True", "boolean", "true"),
            ("John", "string", "'John'"),
            ("CO", "enum", "'CO'"),
            ("1000001", "reference", "'1000001'"),
            ("2024-01-01", "date", "'2024-01-01'"),
        ],
    )
    def test_formats_by_declared_type(self, value, field_type, expected):
        assert format_odata_value(value, FilterFieldType(field_type)) == expected


class TestBuildODataFilter:
    def test_empty_list_returns_none(self, bp_metadata):
        assert build_odata_filter([], bp_metadata) is None

    def test_single_boolean_filter(self, bp_metadata):
        filters = [_active("IsActive", "eq", "true")]
        assert build_odata_filter(filters, bp_metadata) == "IsActive eq true"

    def test_distinct_filters_join_with_lowercase_and(self, bp_metadata):
        filters = [
            _active("IsActive", "eq", "true"),
            _active("Name", "contains", "Ann"),
            _active("Created", "ge", "2024-01-01"),
        ]
        assert build_odata_filter(filters, bp_metadata) == (
            "IsActive eq true and contains(Name,'Ann') and Created ge '2024-01-01'"
        )

    def test_accepts_filter_schema(self, bp_schema):
        assert build_odata_filter([_active("IsVendor", "eq", "false")], bp_schema) == "IsVendor eq false"

    def test_unknown_field_is_skipped(self, bp_metadata):
        filters = [_active("Nope", "eq", "x"), _active("IsActive", "eq", "true")]
        assert build_odata_filter(filters, bp_metadata) == "IsActive eq true"

    def test_only_unknown_fields_returns_none(self, bp_metadata):
        assert build_odata_filter([_active("Nope", "eq", "x")], bp_metadata) is None

    def test_sequence_metadata_is_treated_as_empty(self, bp_metadata):
        filters = [_active("IsActive", "eq", "true")]
        assert build_odata_filter(filters, list(bp_metadata.values())) is None

    def test_client_side_fields_are_excluded(self, bp_metadata):
        filters = [_active("ad_user/Phone", "contains", "555"), _active("IsActive", "eq", "true")]
        assert build_odata_filter(filters, bp_metadata) == "IsActive eq true"

    def test_in_operator_splits_comma_string(self, bp_metadata):
        filters = [_active("C_BP_Group_ID", "in", "1000001, 1000002")]
        assert build_odata_filter(filters, bp_metadata) == "C_BP_Group_ID in ('1000001','1000002')"

    def test_multi_select_becomes_or_group(self, bp_metadata):
        filters = [_active("AD_Language", "eq", ("en_US", "es_MX")), _active("IsActive", "eq", "true")]
        assert build_odata_filter(filters, bp_metadata) == (
            "(AD_Language eq 'en_US' or AD_Language eq 'es_MX') and IsActive eq true"
        )

    def test_single_element_multi_select_is_scalar(self, bp_metadata):
        filters = [_active("AD_Language", "eq", ("en_US",))]
        assert build_odata_filter(filters, bp_metadata) == "AD_Language eq 'en_US'"

    def test_empty_multi_select_contributes_nothing(self, bp_metadata):
        filters = [_active("AD_Language", "eq", ()), _active("IsActive", "eq", "true")]
        assert build_odata_filter(filters, bp_metadata) == "IsActive eq true"

    def test_number_field_is_bare(self):
        metadata = {"GrandTotal": field_metadata("Total", "number", ["ge"])}
        assert build_odata_filter([_active("GrandTotal", "ge", "100.5")], metadata) == "GrandTotal ge 100.5"

    def test_build_filter_clause_empty_sequence(self):
        assert build_filter_clause("X", ODataOperator.EQ, [], FilterFieldType.STRING) is None


class TestClientSideFilters:
    def test_complementary_subset(self, bp_metadata):
        server = _active("IsActive", "eq", "true")
        phone = _active("ad_user/Phone", "contains", "555")
        email = _active("ad_user/EMail", "contains", "@school")
        unknown = _active("Nope", "eq", "x")

        client_side = get_client_side_filters([server, phone, unknown, email], bp_metadata)

        assert client_side == [phone, email]

    def test_empty_input(self, bp_metadata):
        assert get_client_side_filters([], bp_metadata) == []

    def test_matches_any_related_row(self):
        record = {"Name": "Ann", "ad_user": [{"Phone": "111"}, {"Phone": "555-1234"}]}
        assert matches_client_side_filters(record, [_active("ad_user/Phone", "contains", "555")])

    def test_contains_is_case_insensitive(self):
        record = {"ad_user": [{"EMail": "Ann@School.org"}]}
        assert matches_client_side_filters(record, [_active("ad_user/EMail", "contains", "school")])

    def test_missing_related_rows_do_not_match(self):
        assert not matches_client_side_filters({"Name": "Ann"}, [_active("ad_user/Phone", "contains", "5")])
        assert not matches_client_side_filters({"ad_user": []}, [_active("ad_user/Phone", "contains", "5")])

    def test_none_value_does_not_match(self):
        record = {"ad_user": [{"Phone": None}]}
        assert not matches_client_side_filters(record, [_active("ad_user/Phone", "contains", "5")])

    def test_plain_fields_always_match(self):
        assert matches_client_side_filters({}, [_active("IsActive", "eq", "true")])

    def test_eq_compares_strings(self):
        record = {"ad_user": [{"Phone": "555"}]}
        assert matches_client_side_filters(record, [_active("ad_user/Phone", "eq", "555")])
        assert not matches_client_side_filters(record, [_active("ad_user/Phone", "eq", "55")])

    @pytest.mark.parametrize(
        "operator, value, expected",
        [
            ("ge", "2024-01-01", True),
            ("gt", "2024-03-01", False),
            ("le", "2024-03-01T00:00:00Z", True),
            ("lt", "2024-02-01", False),
            ("ge", "not-a-date", False),
        ],
    )
    def test_date_comparisons(self, operator, value, expected):
        record = {"c_payment": [{"DateTrx": "2024-03-01T00:00:00Z"}]}
        assert matches_client_side_filters(record, [_active("c_payment/DateTrx", operator, value)]) is expected

    def test_apply_filters_records(self):
        records = [
            {"Name": "Ann", "ad_user": [{"Phone": "555"}]},
            {"Name": "Bob", "ad_user": [{"Phone": "777"}]},
        ]
        result = apply_client_side_filters(records, [_active("ad_user/Phone", "contains", "55")])
        assert [r["Name"] for r in result] == ["Ann"]

    def test_apply_without_filters_returns_all(self):
        records = [{"Name": "Ann"}]
        assert apply_client_side_filters(records, []) == records
