"""Static filter metadata for the ERP models exposed to data tables."""

from __future__ import annotations

from typing import Mapping

from schooladmin.domain.odata.filter_metadata import (
    FilterFieldMetadata,
    FilterOption,
    FilterSchema,
    field_metadata,
    generate_filter_schema,
)
from schooladmin.domain.odata.ports import FilterSchemaRepository

# C_BPartner backs students, staff, parents and vendors.
BUSINESS_PARTNER_FILTERS: dict[str, FilterFieldMetadata] = {
    "IsActive": field_metadata("Active", "boolean", ["eq"]),
    "IsCustomer": field_metadata("Customer", "boolean", ["eq"]),
    "IsVendor": field_metadata("Vendor", "boolean", ["eq"]),
    "IsEmployee": field_metadata("Employee", "boolean", ["eq"]),
    "Name": field_metadata("Name", "string", ["contains", "startswith", "eq"], searchable=True),
    "Value": field_metadata("Search Key", "string", ["contains", "eq"], searchable=True),
    "C_BP_Group_ID": field_metadata(
        "Group", "reference", ["eq", "in"], model_name="C_BP_Group"
    ),
    "AD_Language": field_metadata(
        "Language",
        "enum",
        ["eq"],
        options=(FilterOption("English", "en_US"), FilterOption("Spanish", "es_MX")),
    ),
    "Created": field_metadata("Created", "date", ["ge", "le", "gt", "lt"]),
    # Navigation properties: the backend cannot filter on these.
    "ad_user/Phone": field_metadata("Phone", "string", ["contains"], client_side=True),
    "ad_user/EMail": field_metadata("Email", "string", ["contains"], client_side=True),
}

INVOICE_FILTERS: dict[str, FilterFieldMetadata] = {
    "IsActive": field_metadata("Active", "boolean", ["eq"]),
    "IsPaid": field_metadata("Paid", "boolean", ["eq"]),
    "DocumentNo": field_metadata("Document No", "string", ["contains", "eq"], searchable=True),
    "DocStatus": field_metadata(
        "Status",
        "enum",
        ["eq", "in"],
        options=(
            FilterOption("Drafted", "DR"),
            FilterOption("In Progress", "IP"),
            FilterOption("Completed", "CO"),
            FilterOption("Voided", "VO"),
        ),
    ),
    "C_BPartner_ID": field_metadata("Business Partner", "reference", ["eq"], model_name="C_BPartner"),
    "GrandTotal": field_metadata("Grand Total", "number", ["ge", "le", "eq"]),
    "DateInvoiced": field_metadata("Invoice Date", "date", ["ge", "le"]),
}

ASSET_FILTERS: dict[str, FilterFieldMetadata] = {
    "IsActive": field_metadata("Active", "boolean", ["eq"]),
    "Name": field_metadata("Name", "string", ["contains", "eq"], searchable=True),
    "A_Asset_Group_ID": field_metadata("Asset Group", "reference", ["eq"], model_name="A_Asset_Group"),
    "AssetServiceDate": field_metadata("In Service", "date", ["ge", "le"]),
}

DEFAULT_MODEL_FILTERS: dict[str, Mapping[str, FilterFieldMetadata]] = {
    "C_BPartner": BUSINESS_PARTNER_FILTERS,
    "C_Invoice": INVOICE_FILTERS,
    "A_Asset": ASSET_FILTERS,
}


class StaticFilterSchemaRepository(FilterSchemaRepository):
    """Serves schemas generated once from in-code metadata."""

    def __init__(self, model_filters: Mapping[str, Mapping[str, FilterFieldMetadata]] | None = None):
        source = DEFAULT_MODEL_FILTERS if model_filters is None else model_filters
        self._schemas = {
            name: generate_filter_schema(name, metadata)
            for name, metadata in source.items()
        }

    def get(self, model_name: str) -> FilterSchema | None:
        return self._schemas.get(model_name)

    def model_names(self) -> list[str]:
        return sorted(self._schemas)
