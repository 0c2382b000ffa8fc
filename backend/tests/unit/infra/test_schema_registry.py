"""Unit tests for the static filter schema repository."""

from schooladmin.domain.odata.filter_metadata import field_metadata
from schooladmin.infra.odata.schema_registry import StaticFilterSchemaRepository


class TestStaticFilterSchemaRepository:
    def test_default_models(self):
        repo = StaticFilterSchemaRepository()
        assert repo.model_names() == ["A_Asset", "C_BPartner", "C_Invoice"]

    def test_get_returns_generated_schema(self):
        schema = StaticFilterSchemaRepository().get("C_BPartner")
        assert schema is not None
        assert schema.metadata["ad_user/Phone"].client_side
        assert {g.id for g in schema.groups} == {"status", "classification", "personal"}

    def test_unknown_model_returns_none(self):
        assert StaticFilterSchemaRepository().get("AD_User") is None

    def test_custom_source(self):
        repo = StaticFilterSchemaRepository(
            {"C_Order": {"IsSOTrx": field_metadata("Sales", "boolean", ["eq"])}}
        )
        assert repo.model_names() == ["C_Order"]
        assert repo.get("C_Order").groups[0].fields == ("IsSOTrx",)
