"""Unit tests for the data table endpoints."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from schooladmin.api.v1.models import parse_sort
from schooladmin.api.v1.router import router as api_router
from schooladmin.infra.odata.schema_registry import StaticFilterSchemaRepository
from schooladmin.use_cases.odata.build_table_query import SortState
from schooladmin.wiring.bootstrap import get_filter_schema_repository, get_odata_client
from tests.unit.conftest import FakeODataClient, api_error


app = FastAPI()
app.include_router(api_router, prefix="/api/v1")

ENDPOINT = "/models/C_BPartner"


def _records():
    return {
        "records": [
            {"id": 1, "Name": "Ann", "ad_user": [{"Phone": "555-0101"}]},
            {"id": 2, "Name": "Bob", "ad_user": [{"Phone": "777-0101"}]},
        ],
        "page-count": 1,
        "records-size": 10,
        "skip-records": 0,
        "row-count": 2,
    }


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def odata():
    fake = FakeODataClient({ENDPOINT: _records()})
    app.dependency_overrides[get_odata_client] = lambda: fake
    repo = StaticFilterSchemaRepository()
    app.dependency_overrides[get_filter_schema_repository] = lambda: repo
    try:
        yield fake
    finally:
        app.dependency_overrides.pop(get_odata_client, None)
        app.dependency_overrides.pop(get_filter_schema_repository, None)


class TestParseSort:
    def test_parses_directions(self):
        assert parse_sort("Name,-Created") == (SortState("Name"), SortState("Created", desc=True))

    @pytest.mark.parametrize("raw", [None, "", ",", "-"])
    def test_empty(self, raw):
        assert parse_sort(raw) == ()


@pytest.mark.asyncio
class TestModelEndpoints:
    async def test_list_models(self, client, odata):
        resp = await client.get("/api/v1/models")
        assert resp.status_code == 200
        assert resp.json() == {"models": ["A_Asset", "C_BPartner", "C_Invoice"]}

    async def test_filter_schema(self, client, odata):
        resp = await client.get("/api/v1/models/C_BPartner/filters")
        assert resp.status_code == 200
        body = resp.json()
        fields = {f["name"]: f for f in body["fields"]}
        assert fields["Name"]["operators"] == ["contains", "startswith", "eq"]
        assert fields["ad_user/Phone"]["client_side"] is True
        assert [g["id"] for g in body["groups"]] == ["status", "classification", "personal"]
        assert body["model_name"] == "C_BPartner"

    async def test_filter_schema_exposes_options_and_references(self, client, odata):
        resp = await client.get("/api/v1/models/C_Invoice/filters")
        assert resp.status_code == 200
        fields = {f["name"]: f for f in resp.json()["fields"]}
        assert [o["value"] for o in fields["DocStatus"]["options"]] == ["DR", "IP", "CO", "VO"]
        assert fields["DocStatus"]["options"][2] == {"label": "Completed", "value": "CO"}
        assert fields["C_BPartner_ID"]["reference_model"] == "C_BPartner"
        assert fields["IsPaid"]["options"] == []

    async def test_unknown_model_is_404(self, client, odata):
        resp = await client.get("/api/v1/models/AD_Nothing")
        assert resp.status_code == 404
        assert (await client.get("/api/v1/models/AD_Nothing/filters")).status_code == 404

    async def test_defaults(self, client, odata):
        resp = await client.get("/api/v1/models/C_BPartner")

        assert resp.status_code == 200
        assert odata.calls == [(
            "QUERY",
            ENDPOINT,
            {"$orderby": "Name asc", "$top": "10", "$skip": "0"},
        )]
        body = resp.json()
        assert [r["Name"] for r in body["records"]] == ["Ann", "Bob"]
        assert body["total_records"] == 2
        assert body["active_filters"] == []

    async def test_url_filters_search_sort_and_paging(self, client, odata):
        resp = await client.get(
            "/api/v1/models/C_BPartner",
            params={
                "f[IsActive]": "true",
                "f[Created][ge]": "2024-01-01",
                "q": "Ann",
                "sort": "-Created",
                "page": "2",
                "page_size": "5",
            },
        )

        assert resp.status_code == 200
        sent = odata.calls[0][2]
        assert sent == {
            "$orderby": "Created desc",
            "$top": "5",
            "$skip": "5",
            "$filter": "contains(Name,'Ann') and IsActive eq true and Created ge '2024-01-01'",
        }
        body = resp.json()
        assert body["odata_params"] == sent
        assert body["search_query"] == "Ann"
        assert body["active_filters"] == [
            {"field": "IsActive", "operator": "eq", "value": "true"},
            {"field": "Created", "operator": "ge", "value": "2024-01-01"},
        ]

    async def test_client_side_filters_applied_after_fetch(self, client, odata):
        resp = await client.get(
            "/api/v1/models/C_BPartner", params={"f[ad_user/Phone]": "555"}
        )

        assert resp.status_code == 200
        assert "$filter" not in odata.calls[0][2]
        assert [r["Name"] for r in resp.json()["records"]] == ["Ann"]

    async def test_null_envelope_fields_yield_a_page(self, client, odata):
        odata.responses[ENDPOINT] = {
            "records": [{"id": 1, "Name": "Ann"}],
            "page-count": None,
            "records-size": None,
            "skip-records": None,
            "row-count": None,
        }

        resp = await client.get("/api/v1/models/C_BPartner")

        assert resp.status_code == 200
        body = resp.json()
        assert (body["page"], body["page_size"], body["total_pages"], body["total_records"]) == (1, 1, 1, 0)

    async def test_backend_failure_yields_empty_page(self, client, odata):
        odata.error = api_error(503)

        resp = await client.get("/api/v1/models/C_BPartner")

        assert resp.status_code == 200
        body = resp.json()
        assert body["records"] == []
        assert body["total_records"] == 0
        assert body["page"] == 1
