"""Shared fakes and fixtures for unit tests.

Fakes record what they were asked and return canned data, so tests can
check both the request that went out and how the response was decoded::

    from tests.unit.conftest import FakeODataClient
"""

from __future__ import annotations

from typing import Any

import pytest

from schooladmin.domain.odata.filter_metadata import FilterSchema, generate_filter_schema
from schooladmin.infra.http.idempiere_client import IdempiereApiError
from schooladmin.infra.odata.schema_registry import BUSINESS_PARTNER_FILTERS


class FakeODataClient:
    """In-memory ODataHttpClient.

    ``responses`` maps endpoint → JSON body.  Set ``error`` to make every
    call raise it.
    """

    def __init__(self, responses: dict[str, Any] | None = None, error: Exception | None = None):
        self.responses = responses or {}
        self.error = error
        self.calls: list[tuple[str, str, Any]] = []

    def _respond(self, method: str, endpoint: str, payload: Any) -> Any:
        self.calls.append((method, endpoint, payload))
        if self.error is not None:
            raise self.error
        return self.responses.get(endpoint)

    async def get(self, endpoint, params=None):
        return self._respond("GET", endpoint, params)

    async def query(self, endpoint, params=None):
        return self._respond("QUERY", endpoint, params)

    async def post(self, endpoint, data):
        return self._respond("POST", endpoint, data)

    async def put(self, endpoint, data):
        return self._respond("PUT", endpoint, data)

    async def delete(self, endpoint):
        return self._respond("DELETE", endpoint, None)


def api_error(status_code: int = 500, code: str = "SERVER_ERROR") -> IdempiereApiError:
    return IdempiereApiError(status_code, code, "boom")


@pytest.fixture
def bp_schema() -> FilterSchema:
    return generate_filter_schema("C_BPartner", BUSINESS_PARTNER_FILTERS)


@pytest.fixture
def bp_metadata():
    return BUSINESS_PARTNER_FILTERS
