"""Dependency injection bootstrap: the single place that binds ports to adapters.

Every factory function here can be used as a FastAPI ``Depends()`` target.
Routers never import concrete implementations directly; they depend on
the abstractions returned by these factories.

Example usage in a router::

    from schooladmin.wiring.bootstrap import get_odata_client

    @router.get("/models/{model_name}")
    async def list_records(
        model_name: str,
        client: ODataHttpClient = Depends(get_odata_client),
    ):
        ...
"""

from __future__ import annotations

from schooladmin.config.settings import settings
from schooladmin.domain.odata.ports import FilterSchemaRepository, ODataHttpClient
from schooladmin.infra.http.idempiere_client import IdempiereClient
from schooladmin.infra.odata.schema_registry import StaticFilterSchemaRepository
from schooladmin.services.model_service import GenericModelService
from schooladmin.use_cases.odata.build_table_query import BuildTableQueryUseCase


# ── HTTP client ─────────────────────────────────────────────────────────

_odata_client: IdempiereClient | None = None


def get_odata_client() -> ODataHttpClient:
    """Return a singleton IdempiereClient configured from settings."""
    global _odata_client
    if _odata_client is None:
        _odata_client = IdempiereClient(
            base_url=settings.idempiere_api_url,
            timeout=settings.idempiere_timeout_seconds,
        )
    return _odata_client


async def close_odata_client() -> None:
    global _odata_client
    if _odata_client is not None:
        await _odata_client.aclose()
        _odata_client = None


# ── Filter metadata ─────────────────────────────────────────────────────

_schema_repository: StaticFilterSchemaRepository | None = None


def get_filter_schema_repository() -> FilterSchemaRepository:
    global _schema_repository
    if _schema_repository is None:
        _schema_repository = StaticFilterSchemaRepository()
    return _schema_repository


# ── Services / use cases ────────────────────────────────────────────────


def get_model_service(client: ODataHttpClient, model_name: str) -> GenericModelService:
    return GenericModelService(client, model_name, default_page_size=settings.default_page_size)


def get_build_table_query_use_case() -> BuildTableQueryUseCase:
    return BuildTableQueryUseCase()
