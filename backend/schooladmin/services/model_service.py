"""
Generic model service for iDempiere REST endpoints.

Wraps one ``/models/<Table>`` endpoint with query and CRUD helpers.  All
failures are absorbed here: list operations degrade to an empty page,
single-record operations to ``None`` and deletes to ``False``, so callers
never handle transport exceptions themselves.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, TypeVar

import httpx

from ..domain.odata.expressions import ComparisonOperator, filter_, method_filter
from ..domain.odata.models import DEFAULT_PAGE_SIZE, PaginatedResponse, PaginationParams
from ..domain.odata.ports import ODataHttpClient
from ..domain.odata.query_config import QueryConfig, SortOrder, order_by
from ..infra.http.idempiere_client import IdempiereApiError
from ..infra.odata.query_builder import build_query

logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")
TAppEntity = TypeVar("TAppEntity")

# Failures absorbed at this boundary.
_REQUEST_ERRORS = (IdempiereApiError, httpx.HTTPError)


def _field(response: Mapping[str, Any], key: str, default: int) -> int:
    # null and missing both fall back
    value = response.get(key)
    return default if value is None else value


def decode_envelope(response: Mapping[str, Any]) -> dict:
    """Pull paging metadata out of the backend's paginated envelope.

    The backend names its fields ``page-count``, ``records-size``,
    ``skip-records`` and ``row-count`` (not OData-standard).  Missing or
    null fields take their defaults.
    """
    records = list(response.get("records") or [])
    return {
        "records": records,
        "total_pages": _field(response, "page-count", 1),
        "page_size": _field(response, "records-size", len(records)),
        "skip": _field(response, "skip-records", 0),
        "total_records": _field(response, "row-count", 0),
        "sql_command": response.get("sql-command"),
    }


def calculate_page(skip: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return skip // page_size + 1


class ModelService(ABC, Generic[TEntity, TAppEntity]):
    """Query executor for one ERP model.

    Subclasses set ``endpoint`` and may override the ``transform_*`` hooks
    to map raw records to application records.
    """

    def __init__(self, client: ODataHttpClient, default_page_size: int = DEFAULT_PAGE_SIZE):
        self.client = client
        self.default_page_size = default_page_size

    @property
    @abstractmethod
    def endpoint(self) -> str:
        ...

    # -- Query -------------------------------------------------------------

    async def query(self, config: QueryConfig) -> PaginatedResponse[TAppEntity]:
        """Run *config* against the endpoint and decode one page.

        Returns an empty page (``total_records == 0``) on any request failure.
        """
        return await self.query_params(build_query(config).params)

    async def query_params(self, params: Mapping[str, str]) -> PaginatedResponse[TAppEntity]:
        """Like :meth:`query` but with already-rendered OData params."""
        try:
            response = await self.client.query(self.endpoint, params)
        except _REQUEST_ERRORS as e:
            logger.error("Failed to query %s: %r", self.endpoint, e)
            return self.empty_response()

        envelope = decode_envelope(response or {})
        return PaginatedResponse(
            records=self.transform_to_app_entity(envelope["records"]),
            page=calculate_page(envelope["skip"], envelope["page_size"]),
            page_size=envelope["page_size"],
            total_pages=envelope["total_pages"],
            total_records=envelope["total_records"],
            sql_command=envelope["sql_command"],
        )

    async def get_all(self, pagination: Optional[PaginationParams] = None) -> PaginatedResponse[TAppEntity]:
        return await self.query(QueryConfig(**self.build_pagination_config(pagination)))

    async def search(
        self,
        search_term: str,
        search_field: str = "Name",
        pagination: Optional[PaginationParams] = None,
    ) -> PaginatedResponse[TAppEntity]:
        return await self.query(QueryConfig(
            filter=method_filter("contains", search_field, search_term),
            **self.build_pagination_config(pagination),
        ))

    async def filter_by(
        self,
        field: str,
        value,
        operator: ComparisonOperator | str = ComparisonOperator.EQ,
        pagination: Optional[PaginationParams] = None,
    ) -> PaginatedResponse[TAppEntity]:
        return await self.query(QueryConfig(
            filter=filter_(field, operator, value),
            **self.build_pagination_config(pagination),
        ))

    async def sort_by(
        self,
        field: str,
        order: SortOrder | str = SortOrder.ASC,
        pagination: Optional[PaginationParams] = None,
    ) -> PaginatedResponse[TAppEntity]:
        return await self.query(QueryConfig(
            order_by=order_by(field, order),
            **self.build_pagination_config(pagination),
        ))

    # -- Single records ----------------------------------------------------

    async def get_by_id(self, record_id) -> Optional[TAppEntity]:
        try:
            response = await self.client.get(f"{self.endpoint}/{record_id}")
        except _REQUEST_ERRORS as e:
            logger.error("Failed to fetch %s/%s: %r", self.endpoint, record_id, e)
            return None
        return self.transform_single_to_app_entity(response)

    async def create(self, data: Mapping[str, Any]) -> Optional[TAppEntity]:
        try:
            payload = self.transform_from_app_entity(data)
            response = await self.client.post(self.endpoint, {"records": [payload]})
        except _REQUEST_ERRORS as e:
            logger.error("Failed to create %s: %r", self.endpoint, e)
            return None
        return self._first_record(response)

    async def update(self, record_id, data: Mapping[str, Any]) -> Optional[TAppEntity]:
        try:
            payload = self.transform_from_app_entity(data)
            response = await self.client.put(f"{self.endpoint}/{record_id}", {"records": [payload]})
        except _REQUEST_ERRORS as e:
            logger.error("Failed to update %s/%s: %r", self.endpoint, record_id, e)
            return None
        return self._first_record(response)

    async def delete(self, record_id) -> bool:
        """Soft delete: deactivate the record instead of removing it."""
        try:
            await self.client.put(f"{self.endpoint}/{record_id}", {"records": [{"IsActive": False}]})
        except _REQUEST_ERRORS as e:
            logger.error("Failed to delete %s/%s: %r", self.endpoint, record_id, e)
            return False
        return True

    async def hard_delete(self, record_id) -> bool:
        try:
            await self.client.delete(f"{self.endpoint}/{record_id}")
        except _REQUEST_ERRORS as e:
            logger.error("Failed to hard delete %s/%s: %r", self.endpoint, record_id, e)
            return False
        return True

    def _first_record(self, response) -> Optional[TAppEntity]:
        records = (response or {}).get("records") or []
        if not records:
            return None
        return self.transform_single_to_app_entity(records[0])

    # -- Hooks -------------------------------------------------------------

    def transform_to_app_entity(self, entities: list[TEntity]) -> list[TAppEntity]:
        return [self.transform_single_to_app_entity(e) for e in entities]

    def transform_single_to_app_entity(self, entity: TEntity) -> TAppEntity:
        return entity  # type: ignore[return-value]

    def transform_from_app_entity(self, app_entity: Mapping[str, Any]) -> Mapping[str, Any]:
        return app_entity

    # -- Helpers -----------------------------------------------------------

    def build_pagination_config(self, pagination: Optional[PaginationParams]) -> dict:
        pagination = pagination or PaginationParams(page_size=self.default_page_size)
        return {"skip": pagination.skip, "top": pagination.top}

    def empty_response(self) -> PaginatedResponse[TAppEntity]:
        return PaginatedResponse.empty(page_size=self.default_page_size)


class GenericModelService(ModelService[dict, dict]):
    """Untransformed service for any ``/models/<name>`` endpoint."""

    def __init__(self, client: ODataHttpClient, model_name: str, default_page_size: int = DEFAULT_PAGE_SIZE):
        super().__init__(client, default_page_size=default_page_size)
        self.model_name = model_name

    @property
    def endpoint(self) -> str:
        return f"/models/{self.model_name}"
