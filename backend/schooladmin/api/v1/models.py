"""
Data table API endpoints.

Serves filter metadata and filtered, sorted, paginated pages of ERP
model records.  Filter state is read from the URL in the same
``f[Field]`` / ``f[Field][op]`` / ``q`` form the table UI writes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...domain.common.errors import EntityNotFoundError
from ...domain.odata.filter_metadata import FilterSchema
from ...domain.odata.ports import FilterSchemaRepository, ODataHttpClient
from ...infra.odata.active_filters import apply_client_side_filters
from ...schemas.tables import (
    ActiveFilterResponse,
    FilterFieldResponse,
    FilterGroupResponse,
    FilterOptionResponse,
    FilterSchemaResponse,
    TablePageResponse,
)
from ...use_cases.odata.build_table_query import (
    BuildTableQuery,
    BuildTableQueryUseCase,
    SortState,
)
from ...wiring.bootstrap import (
    get_build_table_query_use_case,
    get_filter_schema_repository,
    get_model_service,
    get_odata_client,
)
from ...config.settings import settings
from .url_filter_state import RecordingNavigator, TableFilterState

logger = logging.getLogger(__name__)
router = APIRouter()


def parse_sort(sort: Optional[str]) -> tuple[SortState, ...]:
    """Parse ``Name,-Created`` into sort states (``-`` prefix = descending)."""
    if not sort:
        return ()
    states = []
    for token in sort.split(","):
        token = token.strip()
        if not token or token == "-":
            continue
        if token.startswith("-"):
            states.append(SortState(id=token[1:], desc=True))
        else:
            states.append(SortState(id=token))
    return tuple(states)


def _first_searchable(schema: FilterSchema) -> Optional[str]:
    for name, meta in schema.metadata.items():
        if meta.searchable:
            return name
    return None


def _require_schema(repo: FilterSchemaRepository, model_name: str) -> FilterSchema:
    schema = repo.get(model_name)
    if schema is None:
        raise EntityNotFoundError("Model", model_name)
    return schema


@router.get("")
async def list_models(
    repo: FilterSchemaRepository = Depends(get_filter_schema_repository),
):
    """List the models that have filter metadata."""
    return {"models": repo.model_names()}


@router.get("/{model_name}/filters", response_model=FilterSchemaResponse)
async def get_filter_schema(
    model_name: str,
    repo: FilterSchemaRepository = Depends(get_filter_schema_repository),
):
    """Return the filterable fields and toolbar groups of a model."""
    try:
        schema = _require_schema(repo, model_name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return FilterSchemaResponse(
        model_name=schema.model_name or model_name,
        fields=[
            FilterFieldResponse(
                name=name,
                label=meta.label,
                type=meta.type.value,
                operators=[op.value for op in meta.operators],
                client_side=meta.client_side,
                searchable=meta.searchable,
                options=[FilterOptionResponse(label=o.label, value=o.value) for o in meta.options],
                reference_model=meta.model_name,
            )
            for name, meta in schema.metadata.items()
        ],
        groups=[
            FilterGroupResponse(id=g.id, title=g.title, fields=list(g.fields))
            for g in schema.groups
        ],
    )


@router.get("/{model_name}", response_model=TablePageResponse)
async def list_records(
    model_name: str,
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.table_page_size, ge=1, le=500, description="Records per page"),
    sort: Optional[str] = Query(None, description="Comma-separated sort fields, '-' prefix for descending"),
    search_field: Optional[str] = Query(None, description="Field the 'q' search applies to"),
    repo: FilterSchemaRepository = Depends(get_filter_schema_repository),
    client: ODataHttpClient = Depends(get_odata_client),
    use_case: BuildTableQueryUseCase = Depends(get_build_table_query_use_case),
):
    """
    Get a page of model records filtered by the URL's table state.

    Query parameters ``f[Field]=value`` / ``f[Field][op]=value`` select
    filters and ``q`` searches the searchable field.  A failed backend
    request yields an empty page, not an error.
    """
    try:
        schema = _require_schema(repo, model_name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    state = TableFilterState(request.query_params, schema, RecordingNavigator())
    active_filters = state.active_filters

    result = use_case.execute(BuildTableQuery(
        schema=schema,
        active_filters=tuple(active_filters),
        search_query=state.search_query,
        searchable_field=search_field or _first_searchable(schema),
        page_size=page_size,
        current_page=page,
        sorting=parse_sort(sort),
        default_order_by=settings.table_default_order_by,
    ))
    odata_params = result.params.as_params()

    service = get_model_service(client, model_name)
    response = await service.query_params(odata_params)
    records = apply_client_side_filters(response.records, list(result.client_side_filters))

    logger.info(
        "Table %s page %d: %d records (%d filters)",
        model_name,
        page,
        len(records),
        len(active_filters),
    )

    return TablePageResponse(
        records=[dict(r) for r in records],
        page=response.page,
        page_size=response.page_size,
        total_pages=response.total_pages,
        total_records=response.total_records,
        active_filters=[
            ActiveFilterResponse(field=f.field, operator=f.operator.value, value=f.value_as_string())
            for f in active_filters
        ],
        search_query=state.search_query,
        odata_params=odata_params,
        sql_command=response.sql_command,
    )
