"""
Pydantic schemas for data table endpoints.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FilterGroupResponse(BaseModel):
    id: str
    title: str
    fields: List[str]


class FilterOptionResponse(BaseModel):
    label: str
    value: str


class FilterFieldResponse(BaseModel):
    name: str
    label: str
    type: str
    operators: List[str]
    client_side: bool = False
    searchable: bool = False
    options: List[FilterOptionResponse] = Field(default_factory=list)
    reference_model: Optional[str] = None


class FilterSchemaResponse(BaseModel):
    """Filter metadata for one model."""

    model_name: str
    fields: List[FilterFieldResponse]
    groups: List[FilterGroupResponse]


class ActiveFilterResponse(BaseModel):
    field: str
    operator: str
    value: str


class TablePageResponse(BaseModel):
    """One page of records plus the filter state it was computed from."""

    records: List[Dict[str, Any]]
    page: int
    page_size: int
    total_pages: int
    total_records: int
    active_filters: List[ActiveFilterResponse] = Field(default_factory=list)
    search_query: str = ""
    odata_params: Dict[str, str] = Field(default_factory=dict)
    sql_command: Optional[str] = None
