"""Paging value objects shared by the query executor and its callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class PaginationParams:
    """1-based page request."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def top(self) -> int:
        return self.page_size


@dataclass(frozen=True)
class PaginatedResponse(Generic[T]):
    """One page of application records plus paging metadata.

    ``records == []`` with ``total_records == 0`` is also what a failed
    query degrades to; see ``ModelService.query``.
    """

    records: list[T]
    page: int
    page_size: int
    total_pages: int
    total_records: int
    sql_command: Optional[str] = None

    @classmethod
    def empty(cls, page_size: int = DEFAULT_PAGE_SIZE) -> PaginatedResponse[T]:
        return cls(records=[], page=1, page_size=page_size, total_pages=0, total_records=0)


@dataclass(frozen=True)
class ODataQueryParams:
    """OData params a table view sends to the backend."""

    orderby: str
    top: int
    skip: int
    filter: Optional[str] = None
    extra: dict[str, str] = field(default_factory=dict)

    def as_params(self) -> dict[str, str]:
        params = {"$orderby": self.orderby, "$top": str(self.top), "$skip": str(self.skip)}
        if self.filter:
            params["$filter"] = self.filter
        params.update(self.extra)
        return params


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "PaginationParams",
    "PaginatedResponse",
    "ODataQueryParams",
]
