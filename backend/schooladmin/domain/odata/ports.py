"""Ports (abstract interfaces) for the OData query pipeline.

These define WHAT the query core needs from the outside world without
specifying HOW it is provided.  Concrete implementations live in infra/
and api/.
"""

from __future__ import annotations

import abc
from typing import Any, Mapping, Optional, Protocol

from .filter_metadata import FilterSchema


class ODataHttpClient(Protocol):
    """Authenticated JSON transport to the ERP REST API.

    Every method raises ``IdempiereApiError`` on a non-2xx response or a
    transport failure.
    """

    async def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        ...

    async def query(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        ...

    async def post(self, endpoint: str, data: Any) -> Any:
        ...

    async def put(self, endpoint: str, data: Any) -> Any:
        ...

    async def delete(self, endpoint: str) -> Any:
        ...


class TokenProvider(Protocol):
    """Supplies bearer tokens; owned by the authentication layer."""

    def get_token(self) -> Optional[str]:
        ...

    async def refresh(self) -> Optional[str]:
        """Return a fresh token, or None when the session cannot be renewed."""
        ...


class UrlNavigator(Protocol):
    """Writes a new query string to the current location."""

    def replace(self, url: str) -> None:
        """Navigate without creating a history entry."""
        ...

    def push(self, url: str) -> None:
        ...


class FilterSchemaRepository(abc.ABC):
    """Provides filter metadata per ERP model."""

    @abc.abstractmethod
    def get(self, model_name: str) -> FilterSchema | None:
        ...

    @abc.abstractmethod
    def model_names(self) -> list[str]:
        ...


__all__ = [
    "ODataHttpClient",
    "TokenProvider",
    "UrlNavigator",
    "FilterSchemaRepository",
]
