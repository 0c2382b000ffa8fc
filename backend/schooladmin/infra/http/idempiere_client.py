"""
iDempiere REST API client.

Thin JSON transport over ``httpx.AsyncClient`` with bearer-token
authentication.  Token storage and login flows belong to the auth layer,
which plugs in through a ``TokenProvider``.
"""
import logging
from typing import Any, Mapping, Optional

import httpx

from ...domain.odata.ports import TokenProvider

logger = logging.getLogger(__name__)


class IdempiereApiError(Exception):
    """Non-2xx response or transport failure from the ERP API."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"IdempiereApiError({self.status_code}, {self.code!r}, {self.message!r})"


class IdempiereClient:
    """Async client for ``{base_url}/models/...`` style endpoints."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "IdempiereClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _auth_headers(self, token: Optional[str]) -> dict:
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _send(self, method: str, endpoint: str, *, params=None, json=None, token=None) -> httpx.Response:
        client = await self._get_client()
        return await client.request(
            method,
            endpoint,
            params=params,
            json=json,
            headers=self._auth_headers(token),
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and decode the JSON body.

        A 401 triggers one token refresh and exactly one retry.

        Raises:
            IdempiereApiError: on non-2xx status, timeout, or transport error.
        """
        token = self.token_provider.get_token() if self.token_provider else None
        query = {k: str(v) for k, v in params.items()} if params else None

        try:
            response = await self._send(method, endpoint, params=query, json=json, token=token)

            if response.status_code == 401 and self.token_provider is not None:
                refreshed = await self.token_provider.refresh()
                if refreshed:
                    logger.info("Retrying %s %s with refreshed token", method, endpoint)
                    response = await self._send(method, endpoint, params=query, json=json, token=refreshed)

            if response.is_error:
                raise self._error_from_response(response)

            if not response.content:
                return None
            return response.json()
        except IdempiereApiError:
            raise
        except httpx.TimeoutException as e:
            raise IdempiereApiError(408, "TIMEOUT", "Request timeout", str(e)) from e
        except (httpx.HTTPError, ValueError) as e:
            raise IdempiereApiError(500, "NETWORK_ERROR", "Network error occurred", str(e)) from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> IdempiereApiError:
        status_code = response.status_code
        code = "UNKNOWN_ERROR"
        message = response.reason_phrase or "An unknown error occurred"
        details = None
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            status_code = int(data.get("statusCode") or status_code)
            code = data.get("code") or code
            message = data.get("message") or data.get("title") or message
            details = data.get("details") or data.get("detail")
        return IdempiereApiError(status_code, code, message, details)

    # -- Verbs -------------------------------------------------------------

    async def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def query(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET with OData-style params (``$filter``, ``$orderby``, ...)."""
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Any) -> Any:
        return await self.request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Any) -> Any:
        return await self.request("PUT", endpoint, json=data)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)
