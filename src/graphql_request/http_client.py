"""GraphQL HTTP request executor."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from .config import ClientOptions
from .exceptions import ClientError, ClientErrorCodes
from .result import get_result
from .types import GraphQlResponse, GraphQlRequest

logger = structlog.stdlib.get_logger(__name__)


class HttpRequestExecutor:
    """httpx based executor issuing one POST per GraphQL operation."""

    def __init__(self, url: str, options: ClientOptions) -> None:
        self._url = url
        self._options = options

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._options.timeout_seconds,
            **self._options.transport_options,
        )

    def _make_headers(self) -> httpx.Headers:
        headers = httpx.Headers({"Content-Type": "application/json"})
        headers.update(self._options.headers)
        return headers

    async def _post(self, request: GraphQlRequest) -> httpx.Response:
        body: dict[str, Any] = {"query": request.query}
        if request.variables is not None:
            body["variables"] = request.variables
        logger.debug("graphql request", url=self._url)
        try:
            async with self._make_client() as client:
                return await client.post(self._url, json=body, headers=self._make_headers())
        except Exception as e:
            raise ClientError(
                {"error": str(e), "status": None},
                request,
                code=ClientErrorCodes.TRANSPORT_ERROR,
                cause=e,
            ) from e

    async def raw_request(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> GraphQlResponse[Any]:
        """Execute an operation and return payload, status and headers."""
        request = GraphQlRequest(query=query, variables=variables)
        resp = await self._post(request)
        result = get_result(resp)
        if _is_success(resp, result):
            return GraphQlResponse(
                status=resp.status_code,
                headers=resp.headers,
                data=result["data"],
                extensions=result.get("extensions"),
            )
        raise ClientError(
            {**_error_result(result), "status": resp.status_code, "headers": resp.headers},
            request,
        )

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        """Execute an operation and return only its ``data``."""
        request = GraphQlRequest(query=query, variables=variables)
        resp = await self._post(request)
        result = get_result(resp)
        if _is_success(resp, result):
            return result["data"]
        raise ClientError({**_error_result(result), "status": resp.status_code}, request)


def _is_success(resp: httpx.Response, result: Any) -> bool:
    return (
        resp.is_success
        and isinstance(result, dict)
        and result.get("errors") is None
        and bool(result.get("data"))
    )


def _error_result(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    return {"error": result}
