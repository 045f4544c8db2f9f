"""GraphQL client facade."""

from __future__ import annotations

from typing import Any

from .config import ClientOptions
from .connection import ConnectionFactory
from .http_client import HttpRequestExecutor
from .observer import SubscriptionObserver
from .subscription import Subscription, SubscriptionSession
from .types import GraphQlRequest, GraphQlResponse


class GraphQlClient:
    """GraphQL client bound to one endpoint and its default options."""

    def __init__(
        self,
        url: str,
        options: ClientOptions | None = None,
        *,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        self.url = url
        self.options = options or ClientOptions()
        self._connection_factory = connection_factory

    def _executor(self) -> HttpRequestExecutor:
        return HttpRequestExecutor(self.url, self.options)

    async def raw_request(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> GraphQlResponse[Any]:
        return await self._executor().raw_request(query, variables)

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        return await self._executor().request(query, variables)

    def subscribe(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        *,
        observer: SubscriptionObserver[Any],
    ) -> Subscription:
        """Start a subscription on the running event loop.

        Returns a handle; calling it with no arguments cancels the
        subscription. Events and failures reach ``observer`` only.
        """
        request = GraphQlRequest(
            query=query,
            variables=variables if variables is not None else {},
            context=dict(self.options.headers),
        )
        session = SubscriptionSession(
            self.url,
            request,
            observer,
            self.options.init_payload(),
            connection_factory=self._connection_factory,
        )
        return Subscription.start(session)

    def set_headers(self, headers: dict[str, str]) -> GraphQlClient:
        self.options.headers = dict(headers)
        return self

    def set_header(self, key: str, value: str) -> GraphQlClient:
        self.options.headers[key] = value
        return self


async def raw_request(
    url: str, query: str, variables: dict[str, Any] | None = None
) -> GraphQlResponse[Any]:
    return await GraphQlClient(url).raw_request(query, variables)


async def request(url: str, query: str, variables: dict[str, Any] | None = None) -> Any:
    return await GraphQlClient(url).request(query, variables)


def subscribe(
    url: str,
    query: str,
    variables: dict[str, Any] | None = None,
    *,
    observer: SubscriptionObserver[Any],
    connection_factory: ConnectionFactory | None = None,
) -> Subscription:
    client = GraphQlClient(url, connection_factory=connection_factory)
    return client.subscribe(query, variables, observer=observer)
