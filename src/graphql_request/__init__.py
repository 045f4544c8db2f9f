"""GraphQL client: HTTP queries/mutations and graphql-ws subscriptions."""

from .types import (
    GRAPHQL_WS,
    ErrorLocation,
    GraphQlError,
    GraphQlRequest,
    GraphQlResponse,
    MessageType,
    SubscriptionState,
)
from .config import ClientOptions
from .exceptions import ClientError, ClientErrorCodes, SubscriptionProtocolError
from .connection import Connection, ConnectionFactory, InMemoryConnection, connect_websocket
from .observer import CallbackObserver, SubscriptionObserver
from .subscription import Subscription, SubscriptionSession
from .client import GraphQlClient, raw_request, request, subscribe
from .log import new_logger

__all__ = [
    "GRAPHQL_WS",
    "CallbackObserver",
    "ClientError",
    "ClientErrorCodes",
    "ClientOptions",
    "Connection",
    "ConnectionFactory",
    "ErrorLocation",
    "GraphQlClient",
    "GraphQlError",
    "GraphQlRequest",
    "GraphQlResponse",
    "InMemoryConnection",
    "MessageType",
    "Subscription",
    "SubscriptionObserver",
    "SubscriptionProtocolError",
    "SubscriptionSession",
    "SubscriptionState",
    "connect_websocket",
    "new_logger",
    "raw_request",
    "request",
    "subscribe",
]
