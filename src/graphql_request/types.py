"""GraphQL types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, StrEnum, auto
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")

GRAPHQL_WS = "graphql-ws"


@dataclass(frozen=True)
class GraphQlRequest:
    """Operation envelope sent by one request or subscription."""

    query: str
    variables: dict[str, Any] | None = None
    context: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "variables": self.variables}


@dataclass
class ErrorLocation:
    """Error location in a GraphQL document."""

    line: int
    column: int


@dataclass
class GraphQlError:
    """GraphQL error."""

    message: str
    locations: list[ErrorLocation] | None = None
    path: list[Any] | None = None
    extensions: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphQlError:
        locations = data.get("locations")
        return cls(
            message=data.get("message", ""),
            locations=(
                [
                    ErrorLocation(line=loc["line"], column=loc["column"])
                    for loc in locations
                    if isinstance(loc, dict) and "line" in loc and "column" in loc
                ]
                if locations is not None
                else None
            ),
            path=data.get("path"),
            extensions=data.get("extensions"),
        )


@dataclass
class GraphQlResponse(Generic[T]):
    """Result of a raw request: payload plus transport status and headers."""

    status: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    data: T | None = None
    errors: list[GraphQlError] | None = None
    extensions: Any = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class MessageType(StrEnum):
    """graphql-ws frame types."""

    CONNECTION_INIT = "connection_init"
    CONNECTION_ACK = "connection_ack"
    CONNECTION_ERROR = "connection_error"
    CONNECTION_KEEP_ALIVE = "ka"
    CONNECTION_TERMINATE = "connection_terminate"
    START = "start"
    STOP = "stop"
    DATA = "data"
    ERROR = "error"
    COMPLETE = "complete"


class SubscriptionState(Enum):
    """Subscription session state."""

    CONNECTING = auto()
    ACK_WAIT = auto()
    ACTIVE = auto()
    TERMINATING = auto()
    CLOSED = auto()
