"""graphql_request exception types."""

from __future__ import annotations

import json
from typing import Any

import httpx

from .types import GraphQlError, GraphQlRequest


class ClientErrorCodes:
    """ClientError code constants."""

    GRAPHQL_ERROR: str = "GRAPHQL_ERROR"
    TRANSPORT_ERROR: str = "TRANSPORT_ERROR"


class ClientError(Exception):
    """A request finished without satisfying the success predicate, or never finished.

    ``response`` holds the decoded payload fields (or ``{"error": <text>}``)
    together with ``status`` and, for raw requests, ``headers``. ``request``
    is the operation that was sent.
    """

    def __init__(
        self,
        response: dict[str, Any],
        request: GraphQlRequest,
        code: str = ClientErrorCodes.GRAPHQL_ERROR,
        cause: Exception | None = None,
    ) -> None:
        self.response = response
        self.request = request
        self.code = code
        super().__init__(self._build_message())
        if cause is not None:
            self.__cause__ = cause

    @property
    def status(self) -> int | None:
        return self.response.get("status")

    @property
    def errors(self) -> list[GraphQlError]:
        raw = self.response.get("errors") or []
        return [GraphQlError.from_dict(e) for e in raw if isinstance(e, dict)]

    def _extract_message(self) -> str:
        try:
            return self.response["errors"][0]["message"]
        except (KeyError, IndexError, TypeError):
            return f"GraphQL Error (Code: {self.status})"

    def _build_message(self) -> str:
        detail = json.dumps(
            {"response": self.response, "request": self.request.to_dict()},
            default=_headers_default,
        )
        return f"{self._extract_message()}: {detail}"


class SubscriptionProtocolError(Exception):
    """A frame arrived that the subscription state does not allow.

    Never raised to the subscriber; delivered through ``observer.error``.
    """

    def __init__(self, message: str, frame: Any = None) -> None:
        super().__init__(message)
        self.frame = frame


def _headers_default(value: Any) -> Any:
    if isinstance(value, httpx.Headers):
        return dict(value.items())
    return str(value)
