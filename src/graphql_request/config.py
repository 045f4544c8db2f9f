"""GraphQL client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ClientOptions:
    """Default options shared by every operation of one client."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout_seconds: float = 10.0
    # Extra httpx.AsyncClient keyword arguments (verify, follow_redirects, transport, ...)
    transport_options: dict[str, Any] = field(default_factory=dict)
    # Merged into the connection_init payload of subscriptions
    connection_params: dict[str, Any] = field(default_factory=dict)

    def init_payload(self) -> dict[str, Any]:
        return {"headers": dict(self.headers), **self.connection_params}
