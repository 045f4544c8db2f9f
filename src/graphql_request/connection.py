"""Persistent connection abstraction for subscriptions."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Any, Protocol

from websockets.asyncio.client import connect
from websockets.typing import Subprotocol


class Connection(Protocol):
    """An open message connection: text frames in, text frames out."""

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...


ConnectionFactory = Callable[[str, Sequence[str]], Awaitable[Connection]]


async def connect_websocket(url: str, subprotocols: Sequence[str]) -> Connection:
    """Open a WebSocket with the websockets library."""
    return await connect(url, subprotocols=[Subprotocol(p) for p in subprotocols])


_CLOSED = object()


class InMemoryConnection:
    """In-memory connection for testing."""

    def __init__(self) -> None:
        self._closed = False
        self._recv_queue: asyncio.Queue[Any] = asyncio.Queue()
        self._sent_messages: list[str] = []
        self.url: str | None = None
        self.subprotocols: list[str] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def factory(self) -> ConnectionFactory:
        """Return a connection factory that records its arguments and yields this connection."""

        async def _connect(url: str, subprotocols: Sequence[str]) -> Connection:
            self.url = url
            self.subprotocols = list(subprotocols)
            return self

        return _connect

    async def send(self, message: str) -> None:
        if self._closed:
            raise ConnectionError("Not connected")
        self._sent_messages.append(message)

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._recv_queue.put_nowait(_CLOSED)

    def __aiter__(self) -> InMemoryConnection:
        return self

    async def __anext__(self) -> str:
        item = await self._recv_queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    def inject_message(self, message: str) -> None:
        self._recv_queue.put_nowait(message)

    def inject_frame(self, frame: dict[str, Any]) -> None:
        self.inject_message(json.dumps(frame))

    def inject_error(self, error: Exception) -> None:
        """Make the next receive fail with ``error``, as a dropped connection would."""
        self._recv_queue.put_nowait(error)

    def remote_close(self) -> None:
        """End the inbound stream as if the peer closed cleanly."""
        self._recv_queue.put_nowait(_CLOSED)

    def get_sent_messages(self) -> list[str]:
        return list(self._sent_messages)

    def get_sent_frames(self) -> list[dict[str, Any]]:
        return [json.loads(m) for m in self._sent_messages]
