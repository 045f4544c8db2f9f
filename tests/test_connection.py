"""Connection tests."""

from typing import Any

import pytest

from graphql_request import InMemoryConnection, connect_websocket


async def test_in_memory_send_and_receive() -> None:
    conn = InMemoryConnection()
    conn.inject_frame({"type": "ka"})
    conn.inject_message("raw")
    await conn.send('{"type": "connection_init"}')

    messages = aiter(conn)
    assert await anext(messages) == '{"type": "ka"}'
    assert await anext(messages) == "raw"
    assert conn.get_sent_frames() == [{"type": "connection_init"}]


async def test_in_memory_close_ends_iteration() -> None:
    conn = InMemoryConnection()
    conn.inject_message("one")
    await conn.close()
    received = [message async for message in conn]
    assert received == ["one"]
    assert conn.closed is True


async def test_in_memory_send_after_close() -> None:
    conn = InMemoryConnection()
    await conn.close()
    with pytest.raises(ConnectionError):
        await conn.send("late")


async def test_in_memory_factory_records_arguments() -> None:
    conn = InMemoryConnection()
    connected = await conn.factory()("ws://localhost/graphql", ["graphql-ws"])
    assert connected is conn
    assert conn.url == "ws://localhost/graphql"
    assert conn.subprotocols == ["graphql-ws"]


async def test_connect_websocket_declares_subprotocol(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    sentinel = InMemoryConnection()

    async def fake_connect(url: str, **kwargs: Any) -> InMemoryConnection:
        calls.append({"url": url, **kwargs})
        return sentinel

    monkeypatch.setattr("graphql_request.connection.connect", fake_connect)
    conn = await connect_websocket("ws://localhost/graphql", ["graphql-ws"])
    assert conn is sentinel
    assert calls == [{"url": "ws://localhost/graphql", "subprotocols": ["graphql-ws"]}]
