"""Logger setup tests."""

import json
import logging
from collections.abc import Iterator
from typing import Any

import pytest
import structlog

from graphql_request import GraphQlRequest, InMemoryConnection, SubscriptionSession, new_logger


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    # drop the stdout handler installed by basicConfig
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


def json_events(out: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


def test_json_output_has_level_logger_and_timestamp(capsys: pytest.CaptureFixture[str]) -> None:
    logger = new_logger(level="INFO", format="json")
    logger.info("client ready", endpoint="http://localhost/graphql")

    (event,) = json_events(capsys.readouterr().out)
    assert event["event"] == "client ready"
    assert event["endpoint"] == "http://localhost/graphql"
    assert event["level"] == "info"
    assert event["logger"] == "graphql_request"
    assert "timestamp" in event


def test_level_filters_debug(capsys: pytest.CaptureFixture[str]) -> None:
    logger = new_logger(level="WARNING")
    logger.info("hidden")
    logger.warning("shown")
    assert [e["event"] for e in json_events(capsys.readouterr().out)] == ["shown"]


def test_text_format_is_not_json(capsys: pytest.CaptureFixture[str]) -> None:
    logger = new_logger(level="DEBUG", format="text")
    logger.debug("console line")
    out = capsys.readouterr().out
    assert "console line" in out
    assert json_events(out) == []


async def test_subscription_events_carry_session_context(
    capsys: pytest.CaptureFixture[str],
) -> None:
    new_logger(level="DEBUG", format="json")
    conn = InMemoryConnection()
    conn.inject_frame({"type": "connection_ack", "id": "abc"})
    conn.inject_frame({"type": "data", "id": "abc", "payload": {"data": {"tick": 1}}})
    conn.inject_frame({"type": "connection_error", "error": {"message": "slow"}})
    conn.inject_frame({"type": "complete", "id": "abc"})
    session = SubscriptionSession(
        "https://graphql-server/graphql",
        GraphQlRequest(query="subscription { tick }", variables={}),
        object(),
        {"headers": {}},
        connection_factory=conn.factory(),
    )

    await session.run()

    events = json_events(capsys.readouterr().out)
    received = [e for e in events if e["event"] == "graphql-ws frame received"]
    assert [e["type"] for e in received] == [
        "connection_ack",
        "data",
        "connection_error",
        "complete",
    ]
    assert received[0]["subscription_id"] is None
    assert {e["subscription_id"] for e in received[1:]} == {"abc"}
    assert {e["subscription_url"] for e in received} == {"wss://graphql-server/graphql"}
    assert all(e["logger"] == "graphql_request.subscription" for e in received)

    (warning,) = [e for e in events if e["level"] == "warning"]
    assert warning["event"] == "graphql-ws connection error"
    assert warning["subscription_id"] == "abc"
    # context does not leak past the session
    assert "subscription_url" not in structlog.contextvars.get_contextvars()
