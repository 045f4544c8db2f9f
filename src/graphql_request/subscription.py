"""graphql-ws subscription session."""

from __future__ import annotations

import asyncio
import inspect
import json
import re
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from websockets.exceptions import WebSocketException

from .connection import Connection, ConnectionFactory, connect_websocket
from .exceptions import SubscriptionProtocolError
from .observer import SubscriptionObserver
from .types import GRAPHQL_WS, GraphQlRequest, MessageType, SubscriptionState

logger = structlog.stdlib.get_logger(__name__)

_TRANSPORT_ERRORS = (OSError, WebSocketException)

# Session tasks stay referenced until they finish
_running: set[asyncio.Task[None]] = set()


class _ObserverFailure(Exception):
    """Carries an exception raised by an observer callback past transport handling."""

    def __init__(self, error: Exception) -> None:
        super().__init__(repr(error))
        self.error = error


def to_ws_url(url: str) -> str:
    """Rewrite a leading ``http``/``https`` scheme to ``ws``/``wss``."""
    return re.sub(r"^http(s?)", r"ws\1", url)


class SubscriptionSession:
    """One graphql-ws connection carrying exactly one subscription.

    The session owns its connection from open to close. Inbound frames are
    handled in delivery order and checked against the current
    ``SubscriptionState``; frames the state does not allow are reported to
    the observer as ``SubscriptionProtocolError`` and end the session.
    """

    def __init__(
        self,
        url: str,
        request: GraphQlRequest,
        observer: SubscriptionObserver[Any],
        init_payload: dict[str, Any],
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        self._url = to_ws_url(url)
        self._request = request
        self._observer = observer
        self._init_payload = init_payload
        self._connection_factory = connection_factory or connect_websocket
        self._connection: Connection | None = None
        self._connection_closed = False
        self._state = SubscriptionState.CONNECTING
        self._id: Any = None
        self._pending: list[dict[str, Any]] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            MessageType.CONNECTION_ACK: self._on_connection_ack,
            MessageType.CONNECTION_ERROR: self._on_connection_error,
            MessageType.CONNECTION_KEEP_ALIVE: self._on_keep_alive,
            MessageType.DATA: self._on_data,
            MessageType.ERROR: self._on_error,
            MessageType.STOP: self._on_stop,
            MessageType.CONNECTION_TERMINATE: self._on_connection_terminate,
            MessageType.COMPLETE: self._on_complete,
        }

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def id(self) -> Any:
        """Correlation id assigned by ``connection_ack``; None before that."""
        return self._id

    async def run(self) -> None:
        """Open the connection and process frames until the session closes.

        Log events emitted while the session runs carry ``subscription_url``
        and, once acknowledged, ``subscription_id`` as structlog context.
        An exception raised by an observer callback closes the connection and
        is re-raised here.
        """
        observer_error: Exception | None = None
        with structlog.contextvars.bound_contextvars(
            subscription_url=self._url, subscription_id=None
        ):
            try:
                await self._process()
            except _ObserverFailure as e:
                observer_error = e.error
            finally:
                self._state = SubscriptionState.CLOSED
                await self._close()
        if observer_error is not None:
            raise observer_error

    async def _process(self) -> None:
        try:
            self._connection = await self._connection_factory(self._url, [GRAPHQL_WS])
            await self._open()
            messages = aiter(self._connection)
            while self._state is not SubscriptionState.CLOSED:
                try:
                    raw = await anext(messages)
                except StopAsyncIteration:
                    logger.info("graphql-ws connection closed by peer")
                    break
                await self._handle_message(raw)
        except _TRANSPORT_ERRORS as e:
            logger.warning("graphql-ws transport failure", error=str(e))
            if self._state is not SubscriptionState.CLOSED:
                self._state = SubscriptionState.CLOSED
                await self._emit("error", e)

    def cancel(self) -> None:
        """Send a stop frame for the current correlation id without waiting.

        The id is read now, so a cancel before ``connection_ack`` sends
        ``"id": null``. Before the connection is open the frame is queued and
        sent right after ``connection_init``.
        """
        frame = {"id": self._id, "type": MessageType.STOP}
        if self._state is SubscriptionState.CLOSED:
            logger.debug("graphql-ws stop skipped, session closed", id=self._id)
            return
        self._state = SubscriptionState.TERMINATING
        if self._connection is None:
            self._pending.append(frame)
            return
        task = asyncio.get_running_loop().create_task(self._send_detached(frame))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _open(self) -> None:
        await self._send({"type": MessageType.CONNECTION_INIT, "payload": self._init_payload})
        if self._state is SubscriptionState.CONNECTING:
            self._state = SubscriptionState.ACK_WAIT
        pending, self._pending = self._pending, []
        for frame in pending:
            await self._send(frame)

    async def _handle_message(self, raw: str | bytes) -> None:
        try:
            frame = json.loads(raw)
        except ValueError:
            frame = None
        if not isinstance(frame, dict):
            await self._violation("undecodable frame", raw)
            return
        frame_type = frame.get("type")
        logger.debug("graphql-ws frame received", type=frame_type)
        handler = self._handlers.get(frame_type) if isinstance(frame_type, str) else None
        if handler is None:
            logger.debug("graphql-ws frame ignored", type=frame_type)
            return
        await handler(frame)

    async def _on_connection_ack(self, frame: dict[str, Any]) -> None:
        if self._state is SubscriptionState.TERMINATING:
            logger.debug("graphql-ws ack after stop, start not sent")
            return
        if self._state is not SubscriptionState.ACK_WAIT:
            await self._violation("duplicate connection_ack", frame)
            return
        self._id = frame.get("id")
        structlog.contextvars.bind_contextvars(subscription_id=self._id)
        await self._send(
            {
                "id": self._id,
                "type": MessageType.START,
                "payload": {
                    "query": self._request.query,
                    "variables": self._request.variables,
                    "context": self._request.context,
                },
            }
        )
        self._state = SubscriptionState.ACTIVE

    async def _on_connection_error(self, frame: dict[str, Any]) -> None:
        # The connection stays open; the subscriber decides whether to cancel.
        logger.warning("graphql-ws connection error", frame=frame)
        await self._emit("error", frame.get("error", frame.get("payload")))

    async def _on_keep_alive(self, frame: dict[str, Any]) -> None:
        pass

    async def _on_data(self, frame: dict[str, Any]) -> None:
        if self._state is SubscriptionState.ACTIVE:
            await self._emit("next", frame.get("payload"))
        elif self._state is SubscriptionState.TERMINATING:
            logger.debug("graphql-ws data after stop dropped", id=self._id)
        else:
            await self._violation("data before connection_ack", frame)

    async def _on_error(self, frame: dict[str, Any]) -> None:
        if self._state is SubscriptionState.ACTIVE:
            await self._emit("error", frame.get("payload"))
            await self._close()
        elif self._state is SubscriptionState.TERMINATING:
            logger.debug("graphql-ws error after stop dropped", frame=frame)
        else:
            await self._violation("error before connection_ack", frame)

    async def _on_stop(self, frame: dict[str, Any]) -> None:
        await self._send({"type": MessageType.CONNECTION_TERMINATE})
        self._state = SubscriptionState.TERMINATING

    async def _on_connection_terminate(self, frame: dict[str, Any]) -> None:
        await self._close()

    async def _on_complete(self, frame: dict[str, Any]) -> None:
        if self._state in (SubscriptionState.ACTIVE, SubscriptionState.TERMINATING):
            await self._emit("complete")
            await self._close()
        else:
            await self._violation("complete before connection_ack", frame)

    async def _violation(self, message: str, frame: Any) -> None:
        error = SubscriptionProtocolError(f"{message} (state={self._state.name})", frame)
        logger.warning("graphql-ws protocol violation", error=str(error))
        await self._emit("error", error)
        await self._close()

    async def _emit(self, name: str, *args: Any) -> None:
        callback = getattr(self._observer, name, None)
        if callback is None:
            if name == "error":
                logger.error(
                    "graphql-ws error dropped, observer has no error callback",
                    error=repr(args[0]),
                )
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            raise _ObserverFailure(e) from e

    async def _send(self, frame: dict[str, Any]) -> None:
        if self._connection is None:
            raise SubscriptionProtocolError("send before the connection is open", frame)
        logger.debug("graphql-ws frame sent", type=frame["type"], id=frame.get("id"))
        await self._connection.send(json.dumps(frame))

    async def _send_detached(self, frame: dict[str, Any]) -> None:
        if self._connection_closed:
            logger.debug("graphql-ws send after close skipped", type=frame["type"])
            return
        try:
            await self._send(frame)
        except _TRANSPORT_ERRORS as e:
            logger.warning("graphql-ws send failed", type=frame["type"], error=str(e))

    async def _close(self) -> None:
        self._state = SubscriptionState.CLOSED
        if self._connection is None or self._connection_closed:
            return
        self._connection_closed = True
        await self._connection.close()


class Subscription:
    """Handle returned by ``subscribe``. Calling it cancels the subscription."""

    def __init__(self, session: SubscriptionSession, task: asyncio.Task[None]) -> None:
        self._session = session
        self._task = task

    @classmethod
    def start(cls, session: SubscriptionSession) -> Subscription:
        task = asyncio.get_running_loop().create_task(session.run())
        _running.add(task)
        task.add_done_callback(_running.discard)
        return cls(session, task)

    def __call__(self) -> None:
        self._session.cancel()

    @property
    def id(self) -> Any:
        return self._session.id

    @property
    def state(self) -> SubscriptionState:
        return self._session.state

    async def wait_closed(self) -> None:
        """Wait for the session to end, re-raising any observer exception."""
        await self._task
