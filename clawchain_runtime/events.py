"""
Chain event listener for the ClawChain runtime.

Subscribes to CometBFT WebSocket events and emits notifications for
new shield commitments and new agent registrations. The connection is
owned by a single asyncio task which reconnects after a fixed delay
until :meth:`ChainEventListener.stop` is called.

Events emitted while the listener is reconnecting are not replayed.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, Union

import websockets
from pydantic import ValidationError

from clawchain_runtime.types import (
    UNKNOWN_LEAF_INDEX,
    AgentRegistered,
    CommitmentObserved,
    ConnectionState,
    EventFrame,
)

logger = logging.getLogger(__name__)

RECONNECT_DELAY_SECONDS = 5.0

COMMITMENT_QUERY = "tm.event='Tx' AND shield.commitment EXISTS"
AGENT_REGISTER_QUERY = "tm.event='Tx' AND agent_register.address EXISTS"
SUBSCRIPTION_QUERIES = (COMMITMENT_QUERY, AGENT_REGISTER_QUERY)

ChainEvent = Union[CommitmentObserved, AgentRegistered]

# Handlers may be plain callables or coroutine functions
CommitmentHandler = Callable[[CommitmentObserved], Coroutine[Any, Any, None] | None]
AgentRegisteredHandler = Callable[[AgentRegistered], Coroutine[Any, Any, None] | None]
ErrorHandler = Callable[[str], Coroutine[Any, Any, None] | None]
ConnectFn = Callable[[str], Awaitable[Any]]


@dataclass(frozen=True)
class ChainEventHandlers:
    """Callbacks for chain events. Every handler is optional."""

    on_commitment: CommitmentHandler | None = None
    on_agent_registered: AgentRegisteredHandler | None = None
    on_error: ErrorHandler | None = None


def to_websocket_url(rpc_url: str) -> str:
    """``http(s)://host:26657`` -> ``ws(s)://host:26657/websocket``."""
    url = rpc_url.rstrip("/")
    if url.startswith("https:"):
        url = "wss:" + url[len("https:"):]
    elif url.startswith("http:"):
        url = "ws:" + url[len("http:"):]
    return f"{url}/websocket"


def parse_event_frame(raw: str | bytes) -> list[ChainEvent]:
    """Turn one inbound frame into domain events.

    Frames that are not JSON or do not match the expected shape yield
    an empty list.
    """
    try:
        frame = EventFrame.model_validate_json(raw)
    except ValidationError:
        return []
    if frame.result is None or frame.result.events is None:
        return []

    events = frame.result.events
    parsed: list[ChainEvent] = []

    for i, commitment in enumerate(events.commitments):
        parsed.append(
            CommitmentObserved(
                commitment_id=commitment,
                leaf_index=_parse_leaf_index(events.leaf_indices, i),
            )
        )

    names = events.names
    for i, address in enumerate(events.addresses):
        name = names[i] if i < len(names) else "unknown"
        parsed.append(AgentRegistered(address=address, name=name))

    return parsed


def _parse_leaf_index(values: list[str], i: int) -> int:
    if i >= len(values) or not values[i]:
        return UNKNOWN_LEAF_INDEX
    try:
        return int(values[i])
    except ValueError:
        return UNKNOWN_LEAF_INDEX


async def _close_quietly(ws: Any) -> None:
    try:
        await ws.close()
    except Exception:
        logger.debug("Ignoring error while closing chain WebSocket")


class ChainEventListener:
    """Persistent subscription to a node's event bus.

    ``start()`` returns immediately; the connection, read loop and
    reconnect wait all run on one background task, so handlers are
    called one at a time in wire order.
    """

    def __init__(
        self,
        rpc_url: str,
        handlers: ChainEventHandlers | None = None,
        *,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        connect: ConnectFn | None = None,
    ) -> None:
        self._url = to_websocket_url(rpc_url)
        self._handlers = handlers or ChainEventHandlers()
        self._reconnect_delay = reconnect_delay
        self._connect = connect or websockets.connect
        self._request_ids = itertools.count(1)

        self._ws: Any | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopped = False
        self._state = ConnectionState.DISCONNECTED

    @property
    def url(self) -> str:
        """WebSocket URL the listener connects to."""
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start listening in the background. No-op if already running."""
        if self.is_running:
            return
        self._stopped = False
        self._state = ConnectionState.CONNECTING
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop listening, cancel any pending reconnect and close the socket.

        Safe to call from an event handler: the listener task then leaves
        its read loop after the handler returns instead of being cancelled.
        """
        self._stopped = True
        task, self._task = self._task, None
        ws, self._ws = self._ws, None
        try:
            if task is not None and not task.done() and task is not asyncio.current_task():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            if ws is not None:
                await _close_quietly(ws)
        finally:
            self._state = ConnectionState.DISCONNECTED

    # ---- Internal ----

    async def _run(self) -> None:
        this_run = asyncio.current_task()
        while not self._stopped and self._task is this_run:
            self._state = ConnectionState.CONNECTING
            try:
                ws = await self._connect(self._url)
            except Exception as e:
                await self._report_error(f"WebSocket connection failed: {e}")
            else:
                await self._listen(ws)

            if self._stopped or self._task is not this_run:
                break
            self._state = ConnectionState.RECONNECTING
            logger.info(
                "Chain event stream disconnected — reconnecting in %.1fs",
                self._reconnect_delay,
            )
            await asyncio.sleep(self._reconnect_delay)
        if self._task is this_run:
            self._state = ConnectionState.DISCONNECTED

    async def _listen(self, ws: Any) -> None:
        self._ws = ws
        self._state = ConnectionState.CONNECTED
        logger.debug("Chain WebSocket connected: %s", self._url)
        try:
            for query in SUBSCRIPTION_QUERIES:
                await self._subscribe(ws, query)
            async for raw in ws:
                await self._handle_message(raw)
                if self._stopped:
                    break
            else:
                logger.info("Chain WebSocket closed by remote")
        except Exception as e:
            if not self._stopped:
                await self._report_error(f"WebSocket connection error: {e}")
        finally:
            if self._ws is ws:
                self._ws = None
            await _close_quietly(ws)

    async def _subscribe(self, ws: Any, query: str) -> None:
        await ws.send(
            json.dumps(
                {
                    "jsonrpc": "2.0",
                    "id": next(self._request_ids),
                    "method": "subscribe",
                    "params": {"query": query},
                }
            )
        )
        logger.debug("Subscribed to %s", query)

    async def _handle_message(self, raw: str | bytes) -> None:
        events = parse_event_frame(raw)
        if not events:
            logger.debug("Ignoring non-event chain WS message")
            return
        for event in events:
            if self._stopped:
                return
            if isinstance(event, CommitmentObserved):
                await self._deliver(self._handlers.on_commitment, event)
            else:
                await self._deliver(self._handlers.on_agent_registered, event)

    async def _report_error(self, message: str) -> None:
        logger.debug(message)
        await self._deliver(self._handlers.on_error, message)

    async def _deliver(self, handler: Callable[[Any], Any] | None, payload: Any) -> None:
        if handler is None:
            return
        try:
            result = handler(payload)
            if asyncio.iscoroutine(result):
                await result
        except Exception:
            logger.exception("Error in chain event handler for %r", payload)
