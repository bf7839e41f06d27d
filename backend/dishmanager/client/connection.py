"""
DishManager Client — Broadcast Connection
=========================================

What:  Socket.IO client for the dish event channel with an explicit reconnect
       policy and an observable connection flag.
How:   python-socketio AsyncClient with its built-in reconnection disabled;
       (re)connects go through a tenacity AsyncRetrying loop instead.

Reconnect Policy:
    - Bounded: `attempts` tries per (re)connect, `delay` seconds apart
    - Triggered on an unexpected disconnect, never after disconnect()
    - A reconnect first waits for engine.io to finish closing the dropped
      transport; "not in a disconnected state" errors are retried as well
    - When every attempt fails the connection stays down and listeners keep
      seeing is_connected == False

Delivery:
    Events emitted while the connection is down are lost. Nothing is replayed
    on reconnect; callers that need to catch up re-fetch a snapshot (for
    example DishSync.refresh()) from a connection listener.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

import socketio
from pydantic import ValidationError
from socketio.exceptions import ConnectionError as SocketConnectionError
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from dishmanager.schemas.events import EVENT_TYPES, DishEvent, parse_event

logger = logging.getLogger(__name__)

EventHandler = Callable[[DishEvent], Union[None, Awaitable[None]]]
ConnectionListener = Callable[[bool], None]


class ChannelUnavailableError(Exception):
    """Every connect attempt allowed by the reconnect policy failed."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Could not connect to {url} after {attempts} attempt(s)")


class BroadcastConnection:
    def __init__(
        self,
        url: str = "http://localhost:5000",
        attempts: int = 5,
        delay: float = 1.0,
        client: Optional[socketio.AsyncClient] = None,
    ):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.url = url
        self.attempts = attempts
        self.delay = delay
        self._client = client or socketio.AsyncClient(
            reconnection=False,
            logger=False,
            engineio_logger=False,
        )
        self._connected = False
        self._closing = False
        self._reconnect_task: Optional[asyncio.Task] = None
        self._handlers: List[EventHandler] = []
        self._listeners: List[ConnectionListener] = []

        self._client.on("connect", self._on_connect)
        self._client.on("disconnect", self._on_disconnect)
        for name in EVENT_TYPES:
            self._client.on(name, self._make_event_handler(name))

    # ── Observable State ──────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._connected

    def add_listener(self, listener: ConnectionListener) -> None:
        """Call `listener(is_connected)` every time the flag changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ConnectionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def on_event(self, handler: EventHandler) -> None:
        """Register a callback (sync or async) for every parsed dish event."""
        self._handlers.append(handler)

    def _set_connected(self, value: bool) -> None:
        if value == self._connected:
            return
        self._connected = value
        for listener in list(self._listeners):
            listener(value)

    # ── Connect / Disconnect ──────────────────────────────────────────────

    async def connect(self) -> None:
        """
        Connect using the reconnect policy.

        Raises:
            ChannelUnavailableError: All attempts failed
        """
        self._closing = False
        await self._connect_with_policy()

    async def disconnect(self) -> None:
        self._closing = True
        if self._reconnect_task is not None and not self._reconnect_task.done():
            self._reconnect_task.cancel()
        self._reconnect_task = None
        await self._client.disconnect()
        self._set_connected(False)

    async def _connect_with_policy(self) -> None:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.delay),
            # ValueError: engine.io still tearing down the previous connection
            retry=retry_if_exception_type((SocketConnectionError, ValueError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._client.connect(self.url, transports=["websocket", "polling"])
        except RetryError as e:
            logger.error("Broadcast channel unavailable at %s after %d attempt(s)", self.url, self.attempts)
            raise ChannelUnavailableError(self.url, self.attempts) from e
        self._set_connected(True)

    async def _wait_until_closed(self, timeout: float = 5.0) -> None:
        """Wait for engine.io to finish closing the dropped transport."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while getattr(self._client.eio, "state", "disconnected") != "disconnected":
            if loop.time() >= deadline:
                logger.warning("Previous connection to %s still closing after %.1fs", self.url, timeout)
                return
            await asyncio.sleep(0.05)

    async def _reconnect(self) -> None:
        try:
            await self._wait_until_closed()
            await self._connect_with_policy()
        except ChannelUnavailableError:
            # Stays disconnected; listeners already saw False
            return
        except Exception as e:
            logger.error("Reconnect to %s failed: %s", self.url, str(e), exc_info=True)
            return
        logger.info("Reconnected to %s", self.url)

    # ── Socket.IO Handlers ────────────────────────────────────────────────

    async def _on_connect(self) -> None:
        logger.info("Connected to broadcast channel at %s", self.url)
        self._set_connected(True)

    async def _on_disconnect(self, *args: Any) -> None:
        logger.warning("Disconnected from broadcast channel at %s", self.url)
        self._set_connected(False)
        if self._closing:
            return
        self._reconnect_task = asyncio.ensure_future(self._reconnect())

    def _make_event_handler(self, name: str) -> Callable[[Any], Awaitable[None]]:
        async def handler(data: Any) -> None:
            await self._dispatch(name, data)

        return handler

    async def _dispatch(self, name: str, data: Any) -> None:
        try:
            event = parse_event(name, data)
        except (KeyError, TypeError, ValidationError) as e:
            logger.warning("Ignoring malformed %s event: %s", name, str(e))
            return
        for handler in list(self._handlers):
            result = handler(event)
            if inspect.isawaitable(result):
                await result
