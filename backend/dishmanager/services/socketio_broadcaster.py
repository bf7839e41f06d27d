"""
DishManager Backend — Socket.IO Broadcast Channel
==================================================

What:  BroadcastPublisher implementation on top of a python-socketio AsyncServer.
Why:   Browser dashboards already speak Socket.IO; the Python client sync layer
       uses the python-socketio client against the same endpoint.
How:   One AsyncServer per application, mounted next to FastAPI with
       socketio.ASGIApp at /socket.io/. publish() emits to every connected sid.

Ordering:
    Concurrent requests may publish at the same time. AsyncServer.emit awaits
    while queueing the packet for each client, so two unguarded emits could
    reach different clients in different orders. An asyncio.Lock serializes
    publications: every client sees events in the same publish order.

Delivery:
    At-most-once per connection. A client that is disconnected when an event
    is emitted never receives it; there is no backlog.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set, Union

import socketio

from dishmanager.schemas.events import DishEvent
from dishmanager.services.broadcast_base import BroadcastPublisher

logger = logging.getLogger(__name__)


class SocketIOBroadcaster(BroadcastPublisher):
    """
    Fan-out publisher for dish mutation events.

    Server-side events handled:
        connect     Track the sid (no authentication: the API is public)
        disconnect  Forget the sid
        join-room   Put the sid into a named room (broadcasts still go to all)
    """

    def __init__(
        self,
        cors_allowed_origins: Union[str, List[str]] = "*",
        server: Optional[socketio.AsyncServer] = None,
    ):
        self.server = server or socketio.AsyncServer(
            async_mode="asgi",
            cors_allowed_origins=cors_allowed_origins,
            logger=False,
            engineio_logger=False,
        )
        self._sids: Set[str] = set()
        self._publish_lock = asyncio.Lock()

        self.server.on("connect", self._on_connect)
        self.server.on("disconnect", self._on_disconnect)
        self.server.on("join-room", self._on_join_room)

    # ── Connection Handlers ───────────────────────────────────────────────

    async def _on_connect(self, sid: str, environ: Dict[str, Any], auth: Any = None) -> None:
        self._sids.add(sid)
        logger.info("Client connected: %s (%d connected)", sid, len(self._sids))

    async def _on_disconnect(self, sid: str, *args: Any) -> None:
        self._sids.discard(sid)
        logger.info("Client disconnected: %s (%d connected)", sid, len(self._sids))

    async def _on_join_room(self, sid: str, room: Any) -> None:
        if not isinstance(room, str) or not room.strip():
            logger.warning("Client %s sent join-room without a room name", sid)
            return
        await self.server.enter_room(sid, room.strip())
        logger.info("Client %s joined room: %s", sid, room.strip())

    # ── Publishing ────────────────────────────────────────────────────────

    @property
    def connected_clients(self) -> int:
        return len(self._sids)

    async def publish(self, event: DishEvent) -> None:
        """
        Emit the event to every connected client, in publish order.

        Delivery errors are logged and swallowed: the mutation that produced
        the event has already been committed and answered.
        """
        payload = event.to_wire()
        async with self._publish_lock:
            try:
                await self.server.emit(event.event_name, payload)
            except Exception as e:
                logger.error(
                    "Broadcast of %s failed: %s",
                    event.event_name,
                    str(e),
                    exc_info=True,
                )
                return
        logger.debug("Broadcast %s to %d client(s)", event.event_name, len(self._sids))

    def asgi_app(self, other_asgi_app: Any) -> socketio.ASGIApp:
        """Wrap the HTTP app so /socket.io/ is served by this channel."""
        return socketio.ASGIApp(
            self.server,
            other_asgi_app=other_asgi_app,
            socketio_path="socket.io",
        )
