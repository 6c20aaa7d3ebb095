"""
Coordination service: connection registry, arrangement state and routing.

One instance is created per process (see main.create_app) and every inbound
message is handled to completion on the event loop before the next one, so
the registry and arrangement need no locking.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol, Set

from .adjacency import get_adjacent_display_id, get_opposite_edge
from .registry import DisplayRegistry
from .schemas import (
    Arrangement,
    ClientMessage,
    DisplayArrangementChangedMessage,
    DisplaysOut,
    EdgeEvent,
    FaceApproaching,
    FaceApproachingMessage,
    FaceAtEdgeMessage,
    RegisterDisplayMessage,
    ServerMessage,
    SetDisplayArrangementMessage,
    WatchDisplayMessage,
)

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Opaque handle for one client channel."""

    async def send_message(self, message: ServerMessage) -> None: ...


class CoordinationService:
    def __init__(self, arrangement: Arrangement | str = Arrangement.HORIZONTAL) -> None:
        self._registry: DisplayRegistry[Connection] = DisplayRegistry()
        self._connections: Set[Connection] = set()
        # display id -> pages showing that display's notifications
        self._watchers: Dict[str, Set[Connection]] = {}
        self._arrangement: str = arrangement.value if isinstance(arrangement, Arrangement) else arrangement

    @property
    def arrangement(self) -> str:
        return self._arrangement

    @property
    def registry(self) -> DisplayRegistry[Connection]:
        return self._registry

    def snapshot(self) -> DisplaysOut:
        return DisplaysOut(
            arrangement=self._arrangement,
            count=self._registry.count(),
            displays=self._registry.display_ids(),
        )

    # --- connection lifecycle ---

    def connect(self, connection: Connection) -> None:
        self._connections.add(connection)
        logger.info("New client connected (%d open)", len(self._connections))

    def disconnect(self, connection: Connection) -> Optional[str]:
        """Forget a closed connection and the display it registered, if any."""
        self._connections.discard(connection)
        for watched in [d for d, pages in self._watchers.items() if connection in pages]:
            self._watchers[watched].discard(connection)
            if not self._watchers[watched]:
                del self._watchers[watched]

        display_id = self._registry.unregister(connection)
        removed = display_id
        # A single channel may have registered more than one id.
        while removed is not None:
            logger.info("Display %s disconnected", removed)
            removed = self._registry.unregister(connection)

        if display_id is None:
            logger.info("Client disconnected (%d open)", len(self._connections))
        return display_id

    # --- message handlers ---

    async def handle(self, connection: Connection, message: ClientMessage) -> None:
        match message:
            case RegisterDisplayMessage(data=display_id):
                self.register_display(connection, display_id)
            case WatchDisplayMessage(data=display_id):
                self.watch_display(connection, display_id)
            case SetDisplayArrangementMessage(data=arrangement):
                await self.set_arrangement(arrangement)
            case FaceAtEdgeMessage(data=event):
                await self.face_at_edge(event)
            case _:
                raise TypeError(f"Unhandled message type: {type(message).__name__}")

    def register_display(self, connection: Connection, display_id: str) -> None:
        self._connections.add(connection)
        self._registry.register(display_id, connection)
        logger.info("Display %s registered", display_id)

    def watch_display(self, connection: Connection, display_id: str) -> None:
        """Copy face_approaching notifications for display_id to this connection."""
        self._connections.add(connection)
        self._watchers.setdefault(display_id, set()).add(connection)
        logger.info("Page watching display %s", display_id)

    async def set_arrangement(self, arrangement: Arrangement | str) -> int:
        """Store the arrangement as given and broadcast it; returns deliveries made."""
        value = arrangement.value if isinstance(arrangement, Arrangement) else arrangement
        if value not in {a.value for a in Arrangement}:
            logger.warning("Unknown display arrangement %r; edges will not resolve", value)

        self._arrangement = value
        logger.info("Display arrangement set to: %s", value)
        return await self.broadcast(DisplayArrangementChangedMessage(data=value))

    async def face_at_edge(self, event: EdgeEvent) -> Optional[str]:
        """
        Forward a face-at-edge event to the adjacent display.

        Returns the id the notification was delivered to, or None when the
        event was dropped (no neighbour, or neighbour not connected).
        """
        logger.info("Face detected at %s edge of display %s", event.edge.value, event.display_id)

        adjacent_id = get_adjacent_display_id(
            event.display_id,
            event.edge,
            self._arrangement,
            self._registry.count(),
        )
        if adjacent_id is None:
            logger.debug("No display beyond %s edge of %s", event.edge.value, event.display_id)
            return None

        target = self._registry.resolve(adjacent_id)
        if target is None:
            logger.debug("Adjacent display %s is not connected; dropping event", adjacent_id)
            return None

        message = FaceApproachingMessage(
            data=FaceApproaching(
                from_=event.display_id,
                edge=get_opposite_edge(event.edge),
                position=event.position,
            )
        )
        for page in list(self._watchers.get(adjacent_id, ())):
            if page is not target:
                await self._deliver(page, message)

        if await self._deliver(target, message):
            logger.debug("Notified %s of face approaching from %s", adjacent_id, event.display_id)
            return adjacent_id
        return None

    # --- delivery ---

    async def broadcast(self, message: ServerMessage) -> int:
        """Send to every open connection; returns how many deliveries succeeded."""
        sent = 0
        for connection in list(self._connections):
            if await self._deliver(connection, message):
                sent += 1
        return sent

    async def _deliver(self, connection: Connection, message: ServerMessage) -> bool:
        try:
            await connection.send_message(message)
            return True
        except Exception as e:
            # The channel's own receive loop will notice the close and disconnect it.
            logger.warning("Failed to deliver %s: %s", message.event, e)
            return False
