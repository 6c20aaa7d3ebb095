from __future__ import annotations

import logging
from typing import Callable, Optional

import websockets

from coordinator.schemas import (
    DisplayArrangementChangedMessage,
    EdgeEvent,
    FaceApproaching,
    FaceApproachingMessage,
    FaceAtEdgeMessage,
    RegisterDisplayMessage,
    SetDisplayArrangementMessage,
    dump_message,
    parse_server_message,
)

logger = logging.getLogger(__name__)


class CoordinatorClient:
    """
    WebSocket channel from one display agent to the coordination service.

    No reconnection: if the channel drops, listen() returns and the session
    is expected to be restarted.
    """

    def __init__(self, server_url: str):
        self.server_url = server_url
        self._ws = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(self) -> None:
        logger.info("Connecting to coordination service at %s", self.server_url)
        self._ws = await websockets.connect(self.server_url, ping_interval=20, ping_timeout=20)

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

    async def _send(self, message) -> None:
        if self._ws is None:
            raise RuntimeError("CoordinatorClient used before connect()")
        await self._ws.send(dump_message(message))

    async def register(self, display_id: str) -> None:
        await self._send(RegisterDisplayMessage(data=display_id))
        logger.info("Registered as %s", display_id)

    async def report_edge(self, event: EdgeEvent) -> None:
        await self._send(FaceAtEdgeMessage(data=event))

    async def set_arrangement(self, arrangement: str) -> None:
        await self._send(SetDisplayArrangementMessage(data=arrangement))

    async def listen(
        self,
        on_face_approaching: Optional[Callable[[FaceApproaching], object]] = None,
        on_arrangement_changed: Optional[Callable[[str], object]] = None,
    ) -> None:
        """
        Dispatch service messages until the channel closes.
        Callbacks may be plain functions or coroutines.
        """
        if self._ws is None:
            raise RuntimeError("CoordinatorClient used before connect()")

        try:
            async for raw in self._ws:
                try:
                    message = parse_server_message(raw)
                except ValueError as e:
                    logger.warning("Ignoring unexpected message from service: %s", e)
                    continue

                match message:
                    case FaceApproachingMessage(data=approach):
                        result = on_face_approaching(approach) if on_face_approaching else None
                    case DisplayArrangementChangedMessage(data=arrangement):
                        result = on_arrangement_changed(arrangement) if on_arrangement_changed else None
                    case _:
                        result = None

                if hasattr(result, "__await__"):
                    await result
        except websockets.ConnectionClosed as e:
            logger.warning("Connection to coordination service closed: %s", e)
