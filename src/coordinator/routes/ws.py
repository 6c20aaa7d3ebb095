from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..schemas import ServerMessage, dump_message, parse_client_message
from ..service import CoordinationService
from .dependencies import get_service

logger = logging.getLogger(__name__)

# One long-lived channel per browser display or admin page.
router = APIRouter(tags=["displays"])


class WebSocketConnection:
    """Connection handle the service uses to push messages to one client."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    async def send_message(self, message: ServerMessage) -> None:
        await self.websocket.send_text(dump_message(message))

    def __repr__(self) -> str:
        return f"WebSocketConnection({self.websocket.client})"


@router.websocket("/ws")
async def display_channel(
    websocket: WebSocket,
    service: CoordinationService = Depends(get_service),
):
    """
    Duplex channel for displays and admin clients.

    Frames are JSON {"event": ..., "data": ...}, sent as text or binary.
    Invalid frames are logged and ignored; the channel stays open.
    """
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    service.connect(connection)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            try:
                message = parse_client_message(frame.get("text") or frame.get("bytes") or "")
            except ValueError as e:
                logger.warning("Ignoring malformed message from %s: %s", websocket.client, e)
                continue

            await service.handle(connection, message)

    except WebSocketDisconnect:
        pass
    finally:
        service.disconnect(connection)
