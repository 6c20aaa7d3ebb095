from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class Arrangement(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    GRID = "grid"


class Edge(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class Position(BaseModel):
    x: float
    y: float


class EdgeEvent(BaseModel):
    """A face reached the edge of one display's frame."""

    model_config = ConfigDict(populate_by_name=True)

    display_id: str = Field(..., alias="displayId")
    edge: Edge
    position: Position


class FaceApproaching(BaseModel):
    """Notification for the display a face is walking towards."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    edge: Edge
    position: Position


# --- client -> service ---
# Frames are {"event": <name>, "data": <payload>}.

class RegisterDisplayMessage(BaseModel):
    event: Literal["register_display"] = "register_display"
    data: str


class WatchDisplayMessage(BaseModel):
    # A display page following an id the agent registered; does not claim the id.
    event: Literal["watch_display"] = "watch_display"
    data: str


class SetDisplayArrangementMessage(BaseModel):
    # Arrangement is deliberately not validated; unknown values isolate every edge.
    event: Literal["set_display_arrangement"] = "set_display_arrangement"
    data: str


class FaceAtEdgeMessage(BaseModel):
    event: Literal["face_at_edge"] = "face_at_edge"
    data: EdgeEvent


ClientMessage = Annotated[
    Union[RegisterDisplayMessage, WatchDisplayMessage, SetDisplayArrangementMessage, FaceAtEdgeMessage],
    Field(discriminator="event"),
]


# --- service -> client ---

class DisplayArrangementChangedMessage(BaseModel):
    event: Literal["display_arrangement_changed"] = "display_arrangement_changed"
    data: str


class FaceApproachingMessage(BaseModel):
    event: Literal["face_approaching"] = "face_approaching"
    data: FaceApproaching


ServerMessage = Annotated[
    Union[DisplayArrangementChangedMessage, FaceApproachingMessage],
    Field(discriminator="event"),
]

_client_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)
_server_adapter: TypeAdapter[ServerMessage] = TypeAdapter(ServerMessage)


def parse_client_message(text: str | bytes) -> ClientMessage:
    """
    Parse one JSON frame sent by a display or admin client.
    Raises ValueError on malformed/unknown messages.
    """
    try:
        return _client_adapter.validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid client message: {e}") from e


def parse_server_message(text: str | bytes) -> ServerMessage:
    """Parse one JSON frame sent by the coordination service."""
    try:
        return _server_adapter.validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid server message: {e}") from e


def dump_message(message: BaseModel) -> str:
    """Serialize a message using the wire (camelCase / "from") field names."""
    return message.model_dump_json(by_alias=True)


# --- HTTP API ---

class ArrangementIn(BaseModel):
    arrangement: str


class DisplaysOut(BaseModel):
    arrangement: str
    count: int
    displays: list[str]
