"""
Per-frame face edge logic.

Everything here is pure (no camera, no sockets) so it is easy to unit test.
Boxes are not tracked between frames: each cycle's largest face is judged
on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from coordinator.schemas import Edge, EdgeEvent, Position


@dataclass(frozen=True)
class FaceBox:
    """Face bounding box in pixels, (x, y) is the top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


def select_largest_face(boxes: Iterable[FaceBox]) -> Optional[FaceBox]:
    """
    Largest box by area (closest face to the camera).
    On equal areas the first one in input order wins.
    """
    largest: Optional[FaceBox] = None
    for box in boxes:
        if largest is None or box.area > largest.area:
            largest = box
    return largest


def scale_box(box: FaceBox, frame_size: Tuple[int, int], display_size: Tuple[int, int]) -> FaceBox:
    """Map a box from camera frame pixels to rendered display pixels."""
    sx = display_size[0] / frame_size[0]
    sy = display_size[1] / frame_size[1]
    return FaceBox(x=box.x * sx, y=box.y * sy, width=box.width * sx, height=box.height * sy)


def to_world_box(box: FaceBox, display_width: float, mirrored: bool = True) -> FaceBox:
    """
    Undo the horizontal mirroring of the displayed feed so "left" and "right"
    mean the same thing to an observer standing in front of any display.
    """
    if not mirrored:
        return box
    return FaceBox(x=display_width - (box.x + box.width), y=box.y, width=box.width, height=box.height)


def detect_edge(box: FaceBox, display_width: float, threshold: float) -> Optional[Edge]:
    """
    Edge the box is within `threshold` of, or None.
    The left test wins when a box is close to both.
    """
    if box.x < threshold:
        return Edge.LEFT
    if box.x + box.width > display_width - threshold:
        return Edge.RIGHT
    return None


def evaluate_frame(
    boxes: Iterable[FaceBox],
    *,
    display_id: str,
    display_width: float,
    threshold: float,
    mirrored: bool = True,
) -> Optional[EdgeEvent]:
    """
    Decide what one detection cycle reports: at most one edge event,
    for the largest face only. Boxes must already be in display pixels.
    """
    face = select_largest_face(boxes)
    if face is None:
        return None

    world = to_world_box(face, display_width, mirrored)
    edge = detect_edge(world, display_width, threshold)
    if edge is None:
        return None

    return EdgeEvent(display_id=display_id, edge=edge, position=Position(x=world.x, y=world.y))
