"""
Adjacency resolution between displays.

Displays are placed purely by the integer ordinal at the end of their id
("display3" -> 3) and the number of displays currently connected. There is
no stored topology: renumbered or non-contiguous ordinals ("display1",
"display5") give wrong neighbours, which is a known limitation.
"""

from __future__ import annotations

import math
import re
from typing import Callable, Dict, Optional, Tuple

from .schemas import Arrangement, Edge

_ORDINAL_RE = re.compile(r"(\d+)$")

_OPPOSITE_EDGES = {
    Edge.LEFT: Edge.RIGHT,
    Edge.RIGHT: Edge.LEFT,
    Edge.TOP: Edge.BOTTOM,
    Edge.BOTTOM: Edge.TOP,
}


def parse_display_number(display_id: str) -> Optional[int]:
    """Return the trailing ordinal of a display id, or None if it has none."""
    match = _ORDINAL_RE.search(display_id)
    if not match:
        return None
    return int(match.group(1))


def format_display_id(number: int) -> str:
    return f"display{number}"


def get_opposite_edge(edge: Edge | str) -> Edge:
    return _OPPOSITE_EDGES[Edge(edge)]


def grid_size(total_displays: int) -> int:
    return math.ceil(math.sqrt(total_displays))


def grid_position(display_number: int, total_displays: int) -> Tuple[int, int]:
    """
    (row, col) of a display in the square grid, both 1-based.
    Displays fill the grid row by row starting at 1.
    """
    size = grid_size(total_displays)
    row = math.ceil(display_number / size)
    col = ((display_number - 1) % size) + 1
    return row, col


def _horizontal(display_number: int, edge: str, total_displays: int) -> Optional[int]:
    if edge == Edge.LEFT and display_number > 1:
        return display_number - 1
    if edge == Edge.RIGHT and display_number < total_displays:
        return display_number + 1
    return None


def _vertical(display_number: int, edge: str, total_displays: int) -> Optional[int]:
    if edge == Edge.TOP and display_number > 1:
        return display_number - 1
    if edge == Edge.BOTTOM and display_number < total_displays:
        return display_number + 1
    return None


def _grid(display_number: int, edge: str, total_displays: int) -> Optional[int]:
    if total_displays < 1:
        return None

    size = grid_size(total_displays)
    row, col = grid_position(display_number, total_displays)

    if edge == Edge.TOP and row > 1:
        above = display_number - size
        return above if above > 0 else None
    if edge == Edge.BOTTOM and row < size:
        below = display_number + size
        return below if below <= total_displays else None
    if edge == Edge.LEFT and col > 1:
        return display_number - 1
    if edge == Edge.RIGHT and col < size:
        right = display_number + 1
        return right if right <= total_displays else None
    return None


ARRANGEMENT_HANDLERS: Dict[str, Callable[[int, str, int], Optional[int]]] = {
    Arrangement.HORIZONTAL.value: _horizontal,
    Arrangement.VERTICAL.value: _vertical,
    Arrangement.GRID.value: _grid,
}


def get_adjacent_display_id(
    current_display_id: str,
    edge: Edge | str,
    arrangement: Arrangement | str,
    total_displays: int,
) -> Optional[str]:
    """
    Resolve the display next to `current_display_id` across `edge`.

    Returns None when there is no display in that direction, when the id has
    no trailing ordinal, or when the arrangement is not one we know. Never raises.
    """
    display_number = parse_display_number(current_display_id)
    if display_number is None:
        return None

    key = arrangement.value if isinstance(arrangement, Arrangement) else arrangement
    handler = ARRANGEMENT_HANDLERS.get(key)
    if handler is None:
        return None

    edge_value = edge.value if isinstance(edge, Edge) else edge
    neighbour = handler(display_number, edge_value, total_displays)
    return format_display_id(neighbour) if neighbour is not None else None
