from __future__ import annotations

import logging
from typing import Dict, Generic, List, Optional, TypeVar

from .adjacency import parse_display_number

logger = logging.getLogger(__name__)

H = TypeVar("H")


class DisplayRegistry(Generic[H]):
    """
    Maps display ids to the connection handle that registered them.

    Registration is last-write-wins: registering an id again replaces the
    previous handle. Handles are compared by identity when a connection goes
    away, so the registry never keeps a handle for a closed connection as long
    as every disconnect calls unregister().
    """

    def __init__(self) -> None:
        self._displays: Dict[str, H] = {}

    def register(self, display_id: str, handle: H) -> None:
        previous = self._displays.get(display_id)
        self._displays[display_id] = handle
        if previous is not None and previous is not handle:
            logger.info("Display %s re-registered on a new connection", display_id)

    def unregister(self, handle: H) -> Optional[str]:
        """
        Remove the entry owned by `handle`, if any.
        Linear scan; display counts stay small.
        """
        for display_id, registered in self._displays.items():
            if registered is handle:
                del self._displays[display_id]
                return display_id
        return None

    def resolve(self, display_id: str) -> Optional[H]:
        return self._displays.get(display_id)

    def count(self) -> int:
        return len(self._displays)

    def display_ids(self) -> List[str]:
        """Registered ids ordered by ordinal (ids without one sort last)."""
        def _key(display_id: str):
            number = parse_display_number(display_id)
            return (number is None, number or 0, display_id)

        return sorted(self._displays, key=_key)

    def handles(self) -> List[H]:
        return list(self._displays.values())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, display_id: object) -> bool:
        return display_id in self._displays
