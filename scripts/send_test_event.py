#!/usr/bin/env python3
"""
Send a test face_at_edge event to the coordination service.

Registers as the given display, reports a face at one of its edges, and
prints whatever the service sends back for a couple of seconds.

Usage:
    python scripts/send_test_event.py [display_id] [edge] [arrangement]

Examples:
    python scripts/send_test_event.py
    python scripts/send_test_event.py display2 left
    python scripts/send_test_event.py display1 bottom grid
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from coordinator.schemas import EdgeEvent, Position  # noqa: E402
from display_agent.client import CoordinatorClient  # noqa: E402


async def send_event(
    display_id: str = "display1",
    edge: str = "right",
    arrangement: str | None = None,
    server_url: str = "ws://localhost:3000/ws",
) -> None:
    """Send one test event and echo the service's replies."""

    print(f"Sending event to {server_url}")
    print(f"  Display ID: {display_id}")
    print(f"  Edge:       {edge}")
    if arrangement:
        print(f"  Arrangement: {arrangement}")
    print()

    client = CoordinatorClient(server_url)
    try:
        await client.connect()
    except OSError:
        print("ERROR: Could not connect to the coordination service.")
        print("Make sure `python main.py` is running first.")
        sys.exit(1)

    try:
        await client.register(display_id)
        if arrangement:
            await client.set_arrangement(arrangement)
        await client.report_edge(EdgeEvent(display_id=display_id, edge=edge, position=Position(x=0, y=0)))

        listener = client.listen(
            on_face_approaching=lambda a: print(f"face_approaching from {a.from_} at {a.edge.value} edge"),
            on_arrangement_changed=lambda value: print(f"display_arrangement_changed: {value}"),
        )
        try:
            await asyncio.wait_for(listener, timeout=2)
        except asyncio.TimeoutError:
            pass
    finally:
        await client.close()


if __name__ == "__main__":
    display_id = sys.argv[1] if len(sys.argv) > 1 else "display1"
    edge = sys.argv[2] if len(sys.argv) > 2 else "right"
    arrangement = sys.argv[3] if len(sys.argv) > 3 else None

    asyncio.run(send_event(display_id=display_id, edge=edge, arrangement=arrangement))
