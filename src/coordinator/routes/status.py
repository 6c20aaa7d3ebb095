from fastapi import APIRouter, Depends

from ..schemas import ArrangementIn, DisplaysOut
from ..service import CoordinationService
from .dependencies import get_service

# Read-only view of the live registry plus an admin shortcut for changing
# the arrangement without opening a WebSocket.
# Prefix: /api
router = APIRouter(prefix="/api", tags=["displays"])


@router.get("/displays", response_model=DisplaysOut)
def list_displays(service: CoordinationService = Depends(get_service)):
    """Currently registered displays (ordered by ordinal) and the arrangement."""
    return service.snapshot()


@router.put("/arrangement", response_model=DisplaysOut)
async def set_arrangement(payload: ArrangementIn, service: CoordinationService = Depends(get_service)):
    """
    Same effect as a set_display_arrangement message: stored as given and
    broadcast to every connected client.
    """
    await service.set_arrangement(payload.arrangement)
    return service.snapshot()
