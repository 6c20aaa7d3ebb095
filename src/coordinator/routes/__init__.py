from .pages import router as pages_router
from .status import router as status_router
from .ws import router as ws_router

__all__ = ["pages_router", "status_router", "ws_router"]
