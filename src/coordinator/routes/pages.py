from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse, RedirectResponse

from ..config import CoordinatorSettings
from .dependencies import get_settings

# Pages served to browsers. Client assets live under /static (see main.create_app).
router = APIRouter(tags=["pages"])


def _page(cfg: CoordinatorSettings, name: str) -> FileResponse:
    path = cfg.static_dir / name
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{name} not found")
    return FileResponse(path)


@router.get("/", include_in_schema=False)
def index(
    display: Optional[str] = Query(None, description="Display identity this page adopts, e.g. display2"),
    camera: Optional[int] = Query(None, description="Camera index override"),
    cfg: CoordinatorSettings = Depends(get_settings),
):
    """
    Display page when ?display=<id> is given, otherwise redirect to the admin page.
    The display and camera parameters are read by the page itself.
    """
    if not display:
        return RedirectResponse(url="/admin")
    return _page(cfg, "index.html")


@router.get("/admin", include_in_schema=False)
def admin(cfg: CoordinatorSettings = Depends(get_settings)):
    return _page(cfg, "admin.html")


@router.get("/setup", include_in_schema=False)
def setup(cfg: CoordinatorSettings = Depends(get_settings)):
    return _page(cfg, "setup.html")
