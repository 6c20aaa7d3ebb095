from fastapi.requests import HTTPConnection

from ..config import CoordinatorSettings
from ..service import CoordinationService


def get_service(conn: HTTPConnection) -> CoordinationService:
    """The per-process service stored on app.state by create_app()."""
    return conn.app.state.service


def get_settings(conn: HTTPConnection) -> CoordinatorSettings:
    return conn.app.state.settings
