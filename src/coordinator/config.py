from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

STATIC_DIR = Path(__file__).parent / "static"


class CoordinatorSettings(BaseSettings):
    """Coordination service settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # agent settings may share the same .env
    )

    # --- Server ---
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False

    # --- Logging ---
    log_level: str = "INFO"

    # --- Displays ---
    # Arrangement used until an admin client changes it.
    default_arrangement: str = "horizontal"

    # Directory holding index.html, admin.html, setup.html and client assets.
    static_dir: Path = STATIC_DIR

    # CORS: comma-separated origins, "*" allows any (displays are opened
    # from arbitrary hosts on the local network).
    cors_origins: str = "*"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = CoordinatorSettings()
