from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentSettings(BaseSettings):
    """
    Configuration for one display agent.
    """

    # Tell pydantic-settings to load environment variables from .env if present.
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # ignore unknown env vars
    )

    # --- Identity ---
    # Trailing number is the display's position in the arrangement.
    display_id: str = "display1"

    # --- Coordination service ---
    server_url: str = "ws://127.0.0.1:3000/ws"

    # --- Camera ---
    # None: display N uses camera N-1 (falls back to camera 0).
    camera_index: Optional[int] = None
    frame_width: int = 640
    frame_height: int = 480

    # Rendered size used for edge comparisons (0 = same as the frame).
    display_width: int = 0
    display_height: int = 0

    # The displayed feed is mirrored; edges are reported in un-mirrored coordinates.
    mirror: bool = True

    # --- Face detection ---
    weights_dir: Path = Path("./models")
    weights_file: str = "face_detection_yunet_2023mar.onnx"
    input_size: int = 320
    score_threshold: float = 0.5
    edge_threshold: int = 50  # pixels from edge, in display units
    detection_interval_ms: int = 100

    # --- Logging ---
    log_level: str = "INFO"
    debug: bool = False

    @property
    def weights_path(self) -> Path:
        return self.weights_dir / self.weights_file

    @property
    def display_size(self) -> tuple[int, int]:
        return (
            self.display_width or self.frame_width,
            self.display_height or self.frame_height,
        )
