"""
Display session: model loading, camera acquisition and the detection loop.

States:
    IDLE -> MODELS_LOADING -> CAMERA_REQUESTED -> STREAMING -> DETECTING
FAILED is reachable from any of them on an unrecoverable error (missing
model weights, no camera, access refused). There is no retry: the failure
stays in status_text until the agent is restarted.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol

import numpy as np

from coordinator.schemas import EdgeEvent, FaceApproaching

from .camera import probe_camera_devices, select_camera_index
from .config import AgentSettings
from .detector import FaceDetector
from .errors import DisplayAgentError
from .faces import evaluate_frame, scale_box
from .scheduling import PeriodicTask

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    MODELS_LOADING = "models_loading"
    CAMERA_REQUESTED = "camera_requested"
    STREAMING = "streaming"
    DETECTING = "detecting"
    FAILED = "failed"


class Camera(Protocol):
    frame_size: tuple[int, int]

    async def open(self) -> None: ...

    async def read(self) -> Optional[np.ndarray]: ...

    def release(self) -> None: ...


CameraFactory = Callable[[int, int, int], Camera]
EdgeReporter = Callable[[EdgeEvent], Awaitable[None]]


class DisplaySession:
    def __init__(
        self,
        cfg: AgentSettings,
        detector: FaceDetector,
        camera_factory: CameraFactory,
        report_edge: EdgeReporter,
        device_probe: Callable[[], List[int]] = probe_camera_devices,
    ):
        self.cfg = cfg
        self.detector = detector
        self.camera_factory = camera_factory
        self.report_edge = report_edge
        self.device_probe = device_probe

        self.state = SessionState.IDLE
        self.status_text = ""
        self.camera: Optional[Camera] = None
        self.faces_detected = 0
        self.last_approach: Optional[FaceApproaching] = None
        self.arrangement: Optional[str] = None

        self._loop = PeriodicTask(
            self.detect_once,
            interval_sec=cfg.detection_interval_ms / 1000,
            name=f"detect-{cfg.display_id}",
        )

    @property
    def loop(self) -> PeriodicTask:
        return self._loop

    def _set_state(self, state: SessionState, status_text: str) -> None:
        self.state = state
        self.status_text = status_text
        logger.info("[%s] %s: %s", self.cfg.display_id, state.value, status_text)

    def _fail(self, message: str) -> None:
        self.state = SessionState.FAILED
        self.status_text = message
        logger.error("[%s] %s", self.cfg.display_id, message)

    async def start(self) -> bool:
        """
        Bring the session up to DETECTING. Returns False (state FAILED) if
        any step fails.
        """
        try:
            self._set_state(SessionState.MODELS_LOADING, "Loading face detection models...")
            await self.detector.load()

            self._set_state(SessionState.CAMERA_REQUESTED, "Models loaded. Detecting available cameras...")
            devices = self.device_probe()
            logger.info("Available video devices: %s", devices)
            index = select_camera_index(self.cfg.display_id, self.cfg.camera_index, len(devices))
            camera = self.camera_factory(devices[index], self.cfg.frame_width, self.cfg.frame_height)
            await camera.open()
            self.camera = camera

            self._set_state(SessionState.STREAMING, f"Camera {devices[index]} streaming")

            self._loop.start()
            self._set_state(SessionState.DETECTING, "Detecting faces")
            return True

        except DisplayAgentError as e:
            self._fail(f"Error: {e}")
        except Exception as e:
            logger.exception("Unexpected error while starting display session")
            self._fail(f"Error: {e}")

        self._release_camera()
        return False

    async def stop(self) -> None:
        """Stop the detection loop and release the camera."""
        await self._loop.stop()
        self._release_camera()
        if self.state != SessionState.FAILED:
            self._set_state(SessionState.IDLE, "Stopped")

    def _release_camera(self) -> None:
        if self.camera is not None:
            self.camera.release()
            self.camera = None

    async def detect_once(self) -> Optional[EdgeEvent]:
        """
        One detection cycle. Errors are logged and shown in status_text but
        never stop the loop.
        """
        try:
            frame = await self.camera.read()
            if frame is None:
                self.status_text = "Error: camera returned no frame"
                return None

            boxes = await self.detector.detect(frame)
            self.faces_detected = len(boxes)

            display_size = self.cfg.display_size
            frame_size = self.camera.frame_size
            if display_size != frame_size:
                boxes = [scale_box(box, frame_size, display_size) for box in boxes]

            event = evaluate_frame(
                boxes,
                display_id=self.cfg.display_id,
                display_width=display_size[0],
                threshold=self.cfg.edge_threshold,
                mirrored=self.cfg.mirror,
            )

            self.status_text = f"Faces detected: {self.faces_detected}"
            if event is None:
                return None

            await self.report_edge(event)
            self.status_text += f" | Edge: {event.edge.value.upper()}"
            return event

        except Exception as e:
            logger.error("Error in face detection: %s", e)
            self.status_text = f"Error: {e}"
            return None

    def on_face_approaching(self, approach: FaceApproaching) -> None:
        self.last_approach = approach
        logger.info("Face approaching from %s at %s edge", approach.from_, approach.edge.value)

    def on_arrangement_changed(self, arrangement: str) -> None:
        self.arrangement = arrangement
        logger.info("Display arrangement changed to %s", arrangement)
