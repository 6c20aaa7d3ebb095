from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import cv2
import numpy as np

from coordinator.adjacency import parse_display_number

from .errors import CameraPermissionError, CameraUnavailableError

logger = logging.getLogger(__name__)


def select_camera_index(display_id: str, camera_param: Optional[int], device_count: int) -> int:
    """
    Pick the camera for a display.

    An explicit camera index wins when it is valid. Otherwise display N uses
    camera N-1. Anything out of range falls back to camera 0.
    """
    if device_count <= 0:
        raise CameraUnavailableError("No video devices found")

    if camera_param is not None:
        if 0 <= camera_param < device_count:
            return camera_param
        logger.warning("Invalid camera index %s, using default camera", camera_param)
        return 0

    number = parse_display_number(display_id)
    index = number - 1 if number is not None else 0
    if 0 <= index < device_count:
        return index

    logger.info("No camera match found for %s, using default camera", display_id)
    return 0


def probe_camera_devices(max_devices: int = 10) -> List[int]:
    """
    Indices of the cameras OpenCV can open, scanning 0.. until the first gap.
    """
    found: List[int] = []
    for index in range(max_devices):
        cap = cv2.VideoCapture(index)
        try:
            if not cap.isOpened():
                break
            found.append(index)
        finally:
            cap.release()
    return found


class OpenCVCamera:
    """
    Local camera via cv2.VideoCapture.
    Reads run in a worker thread so the event loop is never blocked.
    """

    def __init__(self, index: int, width: int = 640, height: int = 480):
        self.index = index
        self.width = width
        self.height = height
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def frame_size(self) -> tuple[int, int]:
        return (self.width, self.height)

    async def open(self) -> None:
        cap = await asyncio.to_thread(cv2.VideoCapture, self.index)
        if not cap.isOpened():
            cap.release()
            raise CameraUnavailableError(f"Could not open camera {self.index}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        # A device that opens but never yields a frame is usually held or refused by the OS.
        ok, frame = await asyncio.to_thread(cap.read)
        if not ok or frame is None:
            cap.release()
            raise CameraPermissionError(f"Camera {self.index} refused to deliver frames")

        self.height, self.width = frame.shape[:2]
        self._cap = cap
        logger.info("Camera %s opened (%dx%d)", self.index, self.width, self.height)

    async def read(self) -> Optional[np.ndarray]:
        """Latest frame, or None if the camera stopped delivering."""
        if self._cap is None:
            raise RuntimeError("Camera read before open()")
        ok, frame = await asyncio.to_thread(self._cap.read)
        return frame if ok else None

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera %s released", self.index)
