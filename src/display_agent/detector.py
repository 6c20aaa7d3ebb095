"""
Face detection backends.

The session only depends on the FaceDetector protocol; YuNetFaceDetector is
the OpenCV implementation (cv2.FaceDetectorYN, weights from the model dir).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Protocol

import cv2
import numpy as np

from .errors import ModelNotFoundError
from .faces import FaceBox

logger = logging.getLogger(__name__)


class FaceDetector(Protocol):
    async def load(self) -> None:
        """Load model weights. Called once before the first detect()."""
        ...

    async def detect(self, frame: np.ndarray) -> List[FaceBox]:
        """Face boxes in frame pixel coordinates (possibly empty)."""
        ...


class YuNetFaceDetector:
    """
    YuNet face detector via cv2.FaceDetectorYN.

    Frames are downscaled so the longer side equals `input_size` before
    inference; boxes are scaled back to frame pixels.
    """

    def __init__(self, model_path: Path | str, input_size: int = 320, score_threshold: float = 0.5):
        self.model_path = Path(model_path)
        self.input_size = input_size
        self.score_threshold = score_threshold
        self._net: Optional[cv2.FaceDetectorYN] = None

    @property
    def is_loaded(self) -> bool:
        return self._net is not None

    async def load(self) -> None:
        if self._net is not None:
            return
        if not self.model_path.is_file():
            raise ModelNotFoundError(
                f"Model file missing: {self.model_path}. "
                "Download the YuNet ONNX weights into the models folder."
            )

        logger.info("Loading face detector from %s", self.model_path)
        self._net = await asyncio.to_thread(
            cv2.FaceDetectorYN.create,
            str(self.model_path),
            "",
            (self.input_size, self.input_size),
            self.score_threshold,
        )
        logger.info("Face detector loaded")

    async def detect(self, frame: np.ndarray) -> List[FaceBox]:
        if self._net is None:
            raise RuntimeError("Face detector used before load()")
        return await asyncio.to_thread(self._detect_sync, frame)

    def _detect_sync(self, frame: np.ndarray) -> List[FaceBox]:
        height, width = frame.shape[:2]
        scale = self.input_size / max(height, width)
        input_w, input_h = max(1, round(width * scale)), max(1, round(height * scale))

        resized = cv2.resize(frame, (input_w, input_h))
        self._net.setInputSize((input_w, input_h))
        _, faces = self._net.detect(resized)
        if faces is None:
            return []

        # Each row: x, y, w, h, 5 landmark pairs, score
        return [
            FaceBox(
                x=float(row[0]) / scale,
                y=float(row[1]) / scale,
                width=float(row[2]) / scale,
                height=float(row[3]) / scale,
            )
            for row in faces
        ]
