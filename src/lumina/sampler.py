from __future__ import annotations

import logging
from typing import Optional, Protocol, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

ANALYSIS_WIDTH = 320
FALLBACK_HEIGHT = 180


class VideoSource(Protocol):
    """Anything that can hand out the latest decoded BGR frame."""

    @property
    def frame_size(self) -> Tuple[int, int]:
        ...

    def read(self) -> Optional[np.ndarray]:
        ...


class CaptureSource:
    """Adapts ``cv2.VideoCapture`` to :class:`VideoSource`."""

    def __init__(self, capture: cv2.VideoCapture) -> None:
        self.capture = capture
        self.last_frame: Optional[np.ndarray] = None

    @property
    def frame_size(self) -> Tuple[int, int]:
        width = int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        return width, height

    def read(self) -> Optional[np.ndarray]:
        ok, frame = self.capture.read()
        if not ok or frame is None:
            return None
        self.last_frame = frame
        return frame


def analysis_size(
    source_size: Tuple[int, int],
    target_width: int = ANALYSIS_WIDTH,
    fallback_height: int = FALLBACK_HEIGHT,
) -> Tuple[int, int]:
    """Downscaled (width, height) that keeps the source aspect ratio."""

    source_width, source_height = source_size
    if source_width <= 0 or source_height <= 0:
        return target_width, fallback_height
    height = int(source_height / source_width * target_width)
    return target_width, height or fallback_height


class FrameSampler:
    """Snapshot frames into one reusable RGBA analysis buffer."""

    def __init__(
        self,
        target_width: int = ANALYSIS_WIDTH,
        fallback_height: int = FALLBACK_HEIGHT,
    ) -> None:
        self.target_width = target_width
        self.fallback_height = fallback_height
        self._scaled: Optional[np.ndarray] = None
        self._buffer: Optional[np.ndarray] = None

    @property
    def buffer(self) -> Optional[np.ndarray]:
        return self._buffer

    def _ensure_buffers(self, width: int, height: int) -> np.ndarray:
        if self._buffer is None or self._buffer.shape[:2] != (height, width):
            logger.debug("Allocating %dx%d analysis buffer", width, height)
            self._scaled = np.empty((height, width, 3), dtype=np.uint8)
            self._buffer = np.empty((height, width, 4), dtype=np.uint8)
        return self._buffer

    def sample(self, source: VideoSource) -> Optional[np.ndarray]:
        """Return the RGBA buffer for the current frame, or ``None`` if not ready."""

        frame = source.read()
        if frame is None:
            return None

        width, height = analysis_size(
            source.frame_size, self.target_width, self.fallback_height
        )
        buffer = self._ensure_buffers(width, height)
        cv2.resize(frame, (width, height), dst=self._scaled, interpolation=cv2.INTER_AREA)
        cv2.cvtColor(self._scaled, cv2.COLOR_BGR2RGBA, dst=buffer)
        return buffer
