"""Optional face-detection backends.

Detectors take the RGBA analysis buffer and return face boxes in buffer
pixels. Both backends are blocking libraries, so detection runs in a worker
thread to keep the analysis loop responsive.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Tuple
from urllib.request import urlretrieve

import cv2
import numpy as np

logger = logging.getLogger(__name__)


MEDIAPIPE_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_detector/"
    "blaze_face_short_range/float16/latest/blaze_face_short_range.tflite"
)


@dataclass(frozen=True)
class FaceBox:
    x: int
    y: int
    width: int
    height: int
    confidence: float = 1.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


class FaceDetector(Protocol):
    async def detect(self, image: np.ndarray) -> List[FaceBox]:
        ...


class HaarFaceDetector:
    """OpenCV Haar cascade detector, always available with opencv-python."""

    def __init__(self, scale_factor: float = 1.1, min_neighbors: int = 5) -> None:
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self._cascade = cv2.CascadeClassifier(
            cv2.data.haarcascades + "haarcascade_frontalface_default.xml"
        )
        if self._cascade.empty():
            raise RuntimeError("Haar face cascade could not be loaded")

    def detect_sync(self, image: np.ndarray) -> List[FaceBox]:
        gray = cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
        gray = cv2.equalizeHist(gray)

        faces = self._cascade.detectMultiScale(
            gray, scaleFactor=self.scale_factor, minNeighbors=self.min_neighbors
        )
        return [FaceBox(int(x), int(y), int(w), int(h)) for x, y, w, h in faces]

    async def detect(self, image: np.ndarray) -> List[FaceBox]:
        return await asyncio.to_thread(self.detect_sync, image)


class MediaPipeFaceDetector:
    """BlazeFace short-range detector from MediaPipe Tasks."""

    def __init__(
        self,
        model_path: Path | str | None = None,
        min_detection_confidence: float = 0.5,
    ) -> None:
        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision

        self.model_path = self._ensure_model_exists(model_path)
        base_options = mp_python.BaseOptions(model_asset_path=str(self.model_path))
        options = vision.FaceDetectorOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.IMAGE,
            min_detection_confidence=min_detection_confidence,
        )
        self._detector = vision.FaceDetector.create_from_options(options)

    def _ensure_model_exists(self, model_path: Path | str | None) -> Path:
        """Download the MediaPipe model locally if it is absent."""

        default_model = Path("models/blaze_face_short_range.tflite")
        path = Path(model_path) if model_path else default_model
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Downloading face detector model to %s", path)
            urlretrieve(MEDIAPIPE_MODEL_URL, path)
        return path

    def detect_sync(self, image: np.ndarray) -> List[FaceBox]:
        from mediapipe import Image as MPImage
        from mediapipe import ImageFormat

        rgba = np.ascontiguousarray(image)
        mp_image = MPImage(image_format=ImageFormat.SRGBA, data=rgba)
        result = self._detector.detect(mp_image)

        boxes: List[FaceBox] = []
        for detection in result.detections:
            bbox = detection.bounding_box
            score = detection.categories[0].score if detection.categories else 1.0
            boxes.append(
                FaceBox(bbox.origin_x, bbox.origin_y, bbox.width, bbox.height, float(score))
            )
        return boxes

    async def detect(self, image: np.ndarray) -> List[FaceBox]:
        return await asyncio.to_thread(self.detect_sync, image)

    def close(self) -> None:
        self._detector.close()


FACE_BACKENDS = ("haar", "mediapipe", "none")


def create_face_detector(backend: str = "haar") -> Optional[FaceDetector]:
    """Probe for a face-detection backend; ``None`` when it cannot be used."""

    if backend == "none":
        return None
    try:
        if backend == "haar":
            return HaarFaceDetector()
        if backend == "mediapipe":
            return MediaPipeFaceDetector()
    except (ImportError, RuntimeError, OSError) as exc:
        logger.warning("Face detector %r unavailable: %s", backend, exc)
        return None

    logger.warning("Unknown face detector backend %r", backend)
    return None


def close_face_detector(detector: Optional[FaceDetector]) -> None:
    """Release backend resources for detectors that hold any."""

    close = getattr(detector, "close", None)
    if callable(close):
        close()
