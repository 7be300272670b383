"""Fold the optional face-detection signal into scene metrics."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from lumina.detection import FaceBox, FaceDetector
from lumina.metrics import Hotspot, SceneMetrics, clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeConfig:
    strength_boost: float = 0.5
    # Move the hotspot onto the largest face when boxes are known.
    relocate_to_faces: bool = False


DEFAULT_MERGE_CONFIG = MergeConfig()


def score_faces(faces: Sequence[FaceBox], frame_size: Tuple[int, int]) -> float:
    """Turn detected faces into a presence score in [0, 1].

    Each face adds a flat 0.2, plus the share of the frame the faces cover.
    """

    if not faces:
        return 0.0
    width, height = frame_size
    total_area = sum(face.width * face.height for face in faces)
    frame_area = max(width * height, 1)
    return clamp(len(faces) * 0.2 + total_area / frame_area)


def merge_face_confidence(
    metrics: SceneMetrics,
    face_score: float,
    config: MergeConfig = DEFAULT_MERGE_CONFIG,
    faces: Optional[Sequence[FaceBox]] = None,
    frame_size: Optional[Tuple[int, int]] = None,
) -> SceneMetrics:
    face_score = clamp(face_score)
    if face_score == 0.0:
        return metrics

    hotspot = metrics.hotspot
    if hotspot is not None:
        hotspot = dataclasses.replace(
            hotspot, strength=clamp(hotspot.strength + face_score * config.strength_boost)
        )

    if config.relocate_to_faces and faces and frame_size:
        hotspot = _hotspot_from_face(faces, frame_size, hotspot, face_score)

    return dataclasses.replace(metrics, hotspot=hotspot, face_confidence=face_score)


def _hotspot_from_face(
    faces: Sequence[FaceBox],
    frame_size: Tuple[int, int],
    hotspot: Optional[Hotspot],
    face_score: float,
) -> Hotspot:
    width, height = frame_size
    face = max(faces, key=lambda box: box.width * box.height)
    centre_x, centre_y = face.center
    strength = hotspot.strength if hotspot is not None else face_score
    return Hotspot(
        x=clamp(centre_x / max(width, 1)),
        y=clamp(centre_y / max(height, 1)),
        strength=clamp(strength),
    )


@dataclass(frozen=True)
class FaceSignal:
    score: float = 0.0
    faces: Tuple[FaceBox, ...] = ()


NO_FACES = FaceSignal()


class FaceScorer:
    """Bounded, failure-tolerant wrapper around an optional face detector."""

    def __init__(self, detector: Optional[FaceDetector], timeout: float = 0.25) -> None:
        self.detector = detector
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return self.detector is not None

    async def score(self, pixels: np.ndarray) -> FaceSignal:
        if self.detector is None:
            return NO_FACES

        # The detector may outlive a timeout in its worker thread, so it gets
        # its own copy of the shared analysis buffer.
        image = pixels.copy()
        try:
            faces = await asyncio.wait_for(self.detector.detect(image), self.timeout)
        except asyncio.TimeoutError:
            logger.debug("Face detection exceeded %.3fs, ignoring", self.timeout)
            return NO_FACES
        except Exception:
            logger.warning("Face detection unavailable", exc_info=True)
            return NO_FACES

        faces = tuple(faces or ())
        height, width = pixels.shape[:2]
        return FaceSignal(score=score_faces(faces, (width, height)), faces=faces)


class NullFaceScorer(FaceScorer):
    """Scorer for hosts without face detection; always reports no faces."""

    def __init__(self) -> None:
        super().__init__(detector=None)
