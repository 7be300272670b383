from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from lumina.metrics import Hotspot

GOLDEN_RATIO = (math.sqrt(5) - 1) / 2
GOLDEN_RATIO_COMPLEMENT = 1 - GOLDEN_RATIO

THIRDS_SENSITIVITY = 3.0
GOLDEN_SENSITIVITY = 3.2

Point = Tuple[float, float]

THIRDS_POINTS: Tuple[Point, ...] = (
    (1 / 3, 1 / 3),
    (2 / 3, 1 / 3),
    (1 / 3, 2 / 3),
    (2 / 3, 2 / 3),
)

GOLDEN_POINTS: Tuple[Point, ...] = (
    (GOLDEN_RATIO, GOLDEN_RATIO),
    (GOLDEN_RATIO, GOLDEN_RATIO_COMPLEMENT),
    (GOLDEN_RATIO_COMPLEMENT, GOLDEN_RATIO),
    (GOLDEN_RATIO_COMPLEMENT, GOLDEN_RATIO_COMPLEMENT),
)


class OverlayMode(enum.Enum):
    THIRDS = "thirds"
    GOLDEN = "golden"


@dataclass(frozen=True)
class AlignmentScores:
    thirds: float = 0.0
    golden: float = 0.0

    def for_mode(self, mode: OverlayMode) -> float:
        return self.thirds if mode is OverlayMode.THIRDS else self.golden


def guide_points(mode: OverlayMode) -> Tuple[Point, ...]:
    return THIRDS_POINTS if mode is OverlayMode.THIRDS else GOLDEN_POINTS


def nearest_point(hotspot: Hotspot, points: Sequence[Point]) -> Tuple[Point, float]:
    best = min(points, key=lambda p: math.hypot(hotspot.x - p[0], hotspot.y - p[1]))
    return best, math.hypot(hotspot.x - best[0], hotspot.y - best[1])


def _alignment(hotspot: Optional[Hotspot], points: Sequence[Point], sensitivity: float) -> float:
    if hotspot is None:
        return 0.0
    _, distance = nearest_point(hotspot, points)
    return round(max(0.0, 1.0 - distance * sensitivity), 3)


def thirds_alignment(hotspot: Optional[Hotspot]) -> float:
    return _alignment(hotspot, THIRDS_POINTS, THIRDS_SENSITIVITY)


def golden_alignment(hotspot: Optional[Hotspot]) -> float:
    return _alignment(hotspot, GOLDEN_POINTS, GOLDEN_SENSITIVITY)


def score_alignment(hotspot: Optional[Hotspot]) -> AlignmentScores:
    """Score the hotspot against both guides so the UI can compare them."""

    return AlignmentScores(
        thirds=thirds_alignment(hotspot),
        golden=golden_alignment(hotspot),
    )


def composition_hint(
    hotspot: Optional[Hotspot],
    mode: OverlayMode,
    tolerance: float = 0.05,
) -> str:
    if hotspot is None:
        return "No subject detected"

    (target_x, target_y), _ = nearest_point(hotspot, guide_points(mode))
    dx = hotspot.x - target_x
    dy = hotspot.y - target_y

    # Directions describe where the subject should move within the frame
    horizontal_hint = ""
    vertical_hint = ""
    if dx > tolerance:
        horizontal_hint = "left"
    elif dx < -tolerance:
        horizontal_hint = "right"

    if dy > tolerance:
        vertical_hint = "up"
    elif dy < -tolerance:
        vertical_hint = "down"

    hint_parts = [part for part in (vertical_hint, horizontal_hint) if part]
    if not hint_parts:
        return "Aligned"
    return "Move subject " + " and ".join(hint_parts)


class AlignmentCue:
    """Fire once each time the active alignment rises across ``threshold``."""

    def __init__(self, threshold: float = 0.82) -> None:
        self.threshold = threshold
        self._previous = 0.0

    def update(self, alignment: float) -> bool:
        fired = alignment > self.threshold and self._previous <= self.threshold
        self._previous = alignment
        return fired

    def reset(self) -> None:
        self._previous = 0.0
