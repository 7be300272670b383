from __future__ import annotations

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from lumina.classifier import FilterKey, SceneAnalysis
from lumina.composition import (
    GOLDEN_RATIO,
    GOLDEN_RATIO_COMPLEMENT,
    AlignmentScores,
    OverlayMode,
    composition_hint,
)

GUIDE_COLOR = (255, 255, 255)
ACCENT_COLOR = (255, 194, 54)  # BGR of the app accent blue
TEXT_COLOR = (255, 255, 255)
MUTED_TEXT_COLOR = (200, 200, 200)


def _guide_fractions(mode: OverlayMode) -> Tuple[float, float]:
    if mode is OverlayMode.THIRDS:
        return 1 / 3, 2 / 3
    return GOLDEN_RATIO_COMPLEMENT, GOLDEN_RATIO


def draw_guides(frame: np.ndarray, mode: OverlayMode, alignment: float) -> np.ndarray:
    output = frame.copy()
    height, width = output.shape[:2]
    fractions = _guide_fractions(mode)

    overlay = output.copy()
    color = ACCENT_COLOR if alignment > 0.65 else GUIDE_COLOR
    for fraction in fractions:
        x = int(round(width * fraction))
        y = int(round(height * fraction))
        cv2.line(overlay, (x, 0), (x, height), color, 1, cv2.LINE_AA)
        cv2.line(overlay, (0, y), (width, y), color, 1, cv2.LINE_AA)

    if alignment > 0.75:
        for fx in fractions:
            for fy in fractions:
                center = (int(round(width * fx)), int(round(height * fy)))
                cv2.circle(overlay, center, 8, ACCENT_COLOR, 2, cv2.LINE_AA)

    alpha = 0.9 if alignment > 0.65 else 0.35
    cv2.addWeighted(overlay, alpha, output, 1 - alpha, 0, output)
    return output


def draw_hotspot(frame: np.ndarray, analysis: Optional[SceneAnalysis]) -> np.ndarray:
    if analysis is None or analysis.metrics.hotspot is None:
        return frame

    output = frame.copy()
    height, width = output.shape[:2]
    hotspot = analysis.metrics.hotspot
    center = (int(hotspot.x * width), int(hotspot.y * height))
    radius = int(12 + hotspot.strength * 12)
    cv2.circle(output, center, radius, ACCENT_COLOR, 2, cv2.LINE_AA)
    return output


def _put_lines(
    frame: np.ndarray,
    lines: Sequence[str],
    origin: Tuple[int, int],
    scale: float = 0.55,
    color: Tuple[int, int, int] = TEXT_COLOR,
    spacing: int = 24,
) -> None:
    x, y = origin
    for line in lines:
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, scale, color, 1, cv2.LINE_AA)
        y += spacing


def draw_overlay(
    frame: np.ndarray,
    analysis: Optional[SceneAnalysis],
    alignment: AlignmentScores,
    mode: OverlayMode,
    filter_key: Optional[FilterKey] = None,
) -> np.ndarray:
    """Compose guides, hotspot ring, scene badge, settings, active look and tips."""

    active = alignment.for_mode(mode)
    output = draw_guides(frame, mode, active)
    output = draw_hotspot(output, analysis)
    height, width = output.shape[:2]

    if filter_key is not None:
        _put_lines(output, [f"Look: {filter_key.value}"], (width - 130, 150), color=MUTED_TEXT_COLOR)

    if analysis is None:
        _put_lines(output, ["Analyzing"], (20, 40), scale=0.7)
        return output

    suggestion = analysis.suggestion
    badge = f"{suggestion.scene.value.replace('_', ' ').upper()} {suggestion.confidence * 100:0.0f}%"
    _put_lines(output, [badge], (20, 40), scale=0.7)

    settings = suggestion.recommended
    _put_lines(
        output,
        [
            f"ISO {settings.iso}",
            settings.aperture,
            settings.shutter_speed,
            settings.white_balance,
        ],
        (width - 130, 40),
        color=MUTED_TEXT_COLOR,
    )

    guidance = composition_hint(analysis.metrics.hotspot, mode)
    _put_lines(
        output,
        [f"{mode.value.title()} {active * 100:0.0f}%  {guidance}"],
        (20, 70),
        color=MUTED_TEXT_COLOR,
    )

    tips = suggestion.tips[:2]
    _put_lines(output, tips, (20, height - 20 - 24 * (len(tips) - 1)))
    return output
