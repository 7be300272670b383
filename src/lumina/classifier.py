"""Heuristic scene classification and camera-setting recommendations.

``classify_scene`` walks a fixed priority order of rules over the merged
metrics:

    portrait (face evidence) > low light (ambient light) > action (motion)
    > landscape > neutral

The numeric thresholds live in ``ClassifierThresholds`` so they can be
recalibrated without touching the decision procedure.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from lumina.metrics import SceneMetrics, clamp


class Scene(enum.Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    LOW_LIGHT = "low_light"
    ACTION = "action"
    NEUTRAL = "neutral"


class FilterKey(enum.Enum):
    NEUTRAL = "neutral"
    WARM = "warm"
    COOL = "cool"
    VIVID = "vivid"
    NOIR = "noir"
    CINEMATIC = "cinematic"


@dataclass(frozen=True)
class ClassifierThresholds:
    """Policy table for the scene rules."""

    portrait_face: float = 0.35
    low_light_brightness: float = 0.25
    action_motion: float = 0.35
    landscape_contrast: float = 0.18
    landscape_min_brightness: float = 0.35
    flat_contrast: float = 0.08


DEFAULT_THRESHOLDS = ClassifierThresholds()


@dataclass(frozen=True)
class CameraSettings:
    iso: int
    aperture: str
    shutter_speed: str
    white_balance: str


@dataclass(frozen=True)
class SceneSuggestion:
    scene: Scene
    confidence: float
    recommended: CameraSettings
    tips: Tuple[str, ...]
    suggested_filter: FilterKey


@dataclass(frozen=True)
class SceneAnalysis:
    metrics: SceneMetrics
    suggestion: SceneSuggestion


@dataclass(frozen=True)
class _Profile:
    aperture: str
    shutter_speed: str
    base_iso: int
    kelvin: int


SCENE_PROFILES: Dict[Scene, _Profile] = {
    Scene.PORTRAIT: _Profile("f/1.8", "1/160", 200, 5200),
    Scene.LANDSCAPE: _Profile("f/8", "1/250", 100, 5600),
    Scene.LOW_LIGHT: _Profile("f/1.4", "1/30", 800, 4000),
    Scene.ACTION: _Profile("f/2.8", "1/1000", 400, 5600),
    Scene.NEUTRAL: _Profile("f/4", "1/125", 200, 5500),
}

SCENE_TIPS: Dict[Scene, Tuple[str, ...]] = {
    Scene.PORTRAIT: (
        "Focus on the nearest eye",
        "Place eyes on the upper third line",
        "Leave breathing room in the direction of the gaze",
    ),
    Scene.LANDSCAPE: (
        "Keep the horizon level on a third line",
        "Add foreground interest for depth",
        "Stop down for edge-to-edge sharpness",
    ),
    Scene.LOW_LIGHT: (
        "Brace the camera or use a support",
        "Move closer to the available light",
        "Expect some grain and avoid underexposing",
    ),
    Scene.ACTION: (
        "Pan smoothly with the subject",
        "Lead the subject with open space",
        "Use a fast shutter to freeze motion",
    ),
    Scene.NEUTRAL: (
        "Frame subject along guidelines",
        "Maintain smooth camera motion",
    ),
}

SCENE_FILTERS: Dict[Scene, FilterKey] = {
    Scene.PORTRAIT: FilterKey.WARM,
    Scene.LANDSCAPE: FilterKey.VIVID,
    Scene.LOW_LIGHT: FilterKey.NOIR,
    Scene.ACTION: FilterKey.CINEMATIC,
    Scene.NEUTRAL: FilterKey.NEUTRAL,
}

ISO_STOPS: Tuple[int, ...] = (
    100, 125, 160, 200, 250, 320, 400, 500, 640, 800, 1000,
    1250, 1600, 2000, 2500, 3200, 4000, 5000, 6400,
)


def _ramp(value: float, start: float, end: float) -> float:
    """Map ``value`` linearly from [start, end] onto [0, 1]."""

    if end == start:
        return 1.0
    return clamp((value - start) / (end - start))


def choose_scene(
    metrics: SceneMetrics, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS
) -> Tuple[Scene, float]:
    """Return the winning scene and its confidence."""

    if metrics.face_confidence >= thresholds.portrait_face:
        return Scene.PORTRAIT, clamp(0.55 + 0.45 * metrics.face_confidence)

    if metrics.brightness < thresholds.low_light_brightness:
        darkness = _ramp(metrics.brightness, thresholds.low_light_brightness, 0.0)
        return Scene.LOW_LIGHT, clamp(0.5 + 0.5 * darkness)

    if metrics.motion_estimate >= thresholds.action_motion:
        speed = _ramp(metrics.motion_estimate, thresholds.action_motion, 1.0)
        return Scene.ACTION, clamp(0.5 + 0.5 * speed)

    if (
        metrics.contrast >= thresholds.landscape_contrast
        and metrics.brightness >= thresholds.landscape_min_brightness
    ):
        return Scene.LANDSCAPE, clamp(0.45 + 0.5 * metrics.contrast)

    return Scene.NEUTRAL, 0.4


def recommend_iso(scene: Scene, brightness: float) -> int:
    """Scale the scene's base ISO by brightness and snap to a standard stop."""

    raw = SCENE_PROFILES[scene].base_iso * math.pow(2.0, (0.5 - clamp(brightness)) * 4.0)
    return min(ISO_STOPS, key=lambda stop: (abs(math.log2(stop / raw)), stop))


def recommend_white_balance(scene: Scene, temperature_bias: float) -> str:
    kelvin = SCENE_PROFILES[scene].kelvin - 1000.0 * clamp(temperature_bias, -1.0, 1.0)
    kelvin = int(round(kelvin / 100.0)) * 100
    return f"{kelvin}K"


def recommend_settings(scene: Scene, metrics: SceneMetrics) -> CameraSettings:
    profile = SCENE_PROFILES[scene]
    return CameraSettings(
        iso=recommend_iso(scene, metrics.brightness),
        aperture=profile.aperture,
        shutter_speed=profile.shutter_speed,
        white_balance=recommend_white_balance(scene, metrics.color_temperature_bias),
    )


def build_tips(
    scene: Scene, metrics: SceneMetrics, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS
) -> Tuple[str, ...]:
    tips: List[str] = list(SCENE_TIPS[scene])
    if metrics.hotspot is None:
        tips.append("Give the frame a clear subject")
    if metrics.contrast < thresholds.flat_contrast:
        tips.append("Light looks flat, try side lighting")
    return tuple(tips)


def classify_scene(
    metrics: SceneMetrics, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS
) -> SceneSuggestion:
    scene, confidence = choose_scene(metrics, thresholds)
    return SceneSuggestion(
        scene=scene,
        confidence=round(confidence, 3),
        recommended=recommend_settings(scene, metrics),
        tips=build_tips(scene, metrics, thresholds),
        suggested_filter=SCENE_FILTERS[scene],
    )


def adopt_suggested_filter(current: FilterKey, suggestion: SceneSuggestion) -> FilterKey:
    """Switch to the suggested look only while the user has not picked one."""

    if current is FilterKey.NEUTRAL:
        return suggestion.suggested_filter
    return current
