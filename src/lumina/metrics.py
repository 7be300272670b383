"""Per-frame image statistics for scene recognition.

The extractor works on the downscaled RGBA buffer produced by the frame
sampler and returns brightness, contrast, colour temperature bias, a coarse
motion estimate and the saliency hotspot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

DEFAULT_PREVIOUS_BRIGHTNESS = 0.4


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return float(min(high, max(low, value)))


@dataclass(frozen=True)
class Hotspot:
    """Normalized subject position and the confidence that a subject is there."""

    x: float
    y: float
    strength: float


@dataclass(frozen=True)
class SceneMetrics:
    brightness: float
    contrast: float
    color_temperature_bias: float
    motion_estimate: float
    hotspot: Optional[Hotspot]
    face_confidence: float = 0.0


@dataclass
class AnalysisState:
    """State carried from one analysis cycle to the next."""

    previous_brightness: float = DEFAULT_PREVIOUS_BRIGHTNESS


@dataclass(frozen=True)
class ExtractorConfig:
    grid_cols: int = 8
    grid_rows: int = 6
    contrast_scale: float = 2.0
    temperature_scale: float = 2.0
    motion_scale: float = 6.0
    contrast_weight: float = 1.0
    deviation_weight: float = 1.0
    region_ratio: float = 0.8
    strength_gain: float = 4.0
    uniformity_epsilon: float = 0.02


DEFAULT_EXTRACTOR_CONFIG = ExtractorConfig()


def compute_luma(pixels: np.ndarray) -> np.ndarray:
    """Return per-pixel luma (0-255) for an RGBA or RGB buffer."""

    rgb = pixels[..., :3].astype(np.float64)
    return rgb @ LUMA_WEIGHTS


def compute_metrics(
    pixels: np.ndarray,
    previous_brightness: float,
    config: ExtractorConfig = DEFAULT_EXTRACTOR_CONFIG,
) -> SceneMetrics:
    """Compute scene metrics for one buffer without touching any state."""

    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected an RGBA pixel buffer, got shape {pixels.shape}")

    luma = compute_luma(pixels)
    mean_luma = float(luma.mean())

    brightness = clamp(mean_luma / 255.0)
    contrast = clamp(float(luma.std()) / 255.0 * config.contrast_scale)

    mean_red = float(pixels[..., 0].mean())
    mean_blue = float(pixels[..., 2].mean())
    temperature = clamp(
        (mean_red - mean_blue) / 255.0 * config.temperature_scale, -1.0, 1.0
    )

    motion = clamp(abs(brightness - previous_brightness) * config.motion_scale)

    hotspot = estimate_hotspot(luma, mean_luma, config)

    return SceneMetrics(
        brightness=brightness,
        contrast=contrast,
        color_temperature_bias=temperature,
        motion_estimate=motion,
        hotspot=hotspot,
    )


def extract_metrics(
    pixels: np.ndarray,
    state: AnalysisState,
    config: ExtractorConfig = DEFAULT_EXTRACTOR_CONFIG,
) -> SceneMetrics:
    """Compute metrics and roll ``state.previous_brightness`` forward."""

    metrics = compute_metrics(pixels, state.previous_brightness, config)
    state.previous_brightness = metrics.brightness
    return metrics


def _cell_edges(length: int, cells: int) -> np.ndarray:
    cells = max(1, min(cells, length))
    return np.linspace(0, length, cells + 1).astype(int)


def saliency_grid(
    luma: np.ndarray, mean_luma: float, config: ExtractorConfig
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Score each grid cell; returns (saliency, centre_x, centre_y) arrays.

    Centres are normalized to [0, 1].
    """

    height, width = luma.shape
    x_edges = _cell_edges(width, config.grid_cols)
    y_edges = _cell_edges(height, config.grid_rows)
    rows, cols = len(y_edges) - 1, len(x_edges) - 1

    saliency = np.zeros((rows, cols), dtype=np.float64)
    centre_x = np.zeros((rows, cols), dtype=np.float64)
    centre_y = np.zeros((rows, cols), dtype=np.float64)

    for r in range(rows):
        y0, y1 = y_edges[r], y_edges[r + 1]
        for c in range(cols):
            x0, x1 = x_edges[c], x_edges[c + 1]
            cell = luma[y0:y1, x0:x1]
            local_contrast = float(cell.std()) / 255.0
            deviation = abs(float(cell.mean()) - mean_luma) / 255.0
            saliency[r, c] = (
                config.contrast_weight * local_contrast
                + config.deviation_weight * deviation
            )
            centre_x[r, c] = (x0 + x1) / 2.0 / width
            centre_y[r, c] = (y0 + y1) / 2.0 / height

    return saliency, centre_x, centre_y


def estimate_hotspot(
    luma: np.ndarray,
    mean_luma: float,
    config: ExtractorConfig = DEFAULT_EXTRACTOR_CONFIG,
) -> Optional[Hotspot]:
    """Locate the most salient region, or ``None`` if saliency is flat."""

    saliency, centre_x, centre_y = saliency_grid(luma, mean_luma, config)

    peak = float(saliency.max())
    excess = peak - float(saliency.mean())
    if peak <= 0.0 or excess < config.uniformity_epsilon:
        return None

    region = saliency >= peak * config.region_ratio
    weights = saliency[region]
    total = float(weights.sum())
    x = float((centre_x[region] * weights).sum()) / total
    y = float((centre_y[region] * weights).sum()) / total
    region_excess = float(weights.mean()) - float(saliency.mean())

    return Hotspot(
        x=clamp(x),
        y=clamp(y),
        strength=clamp(region_excess * config.strength_gain),
    )
