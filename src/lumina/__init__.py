"""Live composition guidance and exposure suggestions for a camera feed."""

from lumina.classifier import FilterKey, Scene, SceneAnalysis, SceneSuggestion, classify_scene
from lumina.composition import AlignmentScores, OverlayMode, score_alignment
from lumina.faces import FaceScorer, NullFaceScorer, merge_face_confidence
from lumina.loop import AnalysisLoop, LoopState
from lumina.metrics import AnalysisState, Hotspot, SceneMetrics, extract_metrics
from lumina.sampler import CaptureSource, FrameSampler

__all__ = [
    "AlignmentScores",
    "AnalysisLoop",
    "AnalysisState",
    "CaptureSource",
    "FaceScorer",
    "FilterKey",
    "FrameSampler",
    "Hotspot",
    "LoopState",
    "NullFaceScorer",
    "OverlayMode",
    "Scene",
    "SceneAnalysis",
    "SceneMetrics",
    "SceneSuggestion",
    "classify_scene",
    "extract_metrics",
    "merge_face_confidence",
    "score_alignment",
]
