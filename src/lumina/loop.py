"""Continuous scene analysis driven by the display refresh.

One cycle runs per scheduler tick:

    sample -> extract metrics -> await face score -> merge -> classify
    -> score alignment -> publish -> schedule next tick

The next tick is only requested after the current cycle finishes, so two
cycles never read the shared sampling buffer at once. Disabling the loop
cancels the pending tick and bumps a generation counter; a cycle that was
awaiting face detection at that moment notices the change and drops its
result instead of publishing it.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Callable, List, Optional

from lumina.classifier import (
    DEFAULT_THRESHOLDS,
    ClassifierThresholds,
    SceneAnalysis,
    classify_scene,
)
from lumina.composition import AlignmentScores, OverlayMode, score_alignment
from lumina.faces import (
    DEFAULT_MERGE_CONFIG,
    FaceScorer,
    MergeConfig,
    NullFaceScorer,
    merge_face_confidence,
)
from lumina.metrics import (
    DEFAULT_EXTRACTOR_CONFIG,
    AnalysisState,
    ExtractorConfig,
    extract_metrics,
)
from lumina.sampler import FrameSampler, VideoSource
from lumina.scheduling import FrameScheduler

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[SceneAnalysis], AlignmentScores], None]


class LoopState(enum.Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"


class AnalysisLoop:
    def __init__(
        self,
        source: VideoSource,
        scheduler: FrameScheduler,
        face_scorer: Optional[FaceScorer] = None,
        sampler: Optional[FrameSampler] = None,
        extractor_config: ExtractorConfig = DEFAULT_EXTRACTOR_CONFIG,
        merge_config: MergeConfig = DEFAULT_MERGE_CONFIG,
        thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
        overlay_mode: OverlayMode = OverlayMode.THIRDS,
    ) -> None:
        self.source = source
        self.scheduler = scheduler
        self.face_scorer = face_scorer or NullFaceScorer()
        self.sampler = sampler or FrameSampler()
        self.extractor_config = extractor_config
        self.merge_config = merge_config
        self.thresholds = thresholds
        self.overlay_mode = overlay_mode

        self.state = LoopState.IDLE
        self.analysis_state = AnalysisState()
        self.analysis: Optional[SceneAnalysis] = None
        self.alignment = AlignmentScores()

        self._generation = 0
        self._handle: Any = None
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    @property
    def enabled(self) -> bool:
        return self.state is LoopState.ANALYZING

    @property
    def active_alignment(self) -> float:
        return self.alignment.for_mode(self.overlay_mode)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_enabled(self, enabled: bool) -> None:
        if enabled == self.enabled:
            return

        if enabled:
            self.state = LoopState.ANALYZING
            logger.info("Scene analysis started")
            self._schedule()
            return

        self.state = LoopState.IDLE
        self._generation += 1
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        logger.info("Scene analysis stopped")
        self._publish(None, AlignmentScores())

    def stop(self) -> None:
        self.set_enabled(False)

    # Internal helpers -------------------------------------------------

    def _schedule(self) -> None:
        generation = self._generation
        self._handle = self.scheduler.request(lambda: self._on_tick(generation))

    def _on_tick(self, generation: int) -> None:
        self._handle = None
        if generation != self._generation:
            return
        if self._task is not None and not self._task.done():
            # A cycle from before the last disable still owns the buffer.
            self._schedule()
            return
        self._task = asyncio.get_running_loop().create_task(self.run_cycle(generation))

    async def run_cycle(self, generation: Optional[int] = None) -> bool:
        """Run one analysis cycle and queue the next; True if it published."""

        if generation is None:
            generation = self._generation
        try:
            published = await self._analyze(generation)
        except Exception:
            logger.exception("Scene analysis cycle failed")
            published = False

        if generation == self._generation and self.enabled:
            self._schedule()
        return published

    async def _analyze(self, generation: int) -> bool:
        pixels = self.sampler.sample(self.source)
        if pixels is None:
            logger.debug("Frame not ready, retrying next tick")
            return False

        metrics = extract_metrics(pixels, self.analysis_state, self.extractor_config)
        signal = await self.face_scorer.score(pixels)

        if generation != self._generation or not self.enabled:
            logger.debug("Discarding analysis finished after disable")
            return False

        height, width = pixels.shape[:2]
        merged = merge_face_confidence(
            metrics,
            signal.score,
            self.merge_config,
            faces=signal.faces,
            frame_size=(width, height),
        )
        suggestion = classify_scene(merged, self.thresholds)
        analysis = SceneAnalysis(metrics=merged, suggestion=suggestion)
        self._publish(analysis, score_alignment(merged.hotspot))
        return True

    def _publish(self, analysis: Optional[SceneAnalysis], alignment: AlignmentScores) -> None:
        self.analysis = analysis
        self.alignment = alignment
        for listener in list(self._listeners):
            try:
                listener(analysis, alignment)
            except Exception:
                logger.exception("Scene analysis listener failed")
