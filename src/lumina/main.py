"""Webcam composition assistant.

Usage:
    pip install -e .
    lumina --mode golden --face-backend haar
"""

from __future__ import annotations

import argparse
import asyncio
import logging

import cv2

from lumina.classifier import FilterKey, adopt_suggested_filter
from lumina.composition import AlignmentCue, OverlayMode
from lumina.detection import FACE_BACKENDS, close_face_detector, create_face_detector
from lumina.errors import SourceUnavailableError
from lumina.faces import FaceScorer
from lumina.loop import AnalysisLoop
from lumina.overlay import draw_overlay
from lumina.sampler import CaptureSource
from lumina.scheduling import AsyncioFrameScheduler

logger = logging.getLogger(__name__)

WINDOW_NAME = "Lumina Composition Assistant"


async def webcam_loop(
    camera_index: int = 0,
    mode: OverlayMode = OverlayMode.THIRDS,
    face_backend: str = "haar",
    fps: float = 30.0,
) -> None:
    cap = cv2.VideoCapture(camera_index)
    if not cap.isOpened():
        raise SourceUnavailableError(f"Unable to open webcam {camera_index}")

    source = CaptureSource(cap)
    detector = create_face_detector(face_backend)
    scheduler = AsyncioFrameScheduler(fps=fps)
    analysis_loop = AnalysisLoop(
        source,
        scheduler,
        face_scorer=FaceScorer(detector),
        overlay_mode=mode,
    )
    cue = AlignmentCue()
    current_filter = FilterKey.NEUTRAL

    analysis_loop.set_enabled(True)
    try:
        while True:
            await asyncio.sleep(scheduler.interval)
            if not analysis_loop.enabled:
                # The analysis loop reads frames only while it runs.
                source.read()
            frame = source.last_frame
            if frame is None:
                cv2.waitKey(1)
                continue

            analysis = analysis_loop.analysis
            if analysis is not None:
                suggested = adopt_suggested_filter(current_filter, analysis.suggestion)
                if suggested is not current_filter:
                    logger.info("Applying %s look", suggested.value)
                    current_filter = suggested
            if cue.update(analysis_loop.active_alignment):
                logger.info(
                    "Subject aligned with %s guide (%.2f)",
                    analysis_loop.overlay_mode.value,
                    analysis_loop.active_alignment,
                )

            output = draw_overlay(
                frame,
                analysis,
                analysis_loop.alignment,
                analysis_loop.overlay_mode,
                filter_key=current_filter,
            )
            cv2.imshow(WINDOW_NAME, output)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            if key == ord("t"):
                analysis_loop.overlay_mode = OverlayMode.THIRDS
            elif key == ord("g"):
                analysis_loop.overlay_mode = OverlayMode.GOLDEN
            elif key == ord("a"):
                analysis_loop.set_enabled(not analysis_loop.enabled)
                cue.reset()
    finally:
        analysis_loop.stop()
        close_face_detector(detector)
        cap.release()
        cv2.destroyAllWindows()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Live composition guidance and exposure suggestions.")
    parser.add_argument("--camera", type=int, default=0, help="Webcam index.")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in OverlayMode],
        default=OverlayMode.THIRDS.value,
        help="Composition guide to display.",
    )
    parser.add_argument(
        "--face-backend",
        choices=FACE_BACKENDS,
        default="haar",
        help="Face detector used to boost portrait detection.",
    )
    parser.add_argument("--fps", type=float, default=30.0, help="Analysis and display rate.")
    parser.add_argument("--log-level", default="INFO", help="Python logging level.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(
            webcam_loop(
                camera_index=args.camera,
                mode=OverlayMode(args.mode),
                face_backend=args.face_backend,
                fps=args.fps,
            )
        )
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
