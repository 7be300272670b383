from typing import List, Optional, Tuple

import numpy as np
import pytest


def rgba_frame(width: int = 320, height: int = 180, color=(128, 128, 128)) -> np.ndarray:
    frame = np.empty((height, width, 4), dtype=np.uint8)
    frame[..., :3] = color
    frame[..., 3] = 255
    return frame


class FakeSource:
    """Video source that replays a fixed list of frames (None = not ready)."""

    def __init__(self, frames: List[Optional[np.ndarray]], size: Tuple[int, int] = (640, 360)):
        self.frames = list(frames)
        self.size = size
        self.reads = 0

    @property
    def frame_size(self) -> Tuple[int, int]:
        return self.size

    def read(self) -> Optional[np.ndarray]:
        self.reads += 1
        if len(self.frames) > 1:
            return self.frames.pop(0)
        return self.frames[0] if self.frames else None


class ManualScheduler:
    """Scheduler whose ticks are fired explicitly by the test."""

    def __init__(self):
        self.pending = {}
        self.cancelled = []
        self._next_handle = 0

    def request(self, callback):
        self._next_handle += 1
        self.pending[self._next_handle] = callback
        return self._next_handle

    def cancel(self, handle):
        self.pending.pop(handle, None)
        self.cancelled.append(handle)

    def tick(self):
        callbacks = list(self.pending.values())
        self.pending.clear()
        for callback in callbacks:
            callback()


@pytest.fixture
def gray_frame():
    return rgba_frame()


@pytest.fixture
def block_frame():
    """Dark frame with one bright 40x30 block covering grid cell (row 2, col 3)."""
    frame = rgba_frame(color=(0, 0, 0))
    frame[60:90, 120:160, :3] = 255
    return frame
