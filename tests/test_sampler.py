"""Tests for frame sampling into the analysis buffer."""

import numpy as np
import pytest

from conftest import FakeSource
from lumina.sampler import FrameSampler, analysis_size


def bgr_frame(width, height, color=(0, 0, 0)):
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:] = color
    return frame


class TestAnalysisSize:
    @pytest.mark.parametrize(
        "source_size, expected",
        [
            ((1280, 720), (320, 180)),
            ((640, 480), (320, 240)),
            ((1080, 1920), (320, 568)),
            ((0, 0), (320, 180)),
            ((1280, 0), (320, 180)),
            ((5000, 1), (320, 180)),
        ],
    )
    def test_sizes(self, source_size, expected):
        assert analysis_size(source_size) == expected


class TestFrameSampler:
    def test_not_ready(self):
        sampler = FrameSampler()
        assert sampler.sample(FakeSource([None])) is None
        assert sampler.buffer is None

    def test_buffer_shape_and_channels(self):
        source = FakeSource([bgr_frame(1280, 720, color=(255, 0, 0))], size=(1280, 720))
        buffer = FrameSampler().sample(source)

        assert buffer.shape == (180, 320, 4)
        assert buffer.dtype == np.uint8
        # BGR blue becomes RGBA blue with an opaque alpha channel
        assert tuple(buffer[90, 160]) == (0, 0, 255, 255)

    def test_buffer_is_reused(self):
        frames = [bgr_frame(640, 360, color=(10, 20, 30)), bgr_frame(640, 360, color=(40, 50, 60))]
        source = FakeSource(frames)
        sampler = FrameSampler()

        first = sampler.sample(source)
        first_pixel = tuple(first[0, 0])
        second = sampler.sample(source)

        assert second is first
        assert first_pixel == (30, 20, 10, 255)
        assert tuple(second[0, 0]) == (60, 50, 40, 255)

    def test_fallback_height_before_dimensions(self):
        source = FakeSource([bgr_frame(640, 360)], size=(0, 0))
        assert FrameSampler().sample(source).shape == (180, 320, 4)

    def test_reallocates_when_aspect_changes(self):
        source = FakeSource([bgr_frame(640, 360)], size=(640, 360))
        sampler = FrameSampler()
        first = sampler.sample(source)

        source.size = (640, 480)
        second = sampler.sample(source)

        assert second is not first
        assert second.shape == (240, 320, 4)
