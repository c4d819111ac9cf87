"""
Test Configuration
==================

Pytest fixtures and test configuration for the GIF recorder.

Frame images are generated in memory with Pillow so tests never depend
on files outside the temporary directory.
"""

import io

import numpy as np
import pytest
from PIL import Image

from gif_recorder.config import ConversionConfig
from gif_recorder.models.frame import CanonicalFrame, RawFrame


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def solid_png(color, width: int = 32, height: int = 24) -> bytes:
    """PNG bytes of a single-color RGB image."""
    return encode_png(Image.new("RGB", (width, height), color))


def solid_frame(color, width: int = 32, height: int = 24, timestamp: int = 0) -> RawFrame:
    return RawFrame(data=solid_png(color, width, height), timestamp=timestamp)


def canonical(width: int, height: int, fill=0) -> CanonicalFrame:
    pixels = np.full((height, width, 4), fill, dtype=np.uint8)
    return CanonicalFrame(pixels=pixels, width=width, height=height)


def read_gif_colors(path) -> list:
    """Top-left RGB color of every frame in a GIF."""
    colors = []
    with Image.open(path) as im:
        for index in range(im.n_frames):
            im.seek(index)
            colors.append(im.convert("RGB").getpixel((0, 0)))
    return colors


@pytest.fixture
def gradient_frame() -> CanonicalFrame:
    """10x6 frame where R = x, G = y, B = x + y, A = 255."""
    height, width = 6, 10
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.stack(
        [xs, ys, xs + ys, np.full_like(xs, 255)],
        axis=-1,
    ).astype(np.uint8)
    return CanonicalFrame(pixels=pixels, width=width, height=height)


@pytest.fixture
def no_dedup_config() -> ConversionConfig:
    return ConversionConfig(deduplicate_frames=False)


@pytest.fixture
def palette_colors() -> list:
    return [
        (255, 0, 0),
        (0, 255, 0),
        (0, 0, 255),
        (255, 255, 0),
        (0, 255, 255),
    ]


class FailingFile:
    """File stand-in whose writes fail after a number of calls."""

    def __init__(self, fail_after: int = 0, error: Exception = None) -> None:
        self.fail_after = fail_after
        self.error = error or OSError(28, "No space left on device")
        self.writes = 0
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.writes >= self.fail_after:
            raise self.error
        self.writes += 1
        return len(data)

    def close(self) -> None:
        self.closed = True
