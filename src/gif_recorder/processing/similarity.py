"""
Frame Similarity
================

Sampled pixel comparison used to detect redundant frames.

Algorithm:
    step = max(1, floor(total_pixels / SAMPLE_TARGET))
    Pixels 0, step, 2*step, ... are compared on their R, G, B channels
    for exact equality; alpha is ignored.

    similarity = matching / sampled * 100

This is a statistical estimate, not an exact diff. At full HD it
compares roughly 10k pixels instead of 2M.
"""

import logging
from typing import Union

import numpy as np

from gif_recorder.models.frame import CHANNELS


logger = logging.getLogger(__name__)


SAMPLE_TARGET = 10_000

PixelBuffer = Union[np.ndarray, bytes, bytearray, memoryview]


def _flatten(buffer: PixelBuffer) -> np.ndarray:
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return np.frombuffer(buffer, dtype=np.uint8)
    return np.asarray(buffer, dtype=np.uint8).reshape(-1)


def similarity(a: PixelBuffer, b: PixelBuffer) -> float:
    """
    Estimate how similar two RGBA pixel buffers are.

    Args:
        a: First buffer (flat bytes or array of any shape, 4 channels)
        b: Second buffer

    Returns:
        Percentage in [0, 100]. 0.0 if the buffers differ in length
        or hold no complete pixel.
    """
    flat_a = _flatten(a)
    flat_b = _flatten(b)

    if flat_a.size != flat_b.size:
        return 0.0

    total_pixels = flat_a.size // CHANNELS
    if total_pixels == 0:
        return 0.0

    step = max(1, total_pixels // SAMPLE_TARGET)
    usable = total_pixels * CHANNELS

    rgb_a = flat_a[:usable].reshape(total_pixels, CHANNELS)[::step, :3]
    rgb_b = flat_b[:usable].reshape(total_pixels, CHANNELS)[::step, :3]

    matching = int(np.count_nonzero(np.all(rgb_a == rgb_b, axis=1)))
    return matching * 100.0 / rgb_a.shape[0]


def is_duplicate(a: PixelBuffer, b: PixelBuffer, threshold: float) -> bool:
    """True when similarity(a, b) is at or above threshold."""
    return similarity(a, b) >= threshold
