"""
Processing Module
=================

Per-frame pixel operations applied between decoding and encoding.

Components:
    - scale_frame: Nearest-neighbour downscaling to a maximum width
    - similarity: Sampled RGB comparison of two frames (percentage)
"""

from gif_recorder.processing.scaler import scale_frame, scaled_size
from gif_recorder.processing.similarity import (
    SAMPLE_TARGET,
    is_duplicate,
    similarity,
)


__all__ = [
    "scale_frame",
    "scaled_size",
    "similarity",
    "is_duplicate",
    "SAMPLE_TARGET",
]
