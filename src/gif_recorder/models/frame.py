"""
Frame Data Models
=================

Frame representations used by the conversion pipeline.

    - RawFrame: compressed image bytes as produced by the capture layer
    - CanonicalFrame: decoded RGBA pixels with known geometry

Design Rules:
    - RawFrame is immutable and owned by the pipeline once handed off
    - CanonicalFrame lives for one pipeline iteration, except for the
      single "last accepted" reference used for similarity checks
"""

from dataclasses import dataclass

import numpy as np


CHANNELS = 4


@dataclass(frozen=True, slots=True)
class RawFrame:
    """
    Captured frame as delivered by the capture layer.

    Attributes:
        data: Compressed image bytes (PNG, JPEG, ...)
        timestamp: Capture time in milliseconds
        width: 0 until decoded
        height: 0 until decoded
    """

    data: bytes
    timestamp: int
    width: int = 0
    height: int = 0

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        return (
            f"RawFrame(timestamp={self.timestamp}, "
            f"bytes={len(self.data)}, "
            f"size={self.width}x{self.height})"
        )


@dataclass(frozen=True, slots=True)
class CanonicalFrame:
    """
    Decoded frame in the fixed RGBA layout.

    Attributes:
        pixels: uint8 array of shape (height, width, 4), channels R, G, B, A
        width: Frame width in pixels
        height: Frame height in pixels
    """

    pixels: np.ndarray
    width: int
    height: int

    @property
    def size(self) -> tuple:
        """(width, height) tuple."""
        return (self.width, self.height)

    def __repr__(self) -> str:
        return f"CanonicalFrame(size={self.width}x{self.height})"
