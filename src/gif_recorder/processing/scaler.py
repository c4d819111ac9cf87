"""
Frame Scaler
============

Bounds frame width while preserving aspect ratio.

Resampling is nearest-neighbour: each destination pixel (x, y) copies
all four channels of source pixel (floor(x / f), floor(y / f)) where
f = max_width / width. Recorded UI content is mostly sharp edges and
text, so no blending is done.

Index arithmetic is integer-only, so the scaled width is exactly
max_width and no float rounding can shift a sample.
"""

import logging

import numpy as np

from gif_recorder.models.frame import CanonicalFrame


logger = logging.getLogger(__name__)


def scaled_size(width: int, height: int, max_width: int) -> tuple:
    """
    Compute output geometry for a frame.

    Args:
        width: Source width
        height: Source height
        max_width: Width bound; <= 0 disables scaling

    Returns:
        (new_width, new_height); unchanged when no scaling applies
    """
    if max_width <= 0 or width <= max_width:
        return (width, height)
    return (max_width, max(1, (height * max_width) // width))


def scale_frame(frame: CanonicalFrame, max_width: int) -> CanonicalFrame:
    """
    Downscale a frame to at most max_width pixels wide.

    Args:
        frame: Decoded frame
        max_width: Width bound; <= 0 disables scaling

    Returns:
        The same frame object if no scaling is needed, otherwise a new
        CanonicalFrame backed by a freshly allocated buffer
    """
    new_width, new_height = scaled_size(frame.width, frame.height, max_width)
    if (new_width, new_height) == (frame.width, frame.height):
        return frame

    # floor(x / (max_width / width)) == (x * width) // max_width
    src_x = (np.arange(new_width, dtype=np.int64) * frame.width) // max_width
    src_y = (np.arange(new_height, dtype=np.int64) * frame.width) // max_width
    np.minimum(src_x, frame.width - 1, out=src_x)
    np.minimum(src_y, frame.height - 1, out=src_y)

    pixels = frame.pixels[src_y[:, None], src_x[None, :]]

    return CanonicalFrame(
        pixels=np.ascontiguousarray(pixels),
        width=new_width,
        height=new_height,
    )
