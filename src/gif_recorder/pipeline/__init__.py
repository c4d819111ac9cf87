"""
Pipeline Module
===============

Frames-to-GIF conversion orchestration.

Example:
    from gif_recorder.pipeline import convert_to_gif

    path = await convert_to_gif(frames, "recording.gif")
"""

from gif_recorder.pipeline.converter import (
    GifConverter,
    convert_to_gif,
    convert_to_gif_sync,
)


__all__ = [
    "GifConverter",
    "convert_to_gif",
    "convert_to_gif_sync",
]
