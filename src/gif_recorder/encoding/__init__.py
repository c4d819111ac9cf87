"""
Encoding Module
===============

Animated GIF encoding. See gif_encoder for quantization details.
"""

from gif_recorder.encoding.gif_encoder import (
    QUANTIZE_METHODS,
    REPEAT_FOREVER,
    REPEAT_NONE,
    GifEncoder,
)


__all__ = [
    "GifEncoder",
    "QUANTIZE_METHODS",
    "REPEAT_FOREVER",
    "REPEAT_NONE",
]
