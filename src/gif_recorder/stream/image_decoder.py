"""
Image Decoder
=============

Decodes compressed frame buffers into canonical RGBA pixel arrays.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Output is always uint8, shape (H, W, 4), channel order R, G, B, A
    - Fails fast on corrupt frames with FrameDecodeError
    - Pure function, safe to call independently per frame
"""

import logging
from typing import Union

import cv2
import numpy as np

from gif_recorder.errors import FrameDecodeError
from gif_recorder.models.frame import CHANNELS, CanonicalFrame, RawFrame


logger = logging.getLogger(__name__)


_TO_RGBA = {
    3: cv2.COLOR_BGR2RGBA,
    4: cv2.COLOR_BGRA2RGBA,
}


def _to_uint8(image: np.ndarray) -> np.ndarray:
    """Reduce 16-bit and float images to 8 bits per channel."""
    if image.dtype == np.uint8:
        return image
    if image.dtype == np.uint16:
        return (image >> 8).astype(np.uint8)
    if np.issubdtype(image.dtype, np.floating):
        return np.clip(image * 255.0, 0, 255).astype(np.uint8)
    raise FrameDecodeError(f"Unsupported pixel dtype: {image.dtype}")


def decode_frame(frame: Union[RawFrame, bytes]) -> CanonicalFrame:
    """
    Decode a compressed frame into a CanonicalFrame.

    Args:
        frame: RawFrame or raw compressed bytes (PNG, JPEG, BMP, ...)

    Returns:
        CanonicalFrame with RGBA pixels

    Raises:
        FrameDecodeError: If the buffer is empty, malformed or has an
            unsupported channel layout
    """
    data = frame.data if isinstance(frame, RawFrame) else frame

    if not data:
        raise FrameDecodeError("Empty frame buffer")

    try:
        nparr = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise FrameDecodeError(f"cv2.imdecode failed: {e}") from e

    if image is None:
        raise FrameDecodeError(
            f"Failed to decode {len(data)}-byte buffer: cv2.imdecode returned None"
        )

    image = _to_uint8(image)

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.ndim == 3 and image.shape[2] == 1:
        rgba = cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    elif image.ndim == 3 and image.shape[2] in _TO_RGBA:
        rgba = cv2.cvtColor(image, _TO_RGBA[image.shape[2]])
    else:
        raise FrameDecodeError(f"Invalid image shape: {image.shape}")

    height, width = rgba.shape[:2]
    if width == 0 or height == 0 or rgba.shape[2] != CHANNELS:
        raise FrameDecodeError(f"Invalid decoded shape: {rgba.shape}")

    return CanonicalFrame(pixels=rgba, width=width, height=height)
