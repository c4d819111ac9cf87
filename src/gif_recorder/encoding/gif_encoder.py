"""
GIF Encoder
===========

Push-based animated GIF encoder built on Pillow's GIF plugin.

The encoder never touches storage. Every call that produces output
returns the encoded byte chunks, which the caller forwards to a sink:

    encoder = GifEncoder(640, 480, algorithm="octree", use_optimizer=True)
    encoder.set_repeat(0)
    encoder.set_delay(100)
    encoder.start()
    for pixels in frames:
        for chunk in encoder.add_frame(pixels):
            await sink.write(chunk)
    await sink.write(encoder.finish())

Color Quantization:
    Palette reduction is delegated to Pillow and treated as a black box.
        - "octree"   -> Image.Quantize.FASTOCTREE
        - "neuquant" -> Image.Quantize.MEDIANCUT

    Quality (1-20, lower = better/slower) selects the number of k-means
    refinement passes, (20 - quality) // 5, and whether frames mapped
    onto a reused palette are dithered (quality <= 10).

Optimizer:
    When enabled, a frame whose sampled similarity to the previous
    encoded frame is >= threshold is mapped onto the previous frame's
    palette instead of being quantized again. Frames whose palette is
    the global palette are written without a local color table.
"""

import logging
from typing import List, Optional

import numpy as np
from PIL import GifImagePlugin, Image

from gif_recorder.models.frame import CHANNELS
from gif_recorder.processing.similarity import similarity


logger = logging.getLogger(__name__)


QUANTIZE_METHODS = {
    "octree": Image.Quantize.FASTOCTREE,
    "neuquant": Image.Quantize.MEDIANCUT,
}

GIF_TRAILER = b";"

REPEAT_FOREVER = 0
REPEAT_NONE = -1


class GifEncoder:
    """
    Sequential GIF encoder producing byte chunks.

    Attributes:
        width: Logical screen width; every frame must match
        height: Logical screen height; every frame must match
        algorithm: Quantization algorithm name
        use_optimizer: Palette reuse for near-identical frames
        total_frames: Declared frame count (capacity hint only)
        frames_written: Frames encoded so far
        palettes_reused: Frames that reused the previous palette
    """

    def __init__(
        self,
        width: int,
        height: int,
        algorithm: str = "octree",
        use_optimizer: bool = True,
        total_frames: int = 0,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid GIF size {width}x{height}")
        if algorithm not in QUANTIZE_METHODS:
            raise ValueError(
                f"Unknown quantization algorithm '{algorithm}', "
                f"expected one of {sorted(QUANTIZE_METHODS)}"
            )

        self.width = width
        self.height = height
        self.algorithm = algorithm
        self.use_optimizer = use_optimizer
        self.total_frames = total_frames

        self._repeat: int = REPEAT_FOREVER
        self._delay_ms: int = 0
        self._quality: int = 10
        self._threshold: float = 90.0

        self._started = False
        self._finished = False
        self._global_palette: Optional[bytes] = None
        self._prev_image: Optional[Image.Image] = None
        self._prev_pixels: Optional[np.ndarray] = None

        self.frames_written: int = 0
        self.palettes_reused: int = 0

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    def set_repeat(self, repeat: int) -> None:
        """0 loops forever, -1 plays once, n > 0 repeats n times."""
        if repeat < REPEAT_NONE:
            raise ValueError("repeat must be >= -1")
        self._repeat = repeat

    def set_delay(self, delay_ms: int) -> None:
        """Per-frame delay in milliseconds."""
        if delay_ms < 0:
            raise ValueError("delay must be >= 0")
        self._delay_ms = delay_ms

    def set_quality(self, quality: int) -> None:
        if not 1 <= quality <= 20:
            raise ValueError("quality must be in [1, 20]")
        self._quality = quality

    def set_threshold(self, threshold: float) -> None:
        """Optimizer similarity threshold, percentage."""
        if not 0 <= threshold <= 100:
            raise ValueError("threshold must be in [0, 100]")
        self._threshold = threshold

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def kmeans_passes(self) -> int:
        return (20 - self._quality) // 5

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def start(self) -> None:
        if self._started:
            raise RuntimeError("Encoder already started")
        self._started = True
        logger.debug(
            f"GifEncoder started: {self.width}x{self.height}, "
            f"algorithm={self.algorithm}, optimizer={self.use_optimizer}, "
            f"delay={self._delay_ms}ms, quality={self._quality}"
        )

    def add_frame(self, pixels) -> List[bytes]:
        """
        Encode one RGBA frame.

        Args:
            pixels: RGBA buffer, either shape (height, width, 4) or flat

        Returns:
            Encoded chunks; the first frame also carries the GIF header

        Raises:
            RuntimeError: If called before start() or after finish()
            ValueError: If the buffer does not match the encoder size
        """
        if not self._started or self._finished:
            raise RuntimeError("Encoder is not accepting frames")

        rgba = self._as_rgba(pixels)
        image = self._quantize(rgba)

        chunks: List[bytes] = []
        if self._global_palette is None:
            chunks.extend(self._header(image))

        include_color_table = bytes(image.palette.palette) != self._global_palette
        chunks.extend(
            GifImagePlugin.getdata(
                image,
                offset=(0, 0),
                duration=self._delay_ms,
                include_color_table=include_color_table,
            )
        )

        self.frames_written += 1
        if self.total_frames and self.frames_written == self.total_frames + 1:
            logger.debug(
                f"Encoder received more frames than declared ({self.total_frames})"
            )
        return [bytes(chunk) for chunk in chunks]

    def finish(self) -> bytes:
        """
        Close the stream.

        Returns:
            The GIF trailer

        Raises:
            RuntimeError: If no frame was added or finish() was already called
        """
        if self._finished:
            raise RuntimeError("Encoder already finished")
        if self.frames_written == 0:
            raise RuntimeError("Cannot finish a GIF without frames")
        self._finished = True
        self._prev_image = None
        self._prev_pixels = None
        logger.debug(
            f"GifEncoder finished: {self.frames_written} frames, "
            f"{self.palettes_reused} palettes reused"
        )
        return GIF_TRAILER

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _as_rgba(self, pixels) -> np.ndarray:
        if isinstance(pixels, (bytes, bytearray, memoryview)):
            arr = np.frombuffer(pixels, dtype=np.uint8)
        else:
            arr = np.asarray(pixels, dtype=np.uint8)

        expected = (self.height, self.width, CHANNELS)
        if arr.ndim == 1:
            if arr.size != self.width * self.height * CHANNELS:
                raise ValueError(
                    f"Buffer of {arr.size} bytes does not match "
                    f"{self.width}x{self.height} RGBA"
                )
            arr = arr.reshape(expected)
        if arr.shape != expected:
            raise ValueError(f"Frame shape {arr.shape} does not match {expected}")
        return arr

    def _quantize(self, rgba: np.ndarray) -> Image.Image:
        rgb = Image.fromarray(np.ascontiguousarray(rgba[:, :, :3]))
        dither = (
            Image.Dither.FLOYDSTEINBERG if self._quality <= 10 else Image.Dither.NONE
        )

        if (
            self.use_optimizer
            and self._prev_image is not None
            and similarity(rgba, self._prev_pixels) >= self._threshold
        ):
            image = rgb.quantize(palette=self._prev_image, dither=dither)
            self.palettes_reused += 1
        else:
            image = rgb.quantize(
                colors=256,
                method=QUANTIZE_METHODS[self.algorithm],
                kmeans=self.kmeans_passes,
            )

        if self.use_optimizer:
            self._prev_image = image
            self._prev_pixels = rgba
        return image

    def _header(self, image: Image.Image) -> List[bytes]:
        info = {"duration": self._delay_ms}
        if self._repeat != REPEAT_NONE:
            info["loop"] = self._repeat

        header, _ = GifImagePlugin.getheader(image, None, info)
        self._global_palette = bytes(image.palette.palette)
        return header
