"""
GIF Conversion Pipeline
=======================

Orchestrates decode -> scale -> dedup-check -> encode across a
recording and streams the result to disk.

Pipeline (per run):
    1. Open the sink (creates the destination directory)
    2. The first frame that decodes defines the canonical size
    3. Create the encoder: repeat forever, delay = 1000 // fps ms,
       quality, and the optimizer threshold when enabled
    4. For each frame in capture order:
        a. decode; on failure log and skip
        b. scale to max_width if configured
        c. skip if the size differs from the canonical size
        d. skip if similarity to the last ACCEPTED frame >= threshold
        e. encode and make it the new last accepted frame
    5. Fail with NoFramesProcessableError if nothing was encoded
    6. Write the trailer and wait for the sink to drain

Deduplication compares against the last accepted frame, never the
literal previous frame, so slow drift is still captured once the
accumulated change crosses the threshold.
"""

import asyncio
import logging
from typing import Optional, Sequence

from gif_recorder.config import ConversionConfig, SinkConfig
from gif_recorder.encoding.gif_encoder import REPEAT_FOREVER, GifEncoder
from gif_recorder.errors import (
    DimensionMismatchError,
    EmptyInputError,
    FrameDecodeError,
    NoFramesProcessableError,
)
from gif_recorder.models.frame import CanonicalFrame, RawFrame
from gif_recorder.models.stats import ConversionResult, ConversionStats
from gif_recorder.processing.scaler import scale_frame
from gif_recorder.processing.similarity import is_duplicate
from gif_recorder.stream.image_decoder import decode_frame
from gif_recorder.stream.sink import GifFileSink


logger = logging.getLogger(__name__)


class GifConverter:
    """
    Converts an ordered list of raw frames into an animated GIF.

    The converter holds configuration only; all per-run state (stats,
    canonical size, last accepted frame) is local to run(), so one
    instance can serve repeated or concurrent conversions.

    Example:
        converter = GifConverter(ConversionConfig(max_width=800))
        result = await converter.run(frames, "/tmp/recording.gif")
        print(result.stats.to_dict())
    """

    def __init__(
        self,
        config: Optional[ConversionConfig] = None,
        sink_config: Optional[SinkConfig] = None,
    ) -> None:
        self.config = config or ConversionConfig()
        self.sink_config = sink_config or SinkConfig()

    async def run(
        self,
        frames: Sequence[RawFrame],
        output_path: str,
    ) -> ConversionResult:
        """
        Convert frames to a GIF at output_path.

        Args:
            frames: Captured frames in capture order
            output_path: Destination file; its directory is created if missing

        Returns:
            ConversionResult with the path and frame statistics

        Raises:
            EmptyInputError: If frames is empty (no file is created)
            NoFramesProcessableError: If every frame was skipped
            OutputWriteError: If the directory or file cannot be written
        """
        if not frames:
            raise EmptyInputError("No frames to convert")

        config = self.config
        stats = ConversionStats()
        total = len(frames)

        logger.info(
            f"Converting {total} frames to {output_path} "
            f"(fps={config.fps}, quality={config.quality}, "
            f"algorithm={config.algorithm}, max_width={config.max_width}, "
            f"dedup={config.deduplicate_frames})"
        )

        sink = GifFileSink(
            output_path,
            max_pending_chunks=self.sink_config.max_pending_chunks,
            fsync=self.sink_config.fsync,
        )
        async with sink:
            encoder: Optional[GifEncoder] = None
            canonical_size: Optional[tuple] = None
            last_accepted: Optional[CanonicalFrame] = None

            for index, raw in enumerate(frames):
                try:
                    frame = await asyncio.to_thread(self._prepare, raw)
                except FrameDecodeError as e:
                    stats.frames_skipped_decode_error += 1
                    logger.warning(f"Skipping frame {index}: {e}")
                    continue

                if encoder is None:
                    canonical_size = frame.size
                    encoder = self._create_encoder(frame.width, frame.height, total)
                    logger.info(
                        f"Canonical size {frame.width}x{frame.height} "
                        f"from frame {index}"
                    )

                try:
                    _check_dimensions(frame, canonical_size)
                except DimensionMismatchError as e:
                    stats.frames_skipped_dimension_mismatch += 1
                    logger.warning(f"Skipping frame {index}: {e}")
                    continue

                if (
                    config.deduplicate_frames
                    and last_accepted is not None
                    and is_duplicate(
                        frame.pixels, last_accepted.pixels, config.deduplication_threshold
                    )
                ):
                    stats.frames_skipped_duplicate += 1
                    continue

                chunks = await asyncio.to_thread(encoder.add_frame, frame.pixels)
                for chunk in chunks:
                    await sink.write(chunk)

                last_accepted = frame
                stats.frames_added += 1

            if stats.frames_added == 0:
                raise NoFramesProcessableError(
                    f"None of {total} frames could be processed"
                )

            await sink.write(encoder.finish())
            path = await sink.close()

        logger.info(f"GIF written to {path}: {stats}")

        return ConversionResult(
            output_path=path,
            stats=stats,
            width=canonical_size[0],
            height=canonical_size[1],
            bytes_written=sink.bytes_written,
        )

    def _prepare(self, raw: RawFrame) -> CanonicalFrame:
        """Decode and, if configured, downscale one frame."""
        frame = decode_frame(raw)
        if self.config.max_width > 0:
            frame = scale_frame(frame, self.config.max_width)
        return frame

    def _create_encoder(self, width: int, height: int, total_frames: int) -> GifEncoder:
        config = self.config
        encoder = GifEncoder(
            width,
            height,
            algorithm=config.algorithm,
            use_optimizer=config.use_optimizer,
            total_frames=total_frames,
        )
        encoder.set_repeat(REPEAT_FOREVER)
        encoder.set_delay(config.frame_delay_ms)
        encoder.set_quality(config.quality)
        if config.use_optimizer:
            encoder.set_threshold(config.threshold)
        encoder.start()
        return encoder


def _check_dimensions(frame: CanonicalFrame, expected: tuple) -> None:
    if frame.size != expected:
        raise DimensionMismatchError(expected, frame.size)


async def convert_to_gif(
    frames: Sequence[RawFrame],
    output_path: str,
    config: Optional[ConversionConfig] = None,
) -> str:
    """
    Convert frames to a GIF and return the output path.

    See GifConverter.run for the error contract.
    """
    result = await GifConverter(config).run(frames, output_path)
    return result.output_path


def convert_to_gif_sync(
    frames: Sequence[RawFrame],
    output_path: str,
    config: Optional[ConversionConfig] = None,
) -> str:
    """Blocking wrapper around convert_to_gif for non-async callers."""
    return asyncio.run(convert_to_gif(frames, output_path, config))
