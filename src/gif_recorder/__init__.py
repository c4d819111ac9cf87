"""
Screen GIF Recorder
===================

Conversion core for turning captured screen frames into animated GIFs.

A recording arrives as an ordered list of compressed frames. Each frame
is decoded, optionally downscaled, checked against the last accepted
frame for redundancy, and pushed through a GIF encoder whose output is
streamed to disk with backpressure.

Components:
    - stream: Frame decoding and the output file sink
    - processing: Scaling and sampled similarity
    - encoding: Pillow-backed GIF encoder
    - pipeline: Conversion orchestration
    - models: Frames, statistics and the recording session

Example:
    from gif_recorder import ConversionConfig, RecordingSession, convert_to_gif

    session = RecordingSession()
    session.start()
    ...
    frames = session.stop()
    path = await convert_to_gif(frames, "demo.gif", ConversionConfig(max_width=800))
"""

__version__ = "0.1.0"

from gif_recorder.config import ConversionConfig, Settings, load_config
from gif_recorder.errors import (
    DimensionMismatchError,
    EmptyInputError,
    FrameDecodeError,
    GifRecorderError,
    NoFramesProcessableError,
    OutputWriteError,
)
from gif_recorder.models import (
    CanonicalFrame,
    ConversionResult,
    ConversionStats,
    RawFrame,
    RecordingSession,
    default_output_path,
)
from gif_recorder.pipeline import GifConverter, convert_to_gif, convert_to_gif_sync


__all__ = [
    "__version__",
    # Config
    "ConversionConfig",
    "Settings",
    "load_config",
    # Errors
    "GifRecorderError",
    "EmptyInputError",
    "FrameDecodeError",
    "DimensionMismatchError",
    "NoFramesProcessableError",
    "OutputWriteError",
    # Models
    "RawFrame",
    "CanonicalFrame",
    "ConversionStats",
    "ConversionResult",
    "RecordingSession",
    "default_output_path",
    # Pipeline
    "GifConverter",
    "convert_to_gif",
    "convert_to_gif_sync",
]
