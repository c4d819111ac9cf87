"""
Data Models
===========

Frame, statistics and session types for the GIF recorder.

Models:
    Frames:
        - RawFrame: Compressed frame from the capture layer
        - CanonicalFrame: Decoded RGBA pixel buffer

    Statistics:
        - ConversionStats: Per-run frame counters
        - ConversionResult: Outcome of a successful conversion

    Session:
        - RecordingState: IDLE, RECORDING, PAUSED
        - RecordingSession: Per-recording frame accumulator
"""

from gif_recorder.models.frame import CHANNELS, CanonicalFrame, RawFrame
from gif_recorder.models.stats import ConversionResult, ConversionStats
from gif_recorder.models.session import (
    DEFAULT_FPS,
    RecordingSession,
    RecordingState,
    default_output_path,
)

__all__ = [
    # Frames
    "CHANNELS",
    "RawFrame",
    "CanonicalFrame",
    # Statistics
    "ConversionStats",
    "ConversionResult",
    # Session
    "DEFAULT_FPS",
    "RecordingState",
    "RecordingSession",
    "default_output_path",
]
