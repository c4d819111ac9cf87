"""
Error Taxonomy
==============

Typed failures raised by the conversion pipeline.

Per-frame errors (FrameDecodeError, DimensionMismatchError) are
recovered inside the pipeline loop by skipping the frame. Run-level
errors (EmptyInputError, NoFramesProcessableError, OutputWriteError)
abort the conversion and propagate to the caller.
"""


class GifRecorderError(Exception):
    """Base class for all conversion errors."""
    pass


class EmptyInputError(GifRecorderError):
    """Raised when a conversion is requested with no frames."""
    pass


class FrameDecodeError(GifRecorderError):
    """Raised when a raw frame buffer cannot be decoded."""
    pass


class DimensionMismatchError(GifRecorderError):
    """Raised when a frame's geometry disagrees with the run's canonical size."""

    def __init__(self, expected: tuple, actual: tuple) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Frame size {actual[0]}x{actual[1]} does not match "
            f"canonical size {expected[0]}x{expected[1]}"
        )


class NoFramesProcessableError(GifRecorderError):
    """Raised when every frame of a run was skipped."""
    pass


class OutputWriteError(GifRecorderError, OSError):
    """
    Raised when the output directory or file cannot be written.

    The underlying OSError is chained as ``__cause__``.
    """
    pass
