"""
Conversion Statistics
=====================

Per-run accumulator and final result of a conversion.
"""

from dataclasses import dataclass


class ConversionStats:
    """Counters for a single conversion run."""

    __slots__ = (
        "frames_added",
        "frames_skipped_duplicate",
        "frames_skipped_dimension_mismatch",
        "frames_skipped_decode_error",
    )

    def __init__(self) -> None:
        self.frames_added: int = 0
        self.frames_skipped_duplicate: int = 0
        self.frames_skipped_dimension_mismatch: int = 0
        self.frames_skipped_decode_error: int = 0

    @property
    def frames_skipped(self) -> int:
        """Total frames dropped for any reason."""
        return (
            self.frames_skipped_duplicate
            + self.frames_skipped_dimension_mismatch
            + self.frames_skipped_decode_error
        )

    def to_dict(self) -> dict:
        """Export stats as dict."""
        return {
            "frames_added": self.frames_added,
            "frames_skipped_duplicate": self.frames_skipped_duplicate,
            "frames_skipped_dimension_mismatch": self.frames_skipped_dimension_mismatch,
            "frames_skipped_decode_error": self.frames_skipped_decode_error,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v}" for k, v in self.to_dict().items())
        return f"ConversionStats({fields})"


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """
    Outcome of a successful conversion.

    Attributes:
        output_path: Path of the written GIF
        stats: Frame counters for the run
        width: Canonical output width
        height: Canonical output height
        bytes_written: Size of the output file in bytes
    """

    output_path: str
    stats: ConversionStats
    width: int
    height: int
    bytes_written: int
