"""
Recording Session
=================

Explicit per-recording context object owned by the caller.

A RecordingSession holds the recording state and the frames captured
so far. The capture timer pushes frames into it; stopping the session
hands the ordered frame list to the conversion pipeline. Nothing here
is process-wide: every recording gets its own session.

Example:
    session = RecordingSession()
    session.start()
    session.add_frame(png_bytes)
    frames = session.stop()
    path = await convert_to_gif(frames, default_output_path())
"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import List, Optional

from gif_recorder.models.frame import RawFrame


logger = logging.getLogger(__name__)


DEFAULT_FPS = 10


class RecordingState(str, Enum):
    """
    Lifecycle states of a recording session.

    Attributes:
        IDLE: No recording in progress
        RECORDING: Frames are being accepted
        PAUSED: Recording in progress, frames are ignored
    """

    IDLE = "IDLE"
    RECORDING = "RECORDING"
    PAUSED = "PAUSED"


def _now_ms() -> int:
    return int(time.time() * 1000)


class RecordingSession:
    """
    Frame accumulator for one recording.

    Attributes:
        fps: Capture rate the session was started with
        state: Current RecordingState
        frame_count: Number of frames captured so far
    """

    def __init__(self, fps: int = DEFAULT_FPS) -> None:
        if fps < 1:
            raise ValueError("fps must be >= 1")

        self.fps = fps
        self._state = RecordingState.IDLE
        self._frames: List[RawFrame] = []

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        """True while recording or paused."""
        return self._state != RecordingState.IDLE

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def capture_interval_ms(self) -> int:
        """Interval the capture timer should fire at."""
        return 1000 // self.fps

    def start(self) -> bool:
        """
        Start a new recording, discarding any previous frames.

        Returns:
            False if a recording is already in progress.
        """
        if self.is_recording:
            logger.info("Recording is already in progress")
            return False

        self._frames = []
        self._state = RecordingState.RECORDING
        logger.info(f"Recording started at {self.fps} FPS")
        return True

    def add_frame(self, data: bytes, timestamp_ms: Optional[int] = None) -> bool:
        """
        Append a captured frame.

        Args:
            data: Compressed image bytes
            timestamp_ms: Capture time; defaults to now

        Returns:
            True if the frame was stored, False when not recording.
        """
        if self._state != RecordingState.RECORDING:
            return False

        if timestamp_ms is None:
            timestamp_ms = _now_ms()
        self._frames.append(RawFrame(data=data, timestamp=timestamp_ms))
        logger.debug(f"Captured frame {len(self._frames)}")
        return True

    def pause(self) -> None:
        if self._state == RecordingState.RECORDING:
            self._state = RecordingState.PAUSED
            logger.info("Recording paused")

    def resume(self) -> None:
        if self._state == RecordingState.PAUSED:
            self._state = RecordingState.RECORDING
            logger.info("Recording resumed")

    def stop(self) -> List[RawFrame]:
        """
        Stop recording and hand over the captured frames.

        Returns:
            Frames in capture order; empty if no recording was running.
        """
        if not self.is_recording:
            logger.info("No recording in progress")
            return []

        frames = self._frames
        self._frames = []
        self._state = RecordingState.IDLE
        logger.info(f"Recording stopped. Captured {len(frames)} frames")
        return frames


def default_output_path(
    directory: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> str:
    """
    Build the default GIF path, ``recording-<ms>.gif``.

    Args:
        directory: Target directory; defaults to ~/Downloads
        now_ms: Timestamp used in the file name; defaults to now

    Returns:
        Absolute path as a string
    """
    base = Path(directory).expanduser() if directory else Path.home() / "Downloads"
    if now_ms is None:
        now_ms = _now_ms()
    return str(base / f"recording-{now_ms}.gif")
