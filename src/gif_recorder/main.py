"""
Screen GIF Recorder Command Line
================================

Converts a sequence of captured frame images into an animated GIF.

Frames are taken in the order given on the command line; directories
are expanded to their image files sorted by name.

Usage:
    gif-recorder captures/ --output demo.gif
    gif-recorder f001.png f002.png f003.png --fps 15 --max-width 800
    gif-recorder captures/ --no-dedup --algorithm neuquant --config config.yaml
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gif_recorder.config import ConversionConfig, Settings, load_config, setup_logging
from gif_recorder.errors import GifRecorderError
from gif_recorder.models.frame import RawFrame
from gif_recorder.models.session import RecordingSession, default_output_path
from gif_recorder.pipeline.converter import GifConverter


logger = logging.getLogger(__name__)


IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".webp", ".tif", ".tiff"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gif-recorder",
        description="Convert captured screen frames into an animated GIF",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Frame image files or directories, in capture order",
    )
    parser.add_argument("-o", "--output", help="Output GIF path")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--fps", type=int, help="Playback frames per second")
    parser.add_argument("--quality", type=int, help="Encoder quality 1-20, lower is better")
    parser.add_argument(
        "--algorithm",
        choices=["octree", "neuquant"],
        help="Color quantization algorithm",
    )
    parser.add_argument(
        "--no-optimizer",
        dest="use_optimizer",
        action="store_false",
        default=None,
        help="Disable palette reuse for similar frames",
    )
    parser.add_argument("--threshold", type=int, help="Optimizer threshold 0-100")
    parser.add_argument(
        "--no-dedup",
        dest="deduplicate_frames",
        action="store_false",
        default=None,
        help="Keep near-identical consecutive frames",
    )
    parser.add_argument(
        "--dedup-threshold",
        dest="deduplication_threshold",
        type=float,
        help="Similarity percentage at which a frame is dropped",
    )
    parser.add_argument("--max-width", type=int, help="Maximum output width (0 = no scaling)")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, ...)")
    return parser


def collect_frame_files(inputs: List[str]) -> List[Path]:
    """Expand inputs into an ordered list of image files."""
    files: List[Path] = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            files.extend(
                sorted(p for p in path.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
            )
        else:
            files.append(path)
    return files


def load_frames(files: List[Path], fps: int) -> List[RawFrame]:
    """Replay image files through a RecordingSession."""
    session = RecordingSession(fps=fps)
    session.start()
    for index, path in enumerate(files):
        session.add_frame(path.read_bytes(), timestamp_ms=index * session.capture_interval_ms)
    return session.stop()


def resolve_conversion_config(settings: Settings, args: argparse.Namespace) -> ConversionConfig:
    """Apply command-line overrides on top of loaded settings."""
    overrides = {
        field: getattr(args, field)
        for field in ConversionConfig.model_fields
        if getattr(args, field, None) is not None
    }
    return ConversionConfig.model_validate(
        {**settings.conversion.model_dump(), **overrides}
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_config(args.config)
    if args.log_level:
        settings.logging.level = args.log_level
    setup_logging(settings)

    config = resolve_conversion_config(settings, args)
    output = args.output or default_output_path(settings.output.directory)

    try:
        files = collect_frame_files(args.inputs)
        frames = load_frames(files, config.fps)
    except OSError as e:
        logger.error(f"Cannot read frames: {e}")
        return 1

    converter = GifConverter(config, settings.sink)
    try:
        result = asyncio.run(converter.run(frames, output))
    except GifRecorderError as e:
        logger.error(f"Failed to create GIF: {e}")
        return 1

    stats = result.stats
    print(
        f"GIF saved to {result.output_path} "
        f"({result.width}x{result.height}, {stats.frames_added} frames, "
        f"{stats.frames_skipped_duplicate} duplicates dropped, "
        f"{result.bytes_written} bytes)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
