"""
Conversion Pipeline Tests
=========================

End-to-end tests for GifConverter: frames in, GIF file out.
"""

import asyncio

import pytest
from PIL import Image

from conftest import FailingFile, encode_png, read_gif_colors, solid_frame
from gif_recorder.config import ConversionConfig, SinkConfig
from gif_recorder.errors import (
    EmptyInputError,
    NoFramesProcessableError,
    OutputWriteError,
)
from gif_recorder.models.frame import RawFrame
from gif_recorder.pipeline import converter as converter_module
from gif_recorder.pipeline.converter import (
    GifConverter,
    convert_to_gif,
    convert_to_gif_sync,
)
from gif_recorder.stream.sink import GifFileSink


def run(converter: GifConverter, frames, path):
    return asyncio.run(converter.run(frames, str(path)))


class TestConversion:
    """Tests for successful conversions."""

    def test_all_frames_added_in_order(self, tmp_path, palette_colors, no_dedup_config):
        """With dedup disabled every decodable frame is encoded, in order."""
        frames = [solid_frame(c, timestamp=i * 100) for i, c in enumerate(palette_colors)]
        path = tmp_path / "out.gif"

        result = run(GifConverter(no_dedup_config), frames, path)

        assert result.output_path == str(path)
        assert result.stats.frames_added == len(frames)
        assert result.stats.frames_skipped == 0
        assert read_gif_colors(path) == palette_colors

    def test_identical_frames_kept_without_dedup(self, tmp_path, no_dedup_config):
        frames = [solid_frame((40, 40, 40)) for _ in range(4)]
        path = tmp_path / "out.gif"

        result = run(GifConverter(no_dedup_config), frames, path)

        assert result.stats.frames_added == 4
        with Image.open(path) as im:
            assert im.n_frames == 4

    def test_output_metadata(self, tmp_path, palette_colors):
        path = tmp_path / "out.gif"
        config = ConversionConfig(fps=4)

        result = run(GifConverter(config), [solid_frame(c) for c in palette_colors], path)

        assert result.bytes_written == path.stat().st_size
        with Image.open(path) as im:
            assert im.info["loop"] == 0
            assert im.info["duration"] == 250

    def test_creates_destination_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "out.gif"
        result = run(GifConverter(), [solid_frame((1, 2, 3))], path)
        assert path.exists()
        assert result.stats.frames_added == 1

    @pytest.mark.parametrize("algorithm", ["octree", "neuquant"])
    @pytest.mark.parametrize("use_optimizer", [True, False])
    def test_encoder_options(self, tmp_path, palette_colors, algorithm, use_optimizer):
        config = ConversionConfig(
            algorithm=algorithm,
            use_optimizer=use_optimizer,
            quality=15,
        )
        path = tmp_path / "out.gif"

        result = run(GifConverter(config), [solid_frame(c) for c in palette_colors], path)

        assert read_gif_colors(path) == palette_colors
        assert result.stats.frames_added == len(palette_colors)


class TestDeduplication:
    """Tests for similarity-based frame dropping."""

    def test_all_duplicates_collapse_to_one(self, tmp_path):
        frames = [solid_frame((90, 10, 200), timestamp=i) for i in range(6)]
        path = tmp_path / "out.gif"

        result = run(GifConverter(ConversionConfig()), frames, path)

        assert result.stats.frames_added == 1
        assert result.stats.frames_skipped_duplicate == 5
        with Image.open(path) as im:
            assert im.n_frames == 1

    def test_compares_against_last_accepted_frame(self, tmp_path):
        """Gradual drift is captured once it accumulates past the threshold."""
        width, height = 10, 10
        base = Image.new("RGB", (width, height), (0, 0, 0))

        def drifted(changed_pixels: int) -> RawFrame:
            image = base.copy()
            for i in range(changed_pixels):
                image.putpixel((i % width, i // width), (255, 255, 255))
            return RawFrame(data=encode_png(image), timestamp=changed_pixels)

        # Each frame differs from its predecessor by 1 pixel (99% similar),
        # but from the first frame by 0, 1, 2, 3 pixels.
        frames = [drifted(n) for n in range(4)]
        config = ConversionConfig(deduplication_threshold=99)
        path = tmp_path / "out.gif"

        result = run(GifConverter(config), frames, path)

        # frame 1 is 99% similar to frame 0 -> dropped
        # frame 2 is 98% similar to frame 0 -> accepted
        # frame 3 is 99% similar to frame 2 -> dropped
        assert result.stats.frames_added == 2
        assert result.stats.frames_skipped_duplicate == 2

    def test_distinct_frames_not_dropped(self, tmp_path, palette_colors):
        path = tmp_path / "out.gif"
        result = run(GifConverter(), [solid_frame(c) for c in palette_colors], path)
        assert result.stats.frames_skipped_duplicate == 0

    def test_duplicate_check_uses_configured_threshold(self, tmp_path, palette_colors, monkeypatch):
        """Each candidate is checked against the last accepted frame at the configured threshold."""
        calls = []

        def record(a, b, threshold):
            calls.append(threshold)
            return False

        monkeypatch.setattr(converter_module, "is_duplicate", record)
        frames = [solid_frame(c) for c in palette_colors]
        config = ConversionConfig(deduplication_threshold=87.5)

        result = run(GifConverter(config), frames, tmp_path / "out.gif")

        assert result.stats.frames_added == len(frames)
        assert calls == [87.5] * (len(frames) - 1)


class TestGeometry:
    """Tests for scaling and dimension checks."""

    def test_mismatched_frame_skipped(self, tmp_path, palette_colors, no_dedup_config):
        """A frame with different size is dropped; the run still succeeds."""
        frames = [solid_frame(c, 32, 24) for c in palette_colors]
        frames[2] = solid_frame(palette_colors[2], 40, 24)
        path = tmp_path / "out.gif"

        result = run(GifConverter(no_dedup_config), frames, path)

        assert result.stats.frames_skipped_dimension_mismatch == 1
        assert result.stats.frames_added == 4
        expected = [c for i, c in enumerate(palette_colors) if i != 2]
        assert read_gif_colors(path) == expected

    def test_first_frame_defines_canonical_size(self, tmp_path, no_dedup_config):
        """Later frames never redefine the canonical size."""
        frames = [
            solid_frame((255, 0, 0), 20, 10),
            solid_frame((0, 255, 0), 30, 10),
            solid_frame((0, 0, 255), 30, 10),
        ]
        path = tmp_path / "out.gif"

        result = run(GifConverter(no_dedup_config), frames, path)

        assert (result.width, result.height) == (20, 10)
        assert result.stats.frames_added == 1
        assert result.stats.frames_skipped_dimension_mismatch == 2

    def test_frames_scaled_to_max_width(self, tmp_path, no_dedup_config):
        config = ConversionConfig(max_width=16, deduplicate_frames=False)
        frames = [solid_frame((255, 0, 0), 64, 48), solid_frame((0, 0, 255), 64, 48)]
        path = tmp_path / "out.gif"

        result = run(GifConverter(config), frames, path)

        assert (result.width, result.height) == (16, 12)
        with Image.open(path) as im:
            assert im.size == (16, 12)
            assert im.n_frames == 2

    def test_scaling_can_reconcile_sizes(self, tmp_path):
        """Frames matching after scaling are accepted."""
        config = ConversionConfig(max_width=10, deduplicate_frames=False)
        frames = [solid_frame((255, 0, 0), 20, 10), solid_frame((0, 255, 0), 40, 20)]
        path = tmp_path / "out.gif"

        result = run(GifConverter(config), frames, path)

        assert result.stats.frames_added == 2
        assert (result.width, result.height) == (10, 5)


class TestFailures:
    """Tests for run-level and per-frame failures."""

    def test_empty_input(self, tmp_path):
        """Empty input fails and creates no file or directory."""
        path = tmp_path / "new_dir" / "out.gif"
        with pytest.raises(EmptyInputError):
            run(GifConverter(), [], path)
        assert not path.exists()
        assert not path.parent.exists()

    def test_all_frames_undecodable(self, tmp_path):
        frames = [RawFrame(data=b"garbage", timestamp=i) for i in range(3)]
        path = tmp_path / "out.gif"

        with pytest.raises(NoFramesProcessableError):
            run(GifConverter(), frames, path)
        assert not path.exists()

    def test_bad_frames_skipped(self, tmp_path, no_dedup_config):
        """Undecodable frames are skipped, including the first one."""
        frames = [
            RawFrame(data=b"", timestamp=0),
            solid_frame((255, 0, 0)),
            RawFrame(data=b"\x89PNG broken", timestamp=2),
            solid_frame((0, 0, 255)),
        ]
        path = tmp_path / "out.gif"

        result = run(GifConverter(no_dedup_config), frames, path)

        assert result.stats.frames_added == 2
        assert result.stats.frames_skipped_decode_error == 2
        assert read_gif_colors(path) == [(255, 0, 0), (0, 0, 255)]

    def test_unwritable_destination(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")

        with pytest.raises(OutputWriteError):
            run(GifConverter(), [solid_frame((0, 0, 0))], blocker / "out.gif")

    def test_write_fault_mid_run(self, tmp_path, palette_colors, no_dedup_config, monkeypatch):
        """A disk fault after encoding started propagates and leaves no file."""
        path = tmp_path / "out.gif"
        fake = FailingFile(fail_after=1)
        sinks = []
        original_open = GifFileSink.open

        async def open_with_failing_handle(self):
            await original_open(self)
            self._fh.close()
            self._fh = fake
            sinks.append(self)

        monkeypatch.setattr(GifFileSink, "open", open_with_failing_handle)
        frames = [solid_frame(c) for c in palette_colors]
        converter = GifConverter(no_dedup_config, SinkConfig(max_pending_chunks=1))

        with pytest.raises(OutputWriteError) as info:
            run(converter, frames, path)

        assert isinstance(info.value.__cause__, OSError)
        assert info.value.__cause__.errno == 28
        assert fake.closed
        assert not sinks[0].is_open
        assert isinstance(sinks[0].completion.exception(), OutputWriteError)
        assert not path.exists()


class TestWrappers:
    """Tests for the convenience functions."""

    def test_convert_to_gif_returns_path(self, tmp_path):
        path = tmp_path / "out.gif"
        result = asyncio.run(convert_to_gif([solid_frame((1, 1, 1))], str(path)))
        assert result == str(path)
        assert path.exists()

    def test_convert_to_gif_sync(self, tmp_path, palette_colors):
        path = tmp_path / "out.gif"
        config = ConversionConfig(deduplicate_frames=False)
        frames = [solid_frame(c) for c in palette_colors]

        assert convert_to_gif_sync(frames, str(path), config) == str(path)
        assert read_gif_colors(path) == palette_colors

    def test_converter_is_reusable(self, tmp_path, palette_colors):
        """Stats are per run, never shared across runs."""
        converter = GifConverter(ConversionConfig(deduplicate_frames=False))
        frames = [solid_frame(c) for c in palette_colors]

        first = run(converter, frames, tmp_path / "a.gif")
        second = run(converter, frames[:2], tmp_path / "b.gif")

        assert first.stats.frames_added == 5
        assert second.stats.frames_added == 2
