"""
Command Line Tests
==================
"""

from PIL import Image

from conftest import solid_png
from gif_recorder.main import collect_frame_files, main


class TestMain:
    """Tests for the gif-recorder entry point."""

    def test_converts_directory(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        frames_dir = tmp_path / "captures"
        frames_dir.mkdir()
        for name, color in [("002.png", (0, 255, 0)), ("001.png", (255, 0, 0))]:
            (frames_dir / name).write_bytes(solid_png(color))
        (frames_dir / "notes.txt").write_text("ignored")
        output = tmp_path / "out.gif"

        code = main([str(frames_dir), "--output", str(output), "--fps", "5"])

        assert code == 0
        assert "GIF saved to" in capsys.readouterr().out
        with Image.open(output) as im:
            assert im.n_frames == 2
            assert im.info["duration"] == 200
            assert im.convert("RGB").getpixel((0, 0)) == (255, 0, 0)

    def test_failure_exit_code(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not a png")

        assert main([str(bad), "--output", str(tmp_path / "out.gif")]) == 1
        assert not (tmp_path / "out.gif").exists()

    def test_missing_input_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main([str(tmp_path / "nope.png"), "-o", str(tmp_path / "o.gif")]) == 1

    def test_collect_keeps_argument_order(self, tmp_path):
        a, b = tmp_path / "b.png", tmp_path / "a.png"
        assert collect_frame_files([str(a), str(b)]) == [a, b]
