"""Tests for CLI commands."""
import json

import pytest
from pathlib import Path

from PIL import Image

from fixtures import make_gif, make_jpeg


class TestCLIParsing:
    """Test CLI argument parsing."""

    def test_export_command_basic(self):
        from mediaexport.cli import create_parser

        parser = create_parser()
        args = parser.parse_args([
            "export",
            "/photos/a.jpg",
            "/photos/b.mov",
            "-o", "/media",
        ])

        assert args.command == "export"
        assert args.files == [Path("/photos/a.jpg"), Path("/photos/b.mov")]
        assert args.output == Path("/media")
        assert args.max_size is None
        assert args.no_resize is False
        assert args.keep_location is False
        assert args.category == "uploads"

    def test_export_options(self):
        from mediaexport.cli import create_parser

        parser = create_parser()
        args = parser.parse_args([
            "export", "a.jpg", "-o", "out",
            "--max-size", "1024",
            "--no-resize",
            "--keep-location",
            "--category", "drafts",
            "-w", "8",
        ])

        assert args.max_size == 1024
        assert args.no_resize is True
        assert args.keep_location is True
        assert args.category == "drafts"
        assert args.workers == 8

    def test_export_requires_output(self):
        from mediaexport.cli import create_parser

        with pytest.raises(SystemExit):
            create_parser().parse_args(["export", "a.jpg"])

    def test_invalid_category(self):
        from mediaexport.cli import create_parser

        with pytest.raises(SystemExit):
            create_parser().parse_args(["export", "a.jpg", "-o", "out", "--category", "nowhere"])

    def test_inspect_command(self):
        from mediaexport.cli import create_parser

        args = create_parser().parse_args(["inspect", "a.gif"])
        assert args.command == "inspect"
        assert args.file == Path("a.gif")


class TestBuildSettings:
    """Test settings overrides from the command line."""

    def test_defaults(self):
        from mediaexport.cli import build_settings, create_parser

        args = create_parser().parse_args(["export", "a.jpg", "-o", "out"])
        settings = build_settings(args)

        assert settings.max_image_size == 2000
        assert settings.remove_location is True

    def test_settings_file_and_overrides(self, tmp_path: Path):
        from mediaexport.cli import build_settings, create_parser

        settings_file = tmp_path / "settings.json"
        settings_file.write_text(json.dumps({"max_image_size": 640, "remove_location": True}))
        args = create_parser().parse_args([
            "export", "a.jpg", "-o", "out",
            "--settings", str(settings_file),
            "--keep-location",
        ])

        settings = build_settings(args)

        assert settings.max_image_size == 640
        assert settings.remove_location is False


class TestCLIMain:
    """Test main() end to end."""

    def test_no_command(self):
        from mediaexport.cli import main

        assert main([]) == 0

    def test_export_images(self, tmp_path: Path):
        from mediaexport.cli import main

        jpeg = make_jpeg(tmp_path / "in" / "photo.jpg", size=(300, 150))
        gif = make_gif(tmp_path / "in" / "anim.gif")
        out = tmp_path / "out"

        code = main(["-q", "export", str(jpeg), str(gif), "-o", str(out), "--max-size", "100"])

        assert code == 0
        with Image.open(out / "uploads" / "photo.jpg") as img:
            assert img.size == (100, 50)
        assert (out / "uploads" / "anim.gif").read_bytes() == gif.read_bytes()

    def test_export_failure_exit_code(self, tmp_path: Path):
        from mediaexport.cli import main

        song = tmp_path / "in" / "song.mp3"
        song.parent.mkdir()
        song.write_bytes(b"ID3")

        assert main(["-q", "export", str(song), "-o", str(tmp_path / "out")]) == 1

    def test_invalid_max_size(self, tmp_path: Path):
        from mediaexport.cli import main

        jpeg = make_jpeg(tmp_path / "a.jpg")
        assert main(["-q", "export", str(jpeg), "-o", str(tmp_path / "out"), "--max-size", "0"]) == 1

    def test_inspect(self, tmp_path: Path):
        from mediaexport.cli import main

        jpeg = make_jpeg(tmp_path / "a.jpg", with_gps=True)
        assert main(["-q", "inspect", str(jpeg)]) == 0

    def test_inspect_missing(self, tmp_path: Path):
        from mediaexport.cli import main

        assert main(["-q", "inspect", str(tmp_path / "nope.jpg")]) == 1
