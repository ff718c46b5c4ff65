"""Tests for the animated image export engine."""
import pytest
from pathlib import Path
from unittest.mock import MagicMock

from PIL import Image

from mediaexport.core.errors import ExportError, ExportErrorCode
from mediaexport.engines.gif import GIFExporter
from mediaexport.services.allocator import LocalMediaDirectory
from mediaexport.services.resources import LocalResourceProvider

from fixtures import image_asset, make_gif, make_jpeg


class TestGIFExporter:
    """Tests for GIFExporter."""

    @pytest.fixture
    def exporter(self, tmp_path: Path):
        return GIFExporter(LocalMediaDirectory(tmp_path / "media"), LocalResourceProvider())

    def test_copies_bytes_verbatim(self, exporter, tmp_path: Path):
        source = make_gif(tmp_path / "src" / "party.gif", frames=4)
        resource = image_asset(source).resources[0]

        export = exporter.export_gif(resource)

        assert export.url.name == "party.gif"
        assert export.url.read_bytes() == source.read_bytes()
        assert export.file_size == source.stat().st_size

    def test_frames_and_timing_survive(self, exporter, tmp_path: Path):
        source = make_gif(tmp_path / "src" / "anim.gif", frames=3)
        export = exporter.export_gif(image_asset(source).resources[0])

        with Image.open(export.url) as img:
            assert img.n_frames == 3
            assert img.info.get("loop") == 0

    def test_rejects_non_gif(self, exporter, tmp_path: Path):
        source = make_jpeg(tmp_path / "src" / "still.jpg")

        with pytest.raises(ExportError) as exc_info:
            exporter.export_gif(image_asset(source).resources[0])

        assert exc_info.value.code is ExportErrorCode.EXPECTED_ANIMATED_IMAGE_TYPE

    def test_allocation_failure(self, tmp_path: Path):
        allocator = MagicMock()
        allocator.make_local_media_url.side_effect = OSError("full")
        source = make_gif(tmp_path / "a.gif")

        with pytest.raises(ExportError) as exc_info:
            GIFExporter(allocator, LocalResourceProvider()).export_gif(
                image_asset(source).resources[0]
            )

        assert exc_info.value.code is ExportErrorCode.DESTINATION_ALLOCATION_FAILED

    def test_write_failure(self, tmp_path: Path):
        provider = MagicMock()
        provider.write_data.side_effect = OSError("network gone")
        exporter = GIFExporter(LocalMediaDirectory(tmp_path / "media"), provider)
        source = make_gif(tmp_path / "a.gif")

        with pytest.raises(ExportError) as exc_info:
            exporter.export_gif(image_asset(source).resources[0])

        assert exc_info.value.code is ExportErrorCode.ANIMATED_IMAGE_WRITE_FAILED
        assert exc_info.value.description == "The GIF could not be added to the Media Library."
