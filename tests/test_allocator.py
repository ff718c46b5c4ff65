"""Tests for local media directory allocation."""
import threading

import pytest
from pathlib import Path

from mediaexport.core.config import MediaDirectoryType
from mediaexport.services.allocator import LocalMediaDirectory


class TestLocalMediaDirectory:
    """Tests for LocalMediaDirectory."""

    @pytest.fixture
    def allocator(self, tmp_path: Path):
        return LocalMediaDirectory(tmp_path / "media")

    def test_reserves_file(self, allocator, tmp_path: Path):
        url = allocator.make_local_media_url("IMG_0001.HEIC", "jpg", MediaDirectoryType.UPLOADS)

        assert url == tmp_path / "media" / "uploads" / "IMG_0001.jpg"
        assert url.exists()
        assert url.stat().st_size == 0

    def test_keeps_own_suffix_without_extension(self, allocator):
        url = allocator.make_local_media_url("clip.MOV", None, MediaDirectoryType.UPLOADS)
        assert url.name == "clip.mov"

    def test_extension_with_dot(self, allocator):
        url = allocator.make_local_media_url("anim", ".GIF", MediaDirectoryType.DRAFTS)
        assert url.name == "anim.gif"
        assert url.parent.name == "drafts"

    def test_collisions_get_counter(self, allocator):
        first = allocator.make_local_media_url("photo.jpg", "jpg", MediaDirectoryType.UPLOADS)
        second = allocator.make_local_media_url("photo.jpg", "jpg", MediaDirectoryType.UPLOADS)
        third = allocator.make_local_media_url("photo.jpg", "jpg", MediaDirectoryType.UPLOADS)

        assert [first.name, second.name, third.name] == ["photo.jpg", "photo-1.jpg", "photo-2.jpg"]

    def test_ignores_directory_part(self, allocator):
        url = allocator.make_local_media_url("../../escape.png", None, MediaDirectoryType.CACHE)
        assert url.parent == allocator.root / "cache"
        assert url.name == "escape.png"

    def test_exhausted(self, tmp_path: Path):
        allocator = LocalMediaDirectory(tmp_path, max_attempts=2)
        allocator.make_local_media_url("a.jpg", None, MediaDirectoryType.UPLOADS)
        allocator.make_local_media_url("a.jpg", None, MediaDirectoryType.UPLOADS)

        with pytest.raises(OSError, match="No free filename"):
            allocator.make_local_media_url("a.jpg", None, MediaDirectoryType.UPLOADS)

    def test_unwritable_root(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        allocator = LocalMediaDirectory(blocker)

        with pytest.raises(OSError):
            allocator.make_local_media_url("a.jpg", None, MediaDirectoryType.UPLOADS)

    def test_concurrent_reservations_distinct(self, allocator):
        urls = []
        lock = threading.Lock()

        def reserve():
            url = allocator.make_local_media_url("same.jpg", None, MediaDirectoryType.UPLOADS)
            with lock:
                urls.append(url)

        threads = [threading.Thread(target=reserve) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(urls) == 16
        assert len(set(urls)) == 16
