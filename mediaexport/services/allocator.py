"""Local media directory allocation."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from ..core.config import MediaDirectoryType

logger = logging.getLogger(__name__)


class LocalMediaDirectory:
    """Hands out collision-free file paths under a media root.

    Layout: <root>/<directory_type>/<stem>[-N].<ext>

    A path is reserved by creating the file exclusively, so concurrent
    exports (threads or processes) never share a destination.
    """

    def __init__(self, root: Path, max_attempts: int = 10000):
        """Initialize the allocator.

        Args:
            root: Root directory for all media categories.
            max_attempts: Counter limit when searching for a free name.
        """
        self._root = root
        self._max_attempts = max_attempts
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def directory_for(self, directory_type: MediaDirectoryType) -> Path:
        """Get (and create) the directory for a category."""
        path = self._root / directory_type.value
        path.mkdir(parents=True, exist_ok=True)
        return path

    def make_local_media_url(
        self,
        filename: str,
        extension: Optional[str],
        directory_type: MediaDirectoryType,
    ) -> Path:
        """Reserve a new local path for filename.

        Args:
            filename: Desired name; any directory part is ignored.
            extension: Replaces the filename's suffix when given.
            directory_type: Category bucket.

        Returns:
            Path to a newly created, empty file.

        Raises:
            OSError: If the directory is not writable or no name is free.
        """
        name = Path(filename).name or "file"
        stem = Path(name).stem or "file"
        if extension:
            suffix = "." + extension.lstrip(".").lower()
        else:
            suffix = Path(name).suffix.lower()

        directory = self.directory_for(directory_type)
        with self._lock:
            for counter in range(self._max_attempts):
                base = stem if counter == 0 else f"{stem}-{counter}"
                candidate = directory / f"{base}{suffix}"
                try:
                    with candidate.open("xb"):
                        pass
                except FileExistsError:
                    continue
                logger.debug("Reserved %s", candidate)
                return candidate

        raise OSError(f"No free filename for {name} in {directory}")
