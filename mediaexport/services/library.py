"""Media library facade - settings in, export out, record handed on.

Maps each export onto the fields a persistence layer stores. Nothing here
writes persistent records itself.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from ..core.config import ExportConfiguration, MediaDirectoryType, MediaSettings
from ..core.errors import ErrorInfo, wrap_error
from ..core.models import (
    AssetExport,
    AssetReference,
    GIFExport,
    ImageExport,
    VideoExport,
)
from ..core.protocols import SettingsProvider
from .exporter import AssetExporter
from .resources import asset_from_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MediaRecord:
    """Fields of a stored media record, as filled from an export."""
    media_type: str
    local_path: Path
    filename: str
    file_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    length: Optional[float] = None  # seconds, videos only


def media_record_from_export(export: AssetExport) -> MediaRecord:
    """Map an export result onto record fields."""
    match export:
        case ImageExport(width=width, height=height):
            return MediaRecord(
                media_type="image",
                local_path=export.url,
                filename=export.url.name,
                file_size=export.file_size,
                width=width,
                height=height,
            )
        case VideoExport(duration=duration):
            return MediaRecord(
                media_type="video",
                local_path=export.url,
                filename=export.url.name,
                file_size=export.file_size,
                length=duration,
            )
        case GIFExport():
            return MediaRecord(
                media_type="image",
                local_path=export.url,
                filename=export.url.name,
                file_size=export.file_size,
            )
    raise TypeError(f"Unknown export type: {type(export).__name__}")


class StaticSettingsProvider:
    """Settings provider returning fixed settings."""

    def __init__(self, settings: Optional[MediaSettings] = None):
        self._settings = settings or MediaSettings()

    def media_settings(self) -> MediaSettings:
        return self._settings


class MediaLibrary:
    """Creates media records from assets, bitmaps or files.

    Settings are read once per call. on_media and on_error run on the
    export worker; callers marshal back to their own thread if needed.
    """

    def __init__(
        self,
        exporter: AssetExporter,
        settings: SettingsProvider,
        directory_type: MediaDirectoryType = MediaDirectoryType.UPLOADS,
    ):
        self._exporter = exporter
        self._settings = settings
        self._directory_type = directory_type

    def _configuration(self) -> ExportConfiguration:
        return ExportConfiguration.from_settings(
            self._settings.media_settings(),
            destination_category=self._directory_type,
        )

    def make_media_with_asset(
        self,
        asset: AssetReference,
        on_media: Callable[[MediaRecord], None],
        on_error: Optional[Callable[[ErrorInfo], None]] = None,
    ) -> Future:
        future = self._exporter.export(asset, self._configuration())
        future.add_done_callback(
            lambda f: self._deliver(f, on_media, on_error, "asset")
        )
        return future

    def make_media_with_image(
        self,
        image: Image.Image,
        on_media: Callable[[MediaRecord], None],
        on_error: Optional[Callable[[ErrorInfo], None]] = None,
    ) -> Future:
        future = self._exporter.export_image(image, self._configuration())
        future.add_done_callback(
            lambda f: self._deliver(f, on_media, on_error, "image")
        )
        return future

    def make_media_with_path(
        self,
        path: Path,
        on_media: Callable[[MediaRecord], None],
        on_error: Optional[Callable[[ErrorInfo], None]] = None,
    ) -> Future:
        return self.make_media_with_asset(asset_from_path(path), on_media, on_error)

    @staticmethod
    def _deliver(
        future: Future,
        on_media: Callable[[MediaRecord], None],
        on_error: Optional[Callable[[ErrorInfo], None]],
        source: str,
    ) -> None:
        error = future.exception()
        if error is None:
            record = media_record_from_export(future.result())
            try:
                on_media(record)
            except Exception:
                logger.exception("Media callback failed for %s %s", source, record.filename)
            return
        info = wrap_error(error).to_error_info()
        logger.error(
            "Error occurred exporting media with %s, code: %d, error: %s",
            source, info.code, info.reason,
        )
        if on_error is not None:
            try:
                on_error(info)
            except Exception:
                logger.exception("Error callback failed for %s, code: %d", source, info.code)
