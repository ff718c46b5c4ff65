"""Media export package.

Turns library assets into local media files ready for upload: images are
re-encoded (resized, location stripped), videos are stream-copied and GIFs
are copied byte for byte.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import ExportConfiguration, MediaDirectoryType, MediaSettings
from .core.errors import ErrorCategory, ErrorInfo, ExportError, ExportErrorCode
from .core.models import (
    AssetExport,
    AssetKind,
    AssetReference,
    AssetResource,
    GIFExport,
    ImageExport,
    ResourceKind,
    ResourceType,
    VideoExport,
)

# Engine exports
from .engines.image import ImageExporter
from .engines.video import VideoExporter
from .engines.gif import GIFExporter

# Service exports
from .services.allocator import LocalMediaDirectory
from .services.exporter import AssetExporter, ExporterDependencies
from .services.library import MediaLibrary, MediaRecord
from .services.resources import LocalResourceProvider, asset_from_path
from .services.transcode import FFmpegTranscriptionService

# Logging exports
from .logging.rich_logger import RichProgressReporter

__all__ = [
    # Core
    "ExportConfiguration",
    "MediaDirectoryType",
    "MediaSettings",
    "ErrorCategory",
    "ErrorInfo",
    "ExportError",
    "ExportErrorCode",
    "AssetExport",
    "AssetKind",
    "AssetReference",
    "AssetResource",
    "GIFExport",
    "ImageExport",
    "ResourceKind",
    "ResourceType",
    "VideoExport",
    # Engines
    "ImageExporter",
    "VideoExporter",
    "GIFExporter",
    # Services
    "LocalMediaDirectory",
    "AssetExporter",
    "ExporterDependencies",
    "MediaLibrary",
    "MediaRecord",
    "LocalResourceProvider",
    "asset_from_path",
    "FFmpegTranscriptionService",
    # Logging
    "RichProgressReporter",
]
