"""Service layer - export dispatch and local collaborators."""
from .allocator import LocalMediaDirectory
from .resources import LocalResourceProvider, ResourceUnavailableError, asset_from_path
from .transcode import FFmpegExportSession, FFmpegTranscriptionService, SessionError
from .exporter import AssetExporter, ExporterDependencies, OneShotCompletion
from .library import MediaLibrary, MediaRecord, StaticSettingsProvider, media_record_from_export

__all__ = [
    # Local collaborators
    "LocalMediaDirectory",
    "LocalResourceProvider",
    "ResourceUnavailableError",
    "asset_from_path",
    "FFmpegExportSession",
    "FFmpegTranscriptionService",
    "SessionError",
    # Export
    "AssetExporter",
    "ExporterDependencies",
    "OneShotCompletion",
    # Library
    "MediaLibrary",
    "MediaRecord",
    "StaticSettingsProvider",
    "media_record_from_export",
]
