"""Core domain models, errors and protocols."""
from .protocols import (
    ResourceProvider,
    DirectoryAllocator,
    ExportSession,
    VideoTranscriptionService,
    SettingsProvider,
    ResourceRequestOptions,
    VideoRequestOptions,
)
from .models import (
    AssetKind,
    ResourceKind,
    ResourceType,
    AssetResource,
    AssetReference,
    SessionStatus,
    ExportKind,
    ImageExport,
    VideoExport,
    GIFExport,
    AssetExport,
    export_base,
)
from .errors import ErrorCategory, ErrorInfo, ExportError, ExportErrorCode, wrap_error
from .config import ExportConfiguration, MediaDirectoryType, MediaSettings

__all__ = [
    # Protocols
    "ResourceProvider",
    "DirectoryAllocator",
    "ExportSession",
    "VideoTranscriptionService",
    "SettingsProvider",
    "ResourceRequestOptions",
    "VideoRequestOptions",
    # Models
    "AssetKind",
    "ResourceKind",
    "ResourceType",
    "AssetResource",
    "AssetReference",
    "SessionStatus",
    "ExportKind",
    "ImageExport",
    "VideoExport",
    "GIFExport",
    "AssetExport",
    "export_base",
    # Errors
    "ErrorCategory",
    "ErrorInfo",
    "ExportError",
    "ExportErrorCode",
    "wrap_error",
    # Config
    "ExportConfiguration",
    "MediaDirectoryType",
    "MediaSettings",
]
