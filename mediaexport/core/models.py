"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class AssetKind(Enum):
    """Media type of a library asset."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"

    @property
    def is_supported(self) -> bool:
        return self in (AssetKind.IMAGE, AssetKind.VIDEO)


class ResourceKind(Enum):
    """Role of a resource within its asset."""
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    ALTERNATE_PHOTO = "alternate_photo"
    PAIRED_VIDEO = "paired_video"
    ADJUSTMENT_DATA = "adjustment_data"


# identifier -> ResourceType name; UTIs, MIME types and extensions
_TYPE_IDENTIFIERS = {
    "public.jpeg": "JPEG", "image/jpeg": "JPEG", "jpg": "JPEG", "jpeg": "JPEG",
    "public.png": "PNG", "image/png": "PNG", "png": "PNG",
    "com.compuserve.gif": "GIF", "image/gif": "GIF", "gif": "GIF",
    "public.heic": "HEIC", "public.heif": "HEIC", "image/heic": "HEIC",
    "image/heif": "HEIC", "heic": "HEIC", "heif": "HEIC",
    "public.tiff": "TIFF", "image/tiff": "TIFF", "tif": "TIFF", "tiff": "TIFF",
    "org.webmproject.webp": "WEBP", "public.webp": "WEBP", "image/webp": "WEBP",
    "webp": "WEBP",
    "com.microsoft.bmp": "BMP", "image/bmp": "BMP", "bmp": "BMP",
    "public.mpeg-4": "MPEG4", "video/mp4": "MPEG4", "mp4": "MPEG4",
    "com.apple.quicktime-movie": "QUICKTIME", "video/quicktime": "QUICKTIME",
    "mov": "QUICKTIME", "qt": "QUICKTIME",
    "com.apple.m4v-video": "M4V", "video/x-m4v": "M4V", "m4v": "M4V",
}

# Pillow format name -> ResourceType name
_PIL_FORMATS = {
    "JPEG": "JPEG", "MPO": "JPEG", "PNG": "PNG", "GIF": "GIF",
    "TIFF": "TIFF", "WEBP": "WEBP", "BMP": "BMP", "HEIF": "HEIC",
}


class ResourceType(Enum):
    """Typed format of a resource, resolved once from its type identifier.

    Value is (uti, extension, pil_format, container_format).
    """
    JPEG = ("public.jpeg", "jpg", "JPEG", None)
    PNG = ("public.png", "png", "PNG", None)
    GIF = ("com.compuserve.gif", "gif", "GIF", None)
    HEIC = ("public.heic", "heic", "HEIF", None)
    TIFF = ("public.tiff", "tiff", "TIFF", None)
    WEBP = ("org.webmproject.webp", "webp", "WEBP", None)
    BMP = ("com.microsoft.bmp", "bmp", "BMP", None)
    MPEG4 = ("public.mpeg-4", "mp4", None, "mp4")
    QUICKTIME = ("com.apple.quicktime-movie", "mov", None, "mov")
    M4V = ("com.apple.m4v-video", "m4v", None, "ipod")
    UNKNOWN = ("public.data", None, None, None)

    @property
    def uti(self) -> str:
        return self.value[0]

    @property
    def extension(self) -> Optional[str]:
        return self.value[1]

    @property
    def pil_format(self) -> Optional[str]:
        return self.value[2]

    @property
    def container_format(self) -> Optional[str]:
        """ffmpeg muxer name for video types."""
        return self.value[3]

    @property
    def is_image(self) -> bool:
        return self.pil_format is not None

    @property
    def is_video(self) -> bool:
        return self.container_format is not None

    @property
    def is_animated_image(self) -> bool:
        return self is ResourceType.GIF

    @classmethod
    def from_identifier(cls, identifier: Optional[str]) -> "ResourceType":
        """Resolve a UTI, MIME type or filename extension."""
        if not identifier:
            return cls.UNKNOWN
        key = identifier.strip().lower().lstrip(".")
        name = _TYPE_IDENTIFIERS.get(key)
        return cls[name] if name else cls.UNKNOWN

    @classmethod
    def from_pil_format(cls, pil_format: Optional[str]) -> "ResourceType":
        name = _PIL_FORMATS.get((pil_format or "").upper())
        return cls[name] if name else cls.UNKNOWN

    @classmethod
    def from_path(cls, path: Path) -> "ResourceType":
        return cls.from_identifier(path.suffix)


@dataclass(frozen=True, slots=True)
class AssetResource:
    """One raw data stream of an asset."""
    kind: ResourceKind
    original_filename: str
    type_identifier: str
    location: Path
    is_local: bool = True
    type: ResourceType = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ResourceType.from_identifier(self.type_identifier))

    @property
    def stem(self) -> str:
        return Path(self.original_filename).stem


@dataclass(frozen=True, slots=True)
class AssetReference:
    """Opaque handle to a library asset."""
    identifier: str
    kind: AssetKind
    resources: tuple[AssetResource, ...] = field(default_factory=tuple)


class SessionStatus(Enum):
    """Lifecycle of a video export session."""
    UNKNOWN = "unknown"
    WAITING = "waiting"
    EXPORTING = "exporting"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.FAILED, SessionStatus.CANCELLED)


class ExportKind(Enum):
    """Tag of an export result."""
    IMAGE = "image"
    VIDEO = "video"
    GIF = "gif"


@dataclass(frozen=True, slots=True)
class ImageExport:
    """Still image written to a local media URL."""
    url: Path
    file_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    kind: ExportKind = field(default=ExportKind.IMAGE, init=False)


@dataclass(frozen=True, slots=True)
class VideoExport:
    """Video copied to a local media URL."""
    url: Path
    file_size: Optional[int] = None
    duration: Optional[float] = None  # seconds
    kind: ExportKind = field(default=ExportKind.VIDEO, init=False)


@dataclass(frozen=True, slots=True)
class GIFExport:
    """Animated image copied byte-for-byte to a local media URL."""
    url: Path
    file_size: Optional[int] = None
    kind: ExportKind = field(default=ExportKind.GIF, init=False)


AssetExport = Union[ImageExport, VideoExport, GIFExport]


def export_base(export: AssetExport) -> tuple[Path, Optional[int]]:
    """Shared (url, file_size) fields of any export variant."""
    return export.url, export.file_size
