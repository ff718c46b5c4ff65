"""Still image export: decode, optional downscale, metadata scrub, re-encode.

Every entry point ends in export_image_source(), which writes the image in
the same format it was decoded from, at maximum encoder quality.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import ExifTags, Image, PngImagePlugin, UnidentifiedImageError

from ..core.config import MediaDirectoryType
from ..core.errors import ExportError, ExportErrorCode
from ..core.models import ImageExport, ResourceType
from ..core.protocols import DirectoryAllocator

logger = logging.getLogger(__name__)


# Highest value each Pillow encoder accepts for "quality".
MAX_QUALITY = 100

# info keys that are handled explicitly or must not be written back
_RESERVED_INFO_KEYS = frozenset({
    "exif", "icc_profile", "dpi", "xmp", "XML:com.adobe.xmp",
    "jfif", "jfif_version", "jfif_unit", "jfif_density", "adobe",
    "adobe_transform", "progression", "progressive", "mp", "mpoffset",
    "interlace", "gamma", "transparency", "duration", "loop", "background",
})

_TIFF_XMP_TAG = 700

# Primary-IFD tags describing the pixel layout of a TIFF. They belong to the
# written image, not the source, so the encoder must compute them itself.
_TIFF_LAYOUT_TAGS = frozenset({
    254, 255, 256, 257, 258, 259, 262, 266, 273, 277, 278, 279, 284,
    317, 320, 322, 323, 324, 325, 338, 339, 530, 531, 532,
    _TIFF_XMP_TAG,
})

# Lazy decoding can hit any of these once pixels are touched.
_DECODE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)

ImageInput = Union[Path, BinaryIO]


def open_image_source(fp: ImageInput) -> Image.Image:
    """Open an image lazily (header only), wrapping decoder errors."""
    try:
        return Image.open(fp)
    except (UnidentifiedImageError, *_DECODE_ERRORS) as e:
        raise ExportError(ExportErrorCode.SOURCE_CREATION_FAILED, e) from e


def source_type_of(source: Image.Image) -> ResourceType:
    """Resolve the source's format, or fail if it is not recognized."""
    resource_type = ResourceType.from_pil_format(source.format)
    if resource_type is ResourceType.UNKNOWN:
        raise ExportError(
            ExportErrorCode.UNKNOWN_SOURCE_TYPE,
            ValueError(f"Unrecognized image format: {source.format}"),
        )
    return resource_type


def _xmp_mentions_location(xmp: Union[bytes, str]) -> bool:
    text = xmp.decode("utf-8", errors="ignore") if isinstance(xmp, bytes) else xmp
    return "GPS" in text


@dataclass
class ImageSourceWriter:
    """Writes one decoded image source to a file URL.

    Attributes:
        url: Destination file.
        source_type: Format of the source; also the output format.
        lossy_compression_quality: Encoder quality, pinned to maximum.
        nullify_gps_data: Drop the GPS IFD (and location-bearing XMP).
        maximum_size: Longer-edge bound for a downscaled image, or None.
    """
    url: Path
    source_type: ResourceType
    lossy_compression_quality: int = MAX_QUALITY
    nullify_gps_data: bool = False
    maximum_size: Optional[int] = None

    def write(self, source: Image.Image) -> tuple[int, int]:
        """Write source to url and return the written (width, height)."""
        save_options = self._destination_properties(source)

        if self.maximum_size is not None:
            # thumbnail() drafts through the decoder before resampling,
            # so large JPEGs are never decoded at full size.
            try:
                source.thumbnail((self.maximum_size, self.maximum_size))
            except (*_DECODE_ERRORS, MemoryError) as e:
                raise ExportError(ExportErrorCode.THUMBNAIL_GENERATION_FAILED, e) from e
        width, height = source.size

        try:
            handle = self.url.open("wb")
        except OSError as e:
            raise ExportError(ExportErrorCode.DESTINATION_CREATION_FAILED, e) from e

        with handle:
            try:
                source.save(handle, format=self.source_type.pil_format, **save_options)
            except (*_DECODE_ERRORS, KeyError) as e:
                raise ExportError(ExportErrorCode.DESTINATION_WRITE_FAILED, e) from e

        return width, height

    def _destination_properties(self, source: Image.Image) -> dict:
        """Carry source metadata forward, minus location when requested."""
        options: dict = {"quality": self.lossy_compression_quality}

        exif = source.getexif()
        if self.nullify_gps_data and ExifTags.IFD.GPSInfo in exif:
            del exif[ExifTags.IFD.GPSInfo]
        if self.source_type is ResourceType.TIFF:
            # A TIFF's exif is its whole primary IFD, sizes and strips included.
            for tag in _TIFF_LAYOUT_TAGS.intersection(exif):
                del exif[tag]
        if len(exif):
            options["exif"] = exif

        icc_profile = source.info.get("icc_profile")
        if icc_profile:
            options["icc_profile"] = icc_profile

        dpi = source.info.get("dpi")
        if dpi:
            options["dpi"] = dpi

        xmp = source.info.get("xmp") or source.info.get("XML:com.adobe.xmp")
        if xmp and self.nullify_gps_data and _xmp_mentions_location(xmp):
            # The TIFF encoder copies XMP from the source's own tag directories.
            for directory in (getattr(source, "tag_v2", None), getattr(source, "tag", None)):
                if directory is not None and _TIFF_XMP_TAG in directory:
                    del directory[_TIFF_XMP_TAG]
        elif xmp:
            options["xmp"] = xmp

        if self.source_type is ResourceType.PNG:
            pnginfo = PngImagePlugin.PngInfo()
            for key, value in source.info.items():
                if key not in _RESERVED_INFO_KEYS and isinstance(value, str):
                    pnginfo.add_text(key, value)
            options["pnginfo"] = pnginfo

        return options


class ImageExporter:
    """Exports still images to local media URLs.

    Usage:
        exporter = ImageExporter(allocator, maximum_image_size=2000)
        export = exporter.export_image_at(Path("IMG_0001.jpg"))
    """

    default_image_filename = "image"

    def __init__(
        self,
        allocator: DirectoryAllocator,
        maximum_image_size: Optional[int] = None,
        strip_geolocation: bool = True,
        directory_type: MediaDirectoryType = MediaDirectoryType.UPLOADS,
    ):
        self._allocator = allocator
        self.maximum_image_size = maximum_image_size
        self.strip_geolocation = strip_geolocation
        self.directory_type = directory_type

    def export_image(self, image: Image.Image, filename: Optional[str] = None) -> ImageExport:
        """Export an in-memory bitmap, encoded as JPEG first."""
        buffer = io.BytesIO()
        try:
            rgb = image if image.mode in ("RGB", "L", "CMYK") else image.convert("RGB")
            rgb.save(buffer, format="JPEG", quality=MAX_QUALITY)
        except (OSError, ValueError, KeyError) as e:
            raise ExportError(ExportErrorCode.JPEG_REPRESENTATION_FAILED, e) from e
        return self.export_jpeg_data(buffer.getvalue(), filename)

    def export_jpeg_data(self, data: bytes, filename: Optional[str] = None) -> ImageExport:
        """Export encoded image data that must be JPEG."""
        with open_image_source(io.BytesIO(data)) as source:
            resource_type = source_type_of(source)
            if resource_type is not ResourceType.JPEG:
                raise ExportError(
                    ExportErrorCode.UNEXPECTED_SOURCE_FORMAT,
                    ValueError(f"Expected JPEG data, got {source.format}"),
                )
            return self.export_image_source(source, filename, resource_type)

    def export_image_at(self, path: Path) -> ImageExport:
        """Export the image file at path, keeping its format."""
        with open_image_source(path) as source:
            return self.export_image_source(source, path.stem, source_type_of(source))

    def export_image_stream(self, stream: BinaryIO, filename: Optional[str]) -> ImageExport:
        """Export image bytes read from an open binary stream."""
        with open_image_source(stream) as source:
            return self.export_image_source(source, filename, source_type_of(source))

    def export_image_source(
        self,
        source: Image.Image,
        filename: Optional[str],
        resource_type: ResourceType,
    ) -> ImageExport:
        """Write a decoded source to a newly allocated local media URL."""
        stem = Path(filename).stem if filename else self.default_image_filename
        try:
            url = self._allocator.make_local_media_url(
                stem, resource_type.extension, self.directory_type
            )
        except OSError as e:
            raise ExportError(ExportErrorCode.DESTINATION_ALLOCATION_FAILED, e) from e

        writer = ImageSourceWriter(
            url=url,
            source_type=resource_type,
            nullify_gps_data=self.strip_geolocation,
            maximum_size=self.maximum_image_size,
        )
        width, height = writer.write(source)
        logger.debug("Wrote %s (%dx%d, %s)", url, width, height, resource_type.name)

        return ImageExport(
            url=url,
            file_size=url.stat().st_size,
            width=width,
            height=height,
        )
