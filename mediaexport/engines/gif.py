"""Animated image export: the original resource bytes, copied verbatim."""
from __future__ import annotations

import logging

from ..core.config import MediaDirectoryType
from ..core.errors import ExportError, ExportErrorCode
from ..core.models import AssetResource, GIFExport, ResourceType
from ..core.protocols import DirectoryAllocator, ResourceProvider, ResourceRequestOptions

logger = logging.getLogger(__name__)


class GIFExporter:
    """Copies animated image resources without decoding them.

    Frames, timing and loop count survive only because the bytes are
    never re-encoded.
    """

    def __init__(
        self,
        allocator: DirectoryAllocator,
        provider: ResourceProvider,
        directory_type: MediaDirectoryType = MediaDirectoryType.UPLOADS,
    ):
        self._allocator = allocator
        self._provider = provider
        self.directory_type = directory_type

    def export_gif(self, resource: AssetResource) -> GIFExport:
        if not resource.type.is_animated_image:
            raise ExportError(
                ExportErrorCode.EXPECTED_ANIMATED_IMAGE_TYPE,
                ValueError(f"Resource type is {resource.type.name}, not GIF"),
            )

        try:
            url = self._allocator.make_local_media_url(
                resource.original_filename,
                ResourceType.GIF.extension,
                self.directory_type,
            )
        except OSError as e:
            raise ExportError(ExportErrorCode.DESTINATION_ALLOCATION_FAILED, e) from e

        try:
            self._provider.write_data(
                resource, url, ResourceRequestOptions(network_access_allowed=True)
            )
            file_size = url.stat().st_size
        except OSError as e:
            raise ExportError(ExportErrorCode.ANIMATED_IMAGE_WRITE_FAILED, e) from e

        logger.debug("Copied %s to %s (%d bytes)", resource.original_filename, url, file_size)
        return GIFExport(url=url, file_size=file_size)
