"""Asset resource access backed by the local filesystem."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from ..core.models import (
    AssetKind,
    AssetReference,
    AssetResource,
    ResourceKind,
    ResourceType,
)
from ..core.protocols import ResourceRequestOptions

logger = logging.getLogger(__name__)


AUDIO_EXTENSIONS = frozenset({
    ".mp3", ".m4a", ".aac", ".wav", ".flac", ".ogg", ".aiff"
})

_COPY_CHUNK_SIZE = 1024 * 1024


class ResourceUnavailableError(OSError):
    """The resource bytes cannot be reached with the given options."""


class LocalResourceProvider:
    """Serves resource bytes from AssetResource.location.

    Resources flagged as not local stand for bytes that live in remote
    storage; they are refused unless network access is allowed.
    """

    def resources_for(self, asset: AssetReference) -> list[AssetResource]:
        return list(asset.resources)

    def _check_access(self, resource: AssetResource, options: ResourceRequestOptions) -> None:
        if not resource.is_local and not options.network_access_allowed:
            raise ResourceUnavailableError(
                f"{resource.original_filename} is not local and network access is not allowed"
            )
        if not resource.location.is_file():
            raise ResourceUnavailableError(f"Resource data not found: {resource.location}")

    def open_resource(
        self, resource: AssetResource, options: ResourceRequestOptions
    ) -> BinaryIO:
        self._check_access(resource, options)
        return resource.location.open("rb")

    def write_data(
        self,
        resource: AssetResource,
        destination: Path,
        options: ResourceRequestOptions,
    ) -> None:
        """Stream the resource's bytes verbatim into destination."""
        self._check_access(resource, options)
        with resource.location.open("rb") as src, destination.open("wb") as dst:
            shutil.copyfileobj(src, dst, _COPY_CHUNK_SIZE)


def asset_from_path(path: Path) -> AssetReference:
    """Build a single-resource asset for a media file on disk.

    The kind and resource tag come from the file extension.
    """
    resource_type = ResourceType.from_path(path)
    if resource_type.is_image:
        kind, resource_kind = AssetKind.IMAGE, ResourceKind.PHOTO
    elif resource_type.is_video:
        kind, resource_kind = AssetKind.VIDEO, ResourceKind.VIDEO
    elif path.suffix.lower() in AUDIO_EXTENSIONS:
        kind, resource_kind = AssetKind.AUDIO, ResourceKind.AUDIO
    else:
        kind, resource_kind = AssetKind.UNKNOWN, ResourceKind.PHOTO

    resource = AssetResource(
        kind=resource_kind,
        original_filename=path.name,
        type_identifier=resource_type.uti if resource_type is not ResourceType.UNKNOWN else path.suffix,
        location=path,
    )
    logger.debug("Asset for %s: kind=%s type=%s", path, kind.value, resource_type.name)
    return AssetReference(identifier=str(path), kind=kind, resources=(resource,))
