"""Asset export dispatcher - classifies assets and routes to an engine."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from PIL import Image

from ..core.config import ExportConfiguration
from ..core.errors import ExportError, ExportErrorCode, wrap_error
from ..core.models import (
    AssetExport,
    AssetKind,
    AssetReference,
    AssetResource,
    ImageExport,
    ResourceKind,
)
from ..core.protocols import (
    DirectoryAllocator,
    ResourceProvider,
    ResourceRequestOptions,
    VideoTranscriptionService,
)
from ..engines.gif import GIFExporter
from ..engines.image import ImageExporter
from ..engines.video import VideoExporter

logger = logging.getLogger(__name__)


@dataclass
class ExporterDependencies:
    """Collaborators needed by the exporter.

    This is explicitly passed in - no globals or singletons.
    """
    provider: ResourceProvider
    allocator: DirectoryAllocator
    transcription: VideoTranscriptionService


class OneShotCompletion:
    """Delivers exactly one of success or failure, exactly once."""

    def __init__(
        self,
        on_success: Callable[[AssetExport], None],
        on_error: Callable[[ExportError], None],
    ):
        self._on_success = on_success
        self._on_error = on_error
        self._lock = threading.Lock()
        self._delivered = False

    @property
    def delivered(self) -> bool:
        return self._delivered

    def _consume(self) -> None:
        with self._lock:
            if self._delivered:
                raise RuntimeError("Export completion already delivered")
            self._delivered = True

    def succeed(self, export: AssetExport) -> None:
        self._consume()
        self._on_success(export)

    def fail(self, error: ExportError) -> None:
        self._consume()
        self._on_error(error)


def first_resource(resources: list[AssetResource], kind: ResourceKind) -> Optional[AssetResource]:
    """First resource of kind, in provider order."""
    matching = [r for r in resources if r.kind is kind]
    if len(matching) > 1 and len({r.type for r in matching}) > 1:
        logger.warning(
            "Asset has %d %s resources of mixed types (%s); using the first",
            len(matching), kind.value, ", ".join(r.type.name for r in matching),
        )
    return matching[0] if matching else None


class AssetExporter:
    """Exports library assets to local media files.

    Each call runs on a background worker and resolves a Future with an
    ImageExport, VideoExport or GIFExport, or with an ExportError.

    Usage:
        with AssetExporter(deps) as exporter:
            future = exporter.export(asset, ExportConfiguration())
            export = future.result()
    """

    def __init__(
        self,
        deps: ExporterDependencies,
        executor: Optional[Executor] = None,
        max_workers: int = 4,
    ):
        """Initialize the exporter.

        Args:
            deps: Resource provider, allocator and transcription service.
            executor: Worker pool to run exports on. Owned by the caller
                when given; otherwise a thread pool is created.
            max_workers: Size of the created thread pool.
        """
        self._deps = deps
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="asset-export"
        )

    # --- Async entry points ---

    def export(self, asset: AssetReference, config: ExportConfiguration) -> Future:
        """Export on a background worker.

        The returned future is resolved exactly once, with an AssetExport
        or an ExportError.
        """
        return self._executor.submit(self.export_sync, asset, config)

    def export_with_callbacks(
        self,
        asset: AssetReference,
        config: ExportConfiguration,
        on_success: Callable[[AssetExport], None],
        on_error: Callable[[ExportError], None],
    ) -> Future:
        """Export and deliver the outcome to one of two callbacks.

        Callbacks run on the worker thread, not the caller's.
        """
        completion = OneShotCompletion(on_success, on_error)

        def run() -> None:
            try:
                export = self.export_sync(asset, config)
            except ExportError as e:
                completion.fail(e)
                return
            completion.succeed(export)

        return self._executor.submit(run)

    def export_image(
        self,
        image: Image.Image,
        config: ExportConfiguration,
        filename: Optional[str] = None,
    ) -> Future:
        """Export an in-memory bitmap on a background worker."""
        return self._executor.submit(self.export_image_sync, image, config, filename)

    # --- Blocking core ---

    def export_sync(self, asset: AssetReference, config: ExportConfiguration) -> AssetExport:
        """Export on the calling thread.

        Raises:
            ExportError: For every failure; other exceptions are wrapped.
        """
        return self._guarded(asset.identifier, self._dispatch, asset, config)

    def export_image_sync(
        self,
        image: Image.Image,
        config: ExportConfiguration,
        filename: Optional[str] = None,
    ) -> ImageExport:
        return self._guarded(
            filename or "<image>",
            self._image_exporter(config).export_image,
            image,
            filename,
        )

    @staticmethod
    def _guarded(identifier: str, fn: Callable, *args):
        try:
            return fn(*args)
        except ExportError as e:
            logger.error(
                "Error exporting %s, code: %d, error: %s", identifier, e.code.code, e
            )
            raise
        except Exception as e:
            error = wrap_error(e)
            logger.error(
                "Error exporting %s, code: %d, error: %s", identifier, error.code.code, error
            )
            raise error from e

    def _dispatch(self, asset: AssetReference, config: ExportConfiguration) -> AssetExport:
        if not asset.kind.is_supported:
            raise ExportError(
                ExportErrorCode.UNSUPPORTED_ASSET_KIND,
                ValueError(f"Unsupported asset kind: {asset.kind.value}"),
            )
        if asset.kind is AssetKind.IMAGE:
            return self._export_image(asset, config)
        return self._export_video(asset, config)

    def _export_image(self, asset: AssetReference, config: ExportConfiguration) -> AssetExport:
        if asset.kind is not AssetKind.IMAGE:
            raise ExportError(ExportErrorCode.EXPECTED_IMAGE_ASSET)

        resource = first_resource(
            self._deps.provider.resources_for(asset), ResourceKind.PHOTO
        )
        if resource is None:
            raise ExportError(ExportErrorCode.MISSING_IMAGE_RESOURCE)

        if resource.type.is_animated_image:
            logger.debug("Asset %s is an animated image, copying raw resource", asset.identifier)
            return self._gif_exporter(config).export_gif(resource)

        try:
            stream = self._deps.provider.open_resource(
                resource, ResourceRequestOptions(network_access_allowed=True)
            )
        except OSError as e:
            raise ExportError(ExportErrorCode.IMAGE_REQUEST_FAILED, e) from e

        with stream:
            return self._image_exporter(config).export_image_stream(stream, resource.stem)

    def _export_video(self, asset: AssetReference, config: ExportConfiguration) -> AssetExport:
        if asset.kind is not AssetKind.VIDEO:
            raise ExportError(ExportErrorCode.EXPECTED_VIDEO_ASSET)

        resource = first_resource(
            self._deps.provider.resources_for(asset), ResourceKind.VIDEO
        )
        if resource is None:
            raise ExportError(ExportErrorCode.MISSING_VIDEO_RESOURCE)

        return self._video_exporter(config).export_video(asset, resource)

    # --- Engine factories (engines are call-scoped) ---

    def _image_exporter(self, config: ExportConfiguration) -> ImageExporter:
        return ImageExporter(
            self._deps.allocator,
            maximum_image_size=config.target_dimension,
            strip_geolocation=config.strip_geolocation_if_needed,
            directory_type=config.destination_category,
        )

    def _video_exporter(self, config: ExportConfiguration) -> VideoExporter:
        return VideoExporter(
            self._deps.allocator,
            self._deps.transcription,
            directory_type=config.destination_category,
        )

    def _gif_exporter(self, config: ExportConfiguration) -> GIFExporter:
        return GIFExporter(
            self._deps.allocator,
            self._deps.provider,
            directory_type=config.destination_category,
        )

    # --- Lifecycle ---

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "AssetExporter":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()
