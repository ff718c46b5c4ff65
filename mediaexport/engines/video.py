"""Video export through a passthrough transcription session."""
from __future__ import annotations

import logging
from concurrent.futures import Future

from ..core.config import MediaDirectoryType
from ..core.errors import ExportError, ExportErrorCode
from ..core.models import (
    AssetReference,
    AssetResource,
    ResourceType,
    SessionStatus,
    VideoExport,
)
from ..core.protocols import (
    PRESET_PASSTHROUGH,
    DirectoryAllocator,
    ExportSession,
    VideoRequestOptions,
    VideoTranscriptionService,
)

logger = logging.getLogger(__name__)


class VideoExporter:
    """Exports video resources as a container copy (no re-encode).

    One session per call and no retries. The session reports completion
    through a callback; the calling worker waits on a future for it.
    """

    def __init__(
        self,
        allocator: DirectoryAllocator,
        transcription: VideoTranscriptionService,
        directory_type: MediaDirectoryType = MediaDirectoryType.UPLOADS,
    ):
        self._allocator = allocator
        self._transcription = transcription
        self.directory_type = directory_type

    def export_video(self, asset: AssetReference, resource: AssetResource) -> VideoExport:
        if not resource.type.is_video and resource.type is not ResourceType.UNKNOWN:
            logger.warning(
                "Video resource %s has non-video type %s",
                resource.original_filename, resource.type.name,
            )

        try:
            url = self._allocator.make_local_media_url(
                resource.original_filename, None, self.directory_type
            )
        except OSError as e:
            raise ExportError(ExportErrorCode.DESTINATION_ALLOCATION_FAILED, e) from e

        try:
            session = self._transcription.request_export_session(
                asset,
                resource,
                VideoRequestOptions(network_access_allowed=True),
                PRESET_PASSTHROUGH,
            )
        except Exception as e:
            raise ExportError(ExportErrorCode.SESSION_CREATION_FAILED, e) from e
        if session is None:
            raise ExportError(ExportErrorCode.SESSION_CREATION_FAILED)

        session.should_optimize_for_network_use = True
        session.output_url = url
        session.output_file_type = resource.type.container_format

        finished = self._run_session(session)
        if finished.status is not SessionStatus.COMPLETED:
            if finished.error is not None:
                raise ExportError(ExportErrorCode.SESSION_FAILED, finished.error) from finished.error
            raise ExportError(ExportErrorCode.SESSION_FAILED_WITH_NO_ERROR)

        logger.debug("Exported video %s to %s", asset.identifier, url)
        return VideoExport(
            url=url,
            file_size=finished.estimated_output_file_length,
            duration=finished.max_duration,
        )

    def _run_session(self, session: ExportSession) -> ExportSession:
        done: Future = Future()
        session.export_async(done.set_result)
        return done.result()
