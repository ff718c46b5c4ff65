"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Protocol

from .config import MediaDirectoryType, MediaSettings
from .models import AssetReference, AssetResource, SessionStatus


PRESET_PASSTHROUGH = "passthrough"


@dataclass(frozen=True, slots=True)
class ResourceRequestOptions:
    """Options for reading a resource's bytes."""
    network_access_allowed: bool = True


@dataclass(frozen=True, slots=True)
class VideoRequestOptions:
    """Options for requesting a video export session."""
    network_access_allowed: bool = True


class ResourceProvider(Protocol):
    """Supplies the raw resources of library assets."""

    @abstractmethod
    def resources_for(self, asset: AssetReference) -> list[AssetResource]:
        """Resources of an asset, in provider order."""
        ...

    @abstractmethod
    def open_resource(
        self, resource: AssetResource, options: ResourceRequestOptions
    ) -> BinaryIO:
        """Open a binary stream over the resource's bytes."""
        ...

    @abstractmethod
    def write_data(
        self,
        resource: AssetResource,
        destination: Path,
        options: ResourceRequestOptions,
    ) -> None:
        """Write the resource's bytes verbatim to destination."""
        ...


class DirectoryAllocator(Protocol):
    """Issues collision-free, writable local media paths."""

    @abstractmethod
    def make_local_media_url(
        self,
        filename: str,
        extension: Optional[str],
        directory_type: MediaDirectoryType,
    ) -> Path:
        """Reserve a new path for filename.

        extension replaces the filename's own suffix when given.
        """
        ...


class ExportSession(Protocol):
    """A single passthrough transcription of a video."""

    status: SessionStatus
    error: Optional[BaseException]
    output_url: Optional[Path]
    output_file_type: Optional[str]
    should_optimize_for_network_use: bool

    @property
    @abstractmethod
    def estimated_output_file_length(self) -> Optional[int]:
        ...

    @property
    @abstractmethod
    def max_duration(self) -> Optional[float]:
        ...

    @abstractmethod
    def export_async(self, on_done: Callable[["ExportSession"], None]) -> None:
        """Start exporting; on_done is called once when the session ends."""
        ...

    @abstractmethod
    def cancel(self) -> None:
        ...


class VideoTranscriptionService(Protocol):
    """Creates export sessions for video assets."""

    @abstractmethod
    def request_export_session(
        self,
        asset: AssetReference,
        resource: AssetResource,
        options: VideoRequestOptions,
        preset: str,
    ) -> ExportSession:
        """Create a session, or raise if one cannot be created."""
        ...


class SettingsProvider(Protocol):
    """Supplies current media settings."""

    @abstractmethod
    def media_settings(self) -> MediaSettings:
        ...
