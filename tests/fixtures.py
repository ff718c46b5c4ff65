"""Test fixtures for export tests.

Helpers that write Pillow-generated media to disk, plus fake video
sessions for the transcription paths.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from PIL import ExifTags, Image

from mediaexport.core.models import (
    AssetKind,
    AssetReference,
    AssetResource,
    ResourceKind,
    SessionStatus,
)

CAMERA_MAKE = "TestCam"
GPS_DATA = {
    ExifTags.GPS.GPSLatitudeRef: "N",
    ExifTags.GPS.GPSLongitudeRef: "E",
}


def make_exif(with_gps: bool = True) -> Image.Exif:
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = CAMERA_MAKE
    if with_gps:
        exif[ExifTags.IFD.GPSInfo] = dict(GPS_DATA)
    return exif


def make_jpeg(
    path: Path,
    size: tuple[int, int] = (64, 48),
    with_gps: bool = False,
    color: tuple[int, int, int] = (200, 30, 30),
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color=color)
    img.save(path, "JPEG", quality=90, exif=make_exif(with_gps))
    return path


def make_png(path: Path, size: tuple[int, int] = (40, 30)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color=(0, 128, 255, 200)).save(path, "PNG")
    return path


LOCATION_XMP = (
    b'<x:xmpmeta xmlns:x="adobe:ns:meta/"><rdf:RDF>'
    b"<exif:GPSLatitude>48,51.0N</exif:GPSLatitude>"
    b"</rdf:RDF></x:xmpmeta>"
)


def make_tiff(
    path: Path,
    size: tuple[int, int] = (400, 300),
    xmp: Optional[bytes] = None,
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    tiffinfo = {700: xmp} if xmp is not None else {}
    Image.new("RGB", size, color=(90, 160, 40)).save(path, "TIFF", tiffinfo=tiffinfo)
    return path


def make_gif(path: Path, frames: int = 3, size: tuple[int, int] = (16, 16)) -> Path:
    """Write an animated GIF with distinct frame colors and timing."""
    path.parent.mkdir(parents=True, exist_ok=True)
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
    images = [Image.new("RGB", size, color=colors[i % len(colors)]) for i in range(frames)]
    images[0].save(
        path,
        "GIF",
        save_all=True,
        append_images=images[1:],
        duration=[100 + 10 * i for i in range(frames)],
        loop=0,
    )
    return path


def make_video_file(path: Path, payload: bytes = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64) -> Path:
    """Write bytes standing in for a video; only fake sessions read them."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


def image_asset(*paths: Path, identifier: str = "image-asset") -> AssetReference:
    resources = tuple(
        AssetResource(
            kind=ResourceKind.PHOTO,
            original_filename=p.name,
            type_identifier=p.suffix,
            location=p,
        )
        for p in paths
    )
    return AssetReference(identifier=identifier, kind=AssetKind.IMAGE, resources=resources)


def video_asset(path: Path, identifier: str = "video-asset") -> AssetReference:
    resource = AssetResource(
        kind=ResourceKind.VIDEO,
        original_filename=path.name,
        type_identifier=path.suffix,
        location=path,
    )
    return AssetReference(identifier=identifier, kind=AssetKind.VIDEO, resources=(resource,))


@dataclass
class FakeExportSession:
    """Session that finishes with a preset outcome.

    On COMPLETED it copies the source bytes to output_url. Completion is
    reported from a separate thread, like a real session.
    """
    source: Path
    outcome: SessionStatus = SessionStatus.COMPLETED
    outcome_error: Optional[BaseException] = None
    duration: Optional[float] = 3.5

    status: SessionStatus = SessionStatus.WAITING
    error: Optional[BaseException] = None
    output_url: Optional[Path] = None
    output_file_type: Optional[str] = None
    should_optimize_for_network_use: bool = False
    started: int = 0
    cancelled: bool = False

    @property
    def estimated_output_file_length(self) -> Optional[int]:
        if self.output_url is None or not self.output_url.exists():
            return None
        return self.output_url.stat().st_size

    @property
    def max_duration(self) -> Optional[float]:
        return self.duration

    def export_async(self, on_done: Callable) -> None:
        self.started += 1
        self.status = SessionStatus.EXPORTING

        def finish() -> None:
            if self.outcome is SessionStatus.COMPLETED:
                self.output_url.write_bytes(self.source.read_bytes())
            self.status = self.outcome
            self.error = self.outcome_error
            on_done(self)

        threading.Thread(target=finish, daemon=True).start()

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeTranscriptionService:
    """Hands out FakeExportSessions and records every request."""
    outcome: SessionStatus = SessionStatus.COMPLETED
    outcome_error: Optional[BaseException] = None
    create_error: Optional[BaseException] = None
    return_none: bool = False
    requests: list = field(default_factory=list)
    sessions: list = field(default_factory=list)

    def request_export_session(self, asset, resource, options, preset):
        self.requests.append((asset, resource, options, preset))
        if self.create_error is not None:
            raise self.create_error
        if self.return_none:
            return None
        session = FakeExportSession(
            source=resource.location,
            outcome=self.outcome,
            outcome_error=self.outcome_error,
        )
        self.sessions.append(session)
        return session
