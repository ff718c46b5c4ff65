"""Video export sessions backed by ffmpeg stream copy.

A session copies the source streams into a new container without
re-encoding (the "passthrough" preset). Completion is reported through a
callback fired from the session's own worker thread.
"""
from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import threading
from pathlib import Path
from typing import Callable, Optional

from ..core.models import AssetReference, AssetResource, SessionStatus
from ..core.protocols import PRESET_PASSTHROUGH, VideoRequestOptions

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    """Raised when a session cannot be created or its export fails."""


def _subprocess_kwargs() -> dict:
    """Platform-specific subprocess kwargs to hide console windows on Windows."""
    kwargs = {}
    if sys.platform == 'win32':
        kwargs['creationflags'] = subprocess.CREATE_NO_WINDOW
    return kwargs


def probe_duration(source: Path) -> Optional[float]:
    """Container duration in seconds via ffprobe, or None if unknown."""
    if shutil.which("ffprobe") is None:
        return None
    cmd = [
        "ffprobe",
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(source),
    ]
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
            text=True,
            **_subprocess_kwargs(),
        )
    except (subprocess.CalledProcessError, OSError) as e:
        logger.debug("ffprobe failed for %s: %s", source, e)
        return None
    try:
        return float(proc.stdout.strip())
    except ValueError:
        return None


class FFmpegExportSession:
    """One ffmpeg stream-copy run.

    Status moves WAITING -> EXPORTING -> COMPLETED | FAILED | CANCELLED.
    The session runs at most once.
    """

    def __init__(self, source: Path, ffmpeg: str = "ffmpeg"):
        self._source = source
        self._ffmpeg = ffmpeg
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()
        self._started = False
        self._cancel_requested = False

        self.status = SessionStatus.WAITING
        self.error: Optional[BaseException] = None
        self.output_url: Optional[Path] = None
        self.output_file_type: Optional[str] = None
        self.should_optimize_for_network_use = False

    @property
    def estimated_output_file_length(self) -> Optional[int]:
        """Stream copy keeps the payload, so the source size is a close estimate."""
        try:
            return self._source.stat().st_size
        except OSError:
            return None

    @property
    def max_duration(self) -> Optional[float]:
        return probe_duration(self._source)

    def build_command(self) -> list[str]:
        if self.output_url is None:
            raise SessionError("Export session has no output URL")
        cmd = [
            self._ffmpeg,
            "-y",
            "-loglevel", "error",
            "-i", str(self._source),
            "-map", "0",
            "-c", "copy",
            "-map_metadata", "0",
        ]
        if self.should_optimize_for_network_use:
            cmd.extend(["-movflags", "+faststart"])
        if self.output_file_type:
            cmd.extend(["-f", self.output_file_type])
        cmd.append(str(self.output_url))
        return cmd

    def export_async(self, on_done: Callable[["FFmpegExportSession"], None]) -> None:
        """Start the export on a worker thread; on_done fires exactly once."""
        with self._lock:
            if self._started:
                raise SessionError("Export session already started")
            self._started = True
            if self._cancel_requested:
                self.status = SessionStatus.CANCELLED
                cancelled = True
            else:
                self.status = SessionStatus.EXPORTING
                cancelled = False

        if cancelled:
            on_done(self)
            return

        worker = threading.Thread(
            target=self._run,
            args=(on_done,),
            name=f"ffmpeg-export-{self._source.name}",
            daemon=True,
        )
        worker.start()

    def _run(self, on_done: Callable[["FFmpegExportSession"], None]) -> None:
        try:
            cmd = self.build_command()
            logger.debug("Running %s", " ".join(cmd))
            with self._lock:
                self._process = subprocess.Popen(
                    cmd,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                    **_subprocess_kwargs(),
                )
            _, stderr = self._process.communicate()
            with self._lock:
                if self._cancel_requested:
                    self.status = SessionStatus.CANCELLED
                elif self._process.returncode == 0:
                    self.status = SessionStatus.COMPLETED
                else:
                    self.status = SessionStatus.FAILED
                    self.error = SessionError(
                        f"ffmpeg failed for {self._source}: "
                        f"{stderr.decode(errors='ignore').strip()}"
                    )
        except Exception as e:
            with self._lock:
                self.status = SessionStatus.FAILED
                self.error = e
        finally:
            self._process = None
        on_done(self)

    def cancel(self) -> None:
        """Request cancellation; a running ffmpeg process is terminated.

        Cancelling a finished session does nothing.
        """
        with self._lock:
            if self.status.is_finished:
                return
            self._cancel_requested = True
            if self._process is not None and self._process.poll() is None:
                self._process.terminate()
            elif not self._started:
                self.status = SessionStatus.CANCELLED


class FFmpegTranscriptionService:
    """Creates ffmpeg passthrough sessions for video resources."""

    def __init__(self, ffmpeg: str = "ffmpeg"):
        self._ffmpeg = ffmpeg

    @property
    def available(self) -> bool:
        return shutil.which(self._ffmpeg) is not None

    def request_export_session(
        self,
        asset: AssetReference,
        resource: AssetResource,
        options: VideoRequestOptions,
        preset: str,
    ) -> FFmpegExportSession:
        """Create a session for resource.

        Raises:
            SessionError: Unsupported preset, ffmpeg missing, or the
                resource cannot be reached.
        """
        if preset != PRESET_PASSTHROUGH:
            raise SessionError(f"Unsupported export preset: {preset}")
        if not self.available:
            raise SessionError("ffmpeg not found on PATH")
        if not resource.is_local and not options.network_access_allowed:
            raise SessionError(
                f"{resource.original_filename} is not local and network access is not allowed"
            )
        if not resource.location.is_file():
            raise SessionError(f"Video data not found for {asset.identifier}: {resource.location}")
        return FFmpegExportSession(resource.location, ffmpeg=self._ffmpeg)
