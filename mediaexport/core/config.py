"""Configuration dataclasses with validation."""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class MediaDirectoryType(Enum):
    """Logical directory bucket for exported files."""
    UPLOADS = "uploads"
    DRAFTS = "drafts"
    TEMPORARY = "temporary"
    CACHE = "cache"


@dataclass(frozen=True, slots=True)
class MediaSettings:
    """User-level media settings, read once per export call.

    max_image_size of None means uploads are not size-limited.
    """
    max_image_size: Optional[int] = 2000
    remove_location: bool = True

    def __post_init__(self) -> None:
        if self.max_image_size is not None and self.max_image_size < 1:
            raise ValueError(f"max_image_size must be positive: {self.max_image_size}")

    @classmethod
    def from_dict(cls, data: dict) -> "MediaSettings":
        return cls(
            max_image_size=data.get("max_image_size", 2000),
            remove_location=bool(data.get("remove_location", True)),
        )

    @classmethod
    def load(cls, path: Path) -> "MediaSettings":
        """Load settings from a JSON file."""
        with path.open("r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


@dataclass(frozen=True, slots=True)
class ExportConfiguration:
    """Immutable per-call export settings."""
    resize_if_needed: bool = True
    maximum_dimension: Optional[int] = None  # Longer edge, pixels
    strip_geolocation_if_needed: bool = True
    destination_category: MediaDirectoryType = MediaDirectoryType.UPLOADS

    def __post_init__(self) -> None:
        if self.maximum_dimension is not None and self.maximum_dimension < 1:
            raise ValueError(
                f"maximum_dimension must be a positive number: {self.maximum_dimension}"
            )

    @property
    def target_dimension(self) -> Optional[int]:
        """Pixel bound for the longer edge, or None to keep full resolution."""
        if self.resize_if_needed and self.maximum_dimension is not None:
            return self.maximum_dimension
        return None

    @classmethod
    def from_settings(
        cls,
        settings: MediaSettings,
        resize_if_needed: bool = True,
        destination_category: MediaDirectoryType = MediaDirectoryType.UPLOADS,
    ) -> "ExportConfiguration":
        return cls(
            resize_if_needed=resize_if_needed,
            maximum_dimension=settings.max_image_size,
            strip_geolocation_if_needed=settings.remove_location,
            destination_category=destination_category,
        )
