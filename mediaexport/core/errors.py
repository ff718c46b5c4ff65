"""Closed export error taxonomy."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


ERROR_DOMAIN = "mediaexport.ExportError"


class ErrorCategory(Enum):
    """User-facing category; each maps to exactly one message."""
    ITEM = "The item could not be added to the Media Library."
    IMAGE = "The image could not be added to the Media Library."
    VIDEO = "The video could not be added to the Media Library."
    GIF = "The GIF could not be added to the Media Library."

    @property
    def message(self) -> str:
        return self.value


class ExportErrorCode(Enum):
    """Every way an export can fail. Value is (code, category)."""
    # Generic
    UNSUPPORTED_ASSET_KIND = (1, ErrorCategory.ITEM)
    DESTINATION_ALLOCATION_FAILED = (2, ErrorCategory.ITEM)
    UNEXPECTED_FAILURE = (3, ErrorCategory.ITEM)
    # Image
    EXPECTED_IMAGE_ASSET = (100, ErrorCategory.IMAGE)
    MISSING_IMAGE_RESOURCE = (101, ErrorCategory.IMAGE)
    IMAGE_REQUEST_FAILED = (102, ErrorCategory.IMAGE)
    JPEG_REPRESENTATION_FAILED = (103, ErrorCategory.IMAGE)
    SOURCE_CREATION_FAILED = (104, ErrorCategory.IMAGE)
    UNKNOWN_SOURCE_TYPE = (105, ErrorCategory.IMAGE)
    UNEXPECTED_SOURCE_FORMAT = (106, ErrorCategory.IMAGE)
    DESTINATION_CREATION_FAILED = (107, ErrorCategory.IMAGE)
    THUMBNAIL_GENERATION_FAILED = (108, ErrorCategory.IMAGE)
    DESTINATION_WRITE_FAILED = (109, ErrorCategory.IMAGE)
    # Video
    EXPECTED_VIDEO_ASSET = (200, ErrorCategory.VIDEO)
    MISSING_VIDEO_RESOURCE = (201, ErrorCategory.VIDEO)
    SESSION_CREATION_FAILED = (202, ErrorCategory.VIDEO)
    SESSION_FAILED = (203, ErrorCategory.VIDEO)
    SESSION_FAILED_WITH_NO_ERROR = (204, ErrorCategory.VIDEO)
    # Animated image
    EXPECTED_ANIMATED_IMAGE_TYPE = (300, ErrorCategory.GIF)
    ANIMATED_IMAGE_WRITE_FAILED = (301, ErrorCategory.GIF)

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def category(self) -> ErrorCategory:
        return self.value[1]


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """Domain + code + message shape for reporting across boundaries."""
    domain: str
    code: int
    message: str
    reason: str


class ExportError(Exception):
    """An export failure, always one of ExportErrorCode."""

    def __init__(self, code: ExportErrorCode, underlying: Optional[BaseException] = None):
        self.code = code
        self.underlying = underlying
        detail = f"{code.name}: {underlying}" if underlying else code.name
        super().__init__(detail)

    @property
    def category(self) -> ErrorCategory:
        return self.code.category

    @property
    def description(self) -> str:
        """User-facing message."""
        return self.code.category.message

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            domain=ERROR_DOMAIN,
            code=self.code.code,
            message=self.description,
            reason=str(self),
        )


def wrap_error(
    exc: BaseException,
    code: ExportErrorCode = ExportErrorCode.UNEXPECTED_FAILURE,
) -> ExportError:
    """Wrap any exception into the taxonomy; ExportErrors pass through."""
    if isinstance(exc, ExportError):
        return exc
    error = ExportError(code, exc)
    error.__cause__ = exc
    return error
