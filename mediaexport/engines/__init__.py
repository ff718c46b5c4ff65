"""Image, video and GIF export engines."""
from .image import ImageExporter, ImageSourceWriter
from .video import VideoExporter
from .gif import GIFExporter

__all__ = [
    "ImageExporter",
    "ImageSourceWriter",
    "VideoExporter",
    "GIFExporter",
]
