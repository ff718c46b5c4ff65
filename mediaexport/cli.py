"""CLI with subcommands: export, inspect."""
from __future__ import annotations

import argparse
import sys
from concurrent.futures import as_completed
from pathlib import Path
from typing import Optional

from .core.config import ExportConfiguration, MediaDirectoryType, MediaSettings
from .core.errors import ExportError
from .logging.rich_logger import (
    QuietProgressReporter,
    RichProgressReporter,
    configure_logging,
)


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="mediaexport",
        description="Export photos and videos into a local media directory.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ EXPORT command ============
    export_parser = subparsers.add_parser(
        "export",
        help="Export media files into the media directory",
    )
    export_parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Image or video files to export",
    )
    export_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Media root directory",
    )
    export_parser.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Maximum pixel length of the longer image edge (default: from settings)",
    )
    export_parser.add_argument(
        "--no-resize",
        action="store_true",
        help="Keep images at full resolution",
    )
    export_parser.add_argument(
        "--keep-location",
        action="store_true",
        help="Keep GPS location metadata in exported images",
    )
    export_parser.add_argument(
        "--category",
        type=str,
        choices=[t.value for t in MediaDirectoryType],
        default=MediaDirectoryType.UPLOADS.value,
        help="Destination directory category (default: uploads)",
    )
    export_parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="JSON file with media settings",
    )
    export_parser.add_argument(
        "-w", "--workers",
        dest="workers",
        type=int,
        default=4,
        help="Number of parallel exports (default: 4)",
    )

    # ============ INSPECT command ============
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show how a file would be classified and exported",
    )
    inspect_parser.add_argument(
        "file",
        type=Path,
        help="File to inspect",
    )

    return parser


def build_settings(args: argparse.Namespace) -> MediaSettings:
    """Settings from --settings, with command-line overrides applied."""
    settings = MediaSettings.load(args.settings) if args.settings else MediaSettings()
    max_size = args.max_size if args.max_size is not None else settings.max_image_size
    remove_location = settings.remove_location and not args.keep_location
    return MediaSettings(max_image_size=max_size, remove_location=remove_location)


# ============ Command Handlers ============

def cmd_export(args: argparse.Namespace, reporter) -> int:
    """Handle the export command."""
    from .services.allocator import LocalMediaDirectory
    from .services.exporter import AssetExporter, ExporterDependencies
    from .services.library import media_record_from_export
    from .services.resources import LocalResourceProvider, asset_from_path
    from .services.transcode import FFmpegTranscriptionService

    settings = build_settings(args)
    config = ExportConfiguration.from_settings(
        settings,
        resize_if_needed=not args.no_resize,
        destination_category=MediaDirectoryType(args.category),
    )

    reporter.print_header("mediaexport export")
    reporter.print_config({
        "Files": len(args.files),
        "Output Directory": str(args.output),
        "Category": config.destination_category.value,
        "Max Image Size": config.target_dimension or "unlimited",
        "Remove Location": config.strip_geolocation_if_needed,
    })

    transcription = FFmpegTranscriptionService()
    if not transcription.available:
        reporter.debug("ffmpeg not found, video exports will fail")

    deps = ExporterDependencies(
        provider=LocalResourceProvider(),
        allocator=LocalMediaDirectory(args.output),
        transcription=transcription,
    )

    records = []
    failures = 0
    with AssetExporter(deps, max_workers=args.workers) as exporter:
        futures = {
            exporter.export(asset_from_path(path), config): path
            for path in args.files
        }
        reporter.start_phase("Exporting", total=len(futures))
        try:
            for future in as_completed(futures):
                path = futures[future]
                try:
                    export = future.result()
                except ExportError as e:
                    failures += 1
                    reporter.error(f"{path.name}: {e.description} ({e})")
                else:
                    records.append(media_record_from_export(export))
                    reporter.debug(f"{path.name} -> {export.url}")
                reporter.advance_phase()
        finally:
            reporter.end_phase()

    reporter.print_records(records)
    if failures:
        reporter.warning(f"{failures} of {len(futures)} files failed to export")
    else:
        reporter.success(f"Exported {len(records)} files")
    return 0 if failures == 0 else 1


def cmd_inspect(args: argparse.Namespace, reporter) -> int:
    """Handle the inspect command."""
    from PIL import ExifTags, Image, UnidentifiedImageError

    from .services.resources import asset_from_path
    from .services.transcode import probe_duration

    path: Path = args.file
    if not path.is_file():
        reporter.error(f"File not found: {path}")
        return 1

    asset = asset_from_path(path)
    resource = asset.resources[0]
    info = {
        "File": str(path),
        "Asset Kind": asset.kind.value,
        "Resource Type": resource.type.name,
        "Type Identifier": resource.type.uti,
        "Size": f"{path.stat().st_size} bytes",
    }

    if resource.type.is_image:
        try:
            with Image.open(path) as img:
                info["Dimensions"] = f"{img.width}x{img.height}"
                info["Format"] = img.format
                info["Frames"] = getattr(img, "n_frames", 1)
                gps = img.getexif().get_ifd(ExifTags.IFD.GPSInfo)
                info["Has Location"] = bool(gps)
        except (UnidentifiedImageError, OSError) as e:
            reporter.error(f"Cannot read image {path.name}: {e}")
            return 1
    elif resource.type.is_video:
        duration = probe_duration(path)
        info["Duration"] = f"{duration:.2f}s" if duration is not None else "unknown"
        info["Container"] = resource.type.container_format

    info["Export Route"] = (
        "raw copy" if resource.type.is_animated_image
        else "re-encode" if resource.type.is_image
        else "stream copy" if resource.type.is_video
        else "unsupported"
    )

    reporter.print_header("mediaexport inspect")
    reporter.print_config(info)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Create reporter
    if getattr(args, 'quiet', False):
        reporter = QuietProgressReporter()
    else:
        reporter = RichProgressReporter(verbose=getattr(args, 'verbose', False))
    configure_logging(verbose=getattr(args, 'verbose', False), console=reporter.console)

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to command handler
    try:
        if args.command == "export":
            return cmd_export(args, reporter)
        elif args.command == "inspect":
            return cmd_inspect(args, reporter)
        else:
            reporter.error(f"Unknown command: {args.command}")
            return 1

    except KeyboardInterrupt:
        return 130
    except Exception as e:
        reporter.error(f"Error: {e}")
        if getattr(args, 'verbose', False):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
