#!/usr/bin/env python3
"""
Media Normalizer - Infer tags from folder layout and tidy an audio library.

Usage:
    python -m media_normalizer /path/to/music [options]
"""

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from media_normalizer.config import (
    eprint, load_settings, setup_logging, validate_settings
)
from media_normalizer.errors import UnsupportedPathError
from media_normalizer.models import (
    FieldMode, JobDescriptor, ProcessingStats, parse_field_mode
)
from media_normalizer.organizer import LibraryOrganizer
from media_normalizer.traversal import TraversalEngine


def field_mode(text: str) -> FieldMode:
    """argparse type for --artist/--album/--title."""
    try:
        return parse_field_mode(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser."""
    parser = argparse.ArgumentParser(
        description="Media normalizer: infer artist/album/title tags from "
                    "folder and file names, repair broken files with ffmpeg, "
                    "and reorganize the library.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Retag everything under artist/album folders
  python -m media_normalizer /path/to/music

  # Force the artist, keep existing album tags
  python -m media_normalizer /path/to/music --artist default=Shadows --album disable

  # Expand zips, delete them afterwards, and clean out non-audio files
  python -m media_normalizer /path/to/downloads --remove-archives --remove-other-files

  # Sort files into album folders using their existing album tag
  python -m media_normalizer /path/to/music --organize
"""
    )

    # Required arguments
    parser.add_argument(
        "path",
        help="Path to audio file, archive or folder to process"
    )

    # Tag handling
    for name in ("artist", "album", "title"):
        parser.add_argument(
            f"--{name}",
            type=field_mode,
            default=FieldMode.auto(),
            metavar="MODE",
            help=f"How to set the {name} tag: disable, auto, or default=<value> "
                 "(default: auto)"
        )

    # File handling
    parser.add_argument(
        "--remove-other-files",
        action="store_true",
        help="Delete files that are neither audio nor archives"
    )

    parser.add_argument(
        "--remove-archives",
        action="store_true",
        help="Delete archives after extracting them"
    )

    parser.add_argument(
        "--move-to-parent",
        action="store_true",
        help="Move retagged files up one folder, out of their album folder"
    )

    parser.add_argument(
        "--organize",
        action="store_true",
        help="Move files into album folders based on their existing album tag "
             "instead of retagging"
    )

    # Configuration
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: ./.env)"
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Worker threads per folder (default: executor default)"
    )

    parser.add_argument(
        "--ffmpeg",
        help="Path to the ffmpeg binary used for repairs"
    )

    # Verbosity
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug output"
    )

    parser.add_argument(
        "--log-file",
        help="Also write a debug log to this file"
    )

    return parser


def build_job(args: argparse.Namespace) -> JobDescriptor:
    """Turn parsed CLI arguments into the root job."""
    return JobDescriptor(
        target_path=Path(args.path),
        artist_mode=args.artist,
        album_mode=args.album,
        title_mode=args.title,
        delete_unrecognized=args.remove_other_files,
        delete_archive_after_extract=args.remove_archives,
        flatten_to_grandparent=args.move_to_parent,
        retag=not args.organize,
    )


def show_summary(stats: ProcessingStats, retag: bool) -> None:
    """Print the run summary."""
    print("\n=== Summary ===")
    if retag:
        print(f"Files retagged: {stats.files_retagged}")
        print(f"Files repaired: {stats.files_repaired}")
        print(f"Archives expanded: {stats.archives_expanded}")
        print(f"Archives skipped: {stats.archives_skipped}")
        print(f"Files deleted: {stats.files_deleted}")
    print(f"Files moved: {stats.files_moved}")
    print(f"Files skipped: {stats.files_skipped}")
    print(f"Errors: {len(stats.errors)}")
    if stats.has_errors:
        for error in stats.errors:
            print(f"  - {error}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate path
    if not os.path.exists(args.path):
        parser.error(f"Path does not exist: {args.path}")

    if args.workers is not None and args.workers <= 0:
        parser.error("--workers must be positive")

    logger = setup_logging(args.verbose, args.log_file)

    settings = load_settings(args.env_file)
    if args.workers is not None:
        settings = replace(settings, max_workers=args.workers)
    if args.ffmpeg:
        settings = replace(settings, ffmpeg_path=args.ffmpeg)

    for problem in validate_settings(settings):
        eprint(f"Warning: {problem}")

    job = build_job(args)
    if job.retag:
        walker = TraversalEngine(settings, logger=logger)
    else:
        walker = LibraryOrganizer(settings, logger=logger)

    try:
        stats = walker.run(job)
    except UnsupportedPathError as e:
        eprint(str(e))
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 130

    show_summary(stats, job.retag)
    return 0


if __name__ == "__main__":
    sys.exit(main())
