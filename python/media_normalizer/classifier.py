"""Path classification by filesystem type and extension."""

from pathlib import Path
from typing import Optional

from media_normalizer.config import NormalizerSettings
from media_normalizer.models import PathKind


def _extension(path: Path) -> str:
    return path.suffix.lower()


def is_audio_file(path: Path, settings: Optional[NormalizerSettings] = None) -> bool:
    """Check if a path has a supported audio extension (case-insensitive)."""
    settings = settings or NormalizerSettings()
    return _extension(Path(path)) in settings.audio_extensions


def is_archive_file(path: Path, settings: Optional[NormalizerSettings] = None) -> bool:
    """Check if a path looks like any kind of archive."""
    settings = settings or NormalizerSettings()
    return _extension(Path(path)) in settings.archive_extensions


def is_supported_archive(path: Path, settings: Optional[NormalizerSettings] = None) -> bool:
    """Check if an archive is in a format we can actually extract."""
    settings = settings or NormalizerSettings()
    return _extension(Path(path)) in settings.supported_archive_extensions


def classify_path(path: Path, settings: Optional[NormalizerSettings] = None) -> PathKind:
    """
    Classify a path for traversal.

    Args:
        path: Path to classify
        settings: Extension sets to match against

    Returns:
        PathKind for the path; missing paths are OTHER
    """
    path = Path(path)
    if path.is_dir():
        return PathKind.DIRECTORY
    if path.is_file():
        if is_audio_file(path, settings):
            return PathKind.AUDIO_FILE
        if is_archive_file(path, settings):
            return PathKind.ARCHIVE_FILE
    return PathKind.OTHER
