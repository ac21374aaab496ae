"""Tag inference from a file's path and its two parent directories."""

import logging
from pathlib import Path
from typing import Optional, Tuple

from media_normalizer.config import NormalizerSettings
from media_normalizer.errors import NoParentDirectoryError
from media_normalizer.id3_handler import ID3Handler
from media_normalizer.models import JobDescriptor, TrackTags
from media_normalizer.title_parser import finalize_title, parse_title
from media_normalizer.utils import clean_name, collapse_whitespace

_log = logging.getLogger(__name__)


def ancestor_names(file_path: Path, unknown: str = "unknown") -> Tuple[str, str]:
    """
    Return the (album_dir, artist_dir) names above a file.

    The immediate parent is the album folder, the grandparent the artist
    folder. Missing levels fall back to `unknown`.

    Raises:
        NoParentDirectoryError: If the path is a filesystem root
    """
    file_path = Path(file_path).absolute()
    parent = file_path.parent
    if not file_path.name or parent == file_path:
        raise NoParentDirectoryError(file_path, "file has no parent directory")

    names = [part for part in reversed(parent.parts) if part != parent.anchor]
    album_dir = names[0] if len(names) > 0 else unknown
    artist_dir = names[1] if len(names) > 1 else unknown
    return album_dir, artist_dir


class TagInferenceEngine:
    """Computes and writes the tags a file should carry."""

    def __init__(self, settings: Optional[NormalizerSettings] = None,
                 tag_handler: Optional[ID3Handler] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or NormalizerSettings()
        self.tag_handler = tag_handler or ID3Handler()
        self.logger = logger or _log

    def _clean(self, name: str) -> str:
        return clean_name(name, self.settings.noise_markers)

    def infer(self, job: JobDescriptor, file_path: Path) -> TrackTags:
        """
        Work out artist, album and title for a file from its path.

        Args:
            job: Job carrying the per-field modes
            file_path: Audio file to infer tags for

        Returns:
            TrackTags; disabled fields stay None
        """
        file_path = Path(file_path)
        album_dir, artist_dir = ancestor_names(file_path, self.settings.unknown_name)

        inferred_artist = self._clean(artist_dir)
        # Album suffix and title cleanup compare against cleaned text
        artist = self._clean(job.artist_mode.value) if job.artist_mode.is_fixed else inferred_artist

        tags = TrackTags()

        if job.artist_mode.is_auto:
            tags.artist = inferred_artist
        elif job.artist_mode.is_fixed:
            tags.artist = job.artist_mode.value

        if job.album_mode.is_auto:
            album = self._clean(album_dir)
            if album == self.settings.default_album_name:
                album = f"{album} - {artist}"
            tags.album = album
        elif job.album_mode.is_fixed:
            tags.album = job.album_mode.value

        if job.title_mode.is_auto:
            stem = self._clean(file_path.stem)
            track, title = parse_title(stem, artist)
            tags.title = finalize_title(title, artist)
            if not tags.title:
                # Name was nothing but the artist; keep the stem rather than blank it
                tags.title = collapse_whitespace(stem) or file_path.stem
            tags.track_number = track
        elif job.title_mode.is_fixed:
            tags.title = job.title_mode.value

        return tags

    def retag(self, job: JobDescriptor, file_path: Path) -> TrackTags:
        """
        Read, infer and write tags for one file.

        The read comes first so a broken container is caught before any
        inference work. Comments are always cleared on write.

        Raises:
            TagReadError, TagWriteError: Repairable failures
            NoPrimaryTagError, NoParentDirectoryError: Not repairable
        """
        self.tag_handler.read_tags(str(file_path))
        tags = self.infer(job, file_path)
        if tags.is_empty():
            self.logger.debug(f"All fields disabled, clearing comment only: {file_path}")
        else:
            self.logger.debug(f"Inferred for {file_path}: {tags}")
        self.tag_handler.write_tags(str(file_path), tags)
        return tags
