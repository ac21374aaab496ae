"""Zip archive expansion into artist/album folders."""

import logging
import zipfile
from pathlib import Path
from typing import Optional

from media_normalizer.config import NormalizerSettings
from media_normalizer.errors import ArchiveError
from media_normalizer.folder_manager import FolderManager
from media_normalizer.models import ArchiveLocation

_log = logging.getLogger(__name__)


def derive_location(archive_path: Path, default_album: str = "single songs") -> ArchiveLocation:
    """
    Work out artist and album folders from an archive name.

    'Artist - Album.zip' lands in <parent>/artist/album; an archive name
    without a dash goes to <parent>/artist/<default_album>. Names that
    contain extra dashes are split at every dash, and only the first two
    parts are used.

    Raises:
        ArchiveError: If the name has no usable artist part
    """
    archive_path = Path(archive_path)
    parts = [p.strip().lower() for p in archive_path.stem.split("-")]

    if not parts or not parts[0]:
        raise ArchiveError(archive_path, "archive name has no artist part")

    artist = parts[0]
    album = parts[1] if len(parts) > 1 and parts[1] else default_album

    artist_dir = archive_path.parent / artist
    return ArchiveLocation(artist_dir=artist_dir, album_dir=artist_dir / album)


class ArchiveExpander:
    """Extracts archives and flattens the result into one album folder."""

    def __init__(self, settings: Optional[NormalizerSettings] = None,
                 folder_manager: Optional[FolderManager] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or NormalizerSettings()
        self.folder_manager = folder_manager or FolderManager()
        self.logger = logger or _log

    def _extract(self, archive_path: Path, destination: Path) -> None:
        """Extract every entry, refusing entries that escape `destination`."""
        root = destination.resolve()
        with zipfile.ZipFile(archive_path, "r") as archive:
            for name in archive.namelist():
                target = (root / name).resolve()
                if target != root and root not in target.parents:
                    raise ArchiveError(archive_path, f"entry escapes album folder: {name}")
            archive.extractall(root)

    def expand(self, archive_path: Path, delete_after: bool = False) -> Path:
        """
        Extract an archive into its derived album folder.

        Args:
            archive_path: Zip file to expand
            delete_after: Remove the archive once it has been extracted

        Returns:
            The album folder, ready to be traversed

        Raises:
            ArchiveError: For bad archives, bad names or extraction I/O failures
        """
        archive_path = Path(archive_path)
        location = derive_location(archive_path, self.settings.default_album_name)

        try:
            self.folder_manager.ensure_directory(location.artist_dir)
            self.folder_manager.ensure_directory(location.album_dir)

            self._extract(archive_path, location.album_dir)
            moved = self.folder_manager.flatten_directory(location.album_dir)
            if moved:
                self.logger.debug(f"Flattened {moved} file(s) into {location.album_dir}")

            if delete_after:
                archive_path.unlink()
                self.logger.debug(f"Removed archive: {archive_path}")
        except zipfile.BadZipFile as e:
            raise ArchiveError(archive_path, f"malformed archive: {e}") from e
        except OSError as e:
            raise ArchiveError(archive_path, str(e)) from e

        self.logger.info(f"Extracted {archive_path.name} -> {location.album_dir}")
        return location.album_dir
