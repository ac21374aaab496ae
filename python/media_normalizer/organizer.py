"""Organize audio files into album folders from their existing tags."""

import logging
from pathlib import Path
from typing import Optional

from media_normalizer.config import NormalizerSettings
from media_normalizer.errors import UnsupportedPathError
from media_normalizer.folder_manager import ALREADY_IN_ALBUM_FOLDER, FolderManager
from media_normalizer.id3_handler import ID3Handler
from media_normalizer.models import JobDescriptor, PathKind, ProcessingStats
from media_normalizer.traversal import TreeWalker


class LibraryOrganizer(TreeWalker):
    """Moves each audio file into <parent>/<album tag>/."""

    def __init__(self, settings: Optional[NormalizerSettings] = None,
                 tag_handler: Optional[ID3Handler] = None,
                 folder_manager: Optional[FolderManager] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(settings, logger)
        self.tag_handler = tag_handler or ID3Handler()
        self.folder_manager = folder_manager or FolderManager(self.logger)

    def process_file(self, job: JobDescriptor, kind: PathKind) -> ProcessingStats:
        path = Path(job.target_path)
        if kind is not PathKind.AUDIO_FILE:
            raise UnsupportedPathError(
                path, "path is neither a directory nor a supported audio file"
            )

        current = self.tag_handler.read_tags(str(path))
        album = current.album or self.settings.default_album_name

        success, result = self.folder_manager.move_into_album_folder(path, album)
        if not success:
            self.logger.error(f"Failed to organize '{path}': {result}")
            stats = ProcessingStats()
            stats.errors.append(f"{path}: {result}")
            return stats

        if result == ALREADY_IN_ALBUM_FOLDER:
            self.logger.debug(f"Already organized: {path}")
            return ProcessingStats(files_skipped=1)

        self.logger.info(f"Moved {path.name} -> {result}")
        return ProcessingStats(files_moved=1)
