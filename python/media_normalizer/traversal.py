"""Concurrent directory traversal for the retag pipeline."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from media_normalizer.archive import ArchiveExpander
from media_normalizer.classifier import classify_path, is_supported_archive
from media_normalizer.config import NormalizerSettings
from media_normalizer.errors import UnsupportedPathError
from media_normalizer.folder_manager import FolderManager
from media_normalizer.id3_handler import ID3Handler
from media_normalizer.inference import TagInferenceEngine
from media_normalizer.models import JobDescriptor, PathKind, ProcessingStats
from media_normalizer.repair import RepairLoop

_log = logging.getLogger(__name__)


class TreeWalker(ABC):
    """
    Fork-join walk over a directory tree.

    Each directory maps its entries over its own thread pool and waits for
    all of them before returning. Subclasses implement `process_file` for
    the non-directory paths and may override `entries` to hide some of them.
    Any exception raised for one entry is logged and recorded in that
    entry's stats; siblings carry on.
    """

    ROOT_KINDS = (PathKind.DIRECTORY, PathKind.AUDIO_FILE)

    def __init__(self, settings: Optional[NormalizerSettings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or NormalizerSettings()
        self.logger = logger or _log

    def run(self, job: JobDescriptor) -> ProcessingStats:
        """
        Process the job's root path.

        Raises:
            UnsupportedPathError: If the root is not something this walker handles
        """
        kind = classify_path(job.target_path, self.settings)
        if kind not in self.ROOT_KINDS:
            raise UnsupportedPathError(
                job.target_path,
                "path is neither a directory nor a supported audio file",
            )
        return self.process(job)

    def process(self, job: JobDescriptor) -> ProcessingStats:
        """Process one path, containing any failure to this branch."""
        try:
            return self.dispatch(job, classify_path(job.target_path, self.settings))
        except Exception as e:
            return self.failed(job, e)

    def failed(self, job: JobDescriptor, error: Exception) -> ProcessingStats:
        """Log a failure and return stats carrying it."""
        self.logger.error(f"Failed to process '{job.target_path}': {error}")
        stats = ProcessingStats()
        stats.errors.append(f"{job.target_path}: {error}")
        return stats

    def dispatch(self, job: JobDescriptor, kind: PathKind) -> ProcessingStats:
        if kind is PathKind.DIRECTORY:
            return self.process_directory(job)
        return self.process_file(job, kind)

    def process_directory(self, job: JobDescriptor) -> ProcessingStats:
        """Fan out over a directory's entries and merge their stats."""
        entries = self.entries(job)
        stats = ProcessingStats()
        if not entries:
            return stats

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            for child_stats in executor.map(
                self.process, [job.with_path(entry) for entry in entries]
            ):
                stats.merge(child_stats)
        return stats

    def entries(self, job: JobDescriptor) -> List[Path]:
        """Paths inside a directory that get their own task, in name order."""
        return sorted(Path(job.target_path).iterdir())

    @abstractmethod
    def process_file(self, job: JobDescriptor, kind: PathKind) -> ProcessingStats:
        """Handle one non-directory path."""


class TraversalEngine(TreeWalker):
    """Walks a tree, expanding archives and retagging audio files."""

    ROOT_KINDS = (PathKind.DIRECTORY, PathKind.AUDIO_FILE, PathKind.ARCHIVE_FILE)

    def __init__(self, settings: Optional[NormalizerSettings] = None,
                 tag_handler: Optional[ID3Handler] = None,
                 repair_loop: Optional[RepairLoop] = None,
                 folder_manager: Optional[FolderManager] = None,
                 archive_expander: Optional[ArchiveExpander] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the engine.

        Args:
            settings: Shared defaults
            tag_handler: Tag reader/writer
            repair_loop: ffmpeg rebuild-and-retry
            folder_manager: Folder creation and moves
            archive_expander: Zip extraction
            logger: Logger for per-file results
        """
        super().__init__(settings, logger)
        self.folder_manager = folder_manager or FolderManager(self.logger)
        self.inference = TagInferenceEngine(self.settings, tag_handler, self.logger)
        self.repair_loop = repair_loop or RepairLoop(self.settings, logger=self.logger)
        self.archive_expander = archive_expander or ArchiveExpander(
            self.settings, self.folder_manager, self.logger
        )

    def process_file(self, job: JobDescriptor, kind: PathKind) -> ProcessingStats:
        if kind is PathKind.ARCHIVE_FILE:
            return self.process_archive(job)
        if kind is PathKind.AUDIO_FILE:
            return self.process_audio(job)
        return self.process_other(job)

    def _expandable(self, path: Path) -> bool:
        return (classify_path(path, self.settings) is PathKind.ARCHIVE_FILE
                and is_supported_archive(path, self.settings))

    def process_directory(self, job: JobDescriptor) -> ProcessingStats:
        """
        Expand this folder's zips, then walk what the folder holds afterwards.

        The folder is listed after extraction, so each extracted artist
        folder is walked once whether or not it already existed.
        """
        stats = ProcessingStats()
        folder = Path(job.target_path)
        for archive in sorted(p for p in folder.iterdir() if self._expandable(p)):
            archive_job = job.with_path(archive)
            try:
                self.archive_expander.expand(archive, job.delete_archive_after_extract)
                stats.archives_expanded += 1
            except Exception as e:
                stats.merge(self.failed(archive_job, e))
        return stats.merge(super().process_directory(job))

    def entries(self, job: JobDescriptor) -> List[Path]:
        """Folder contents minus the zips already expanded into it."""
        return [p for p in super().entries(job) if not self._expandable(p)]

    def process_archive(self, job: JobDescriptor) -> ProcessingStats:
        """
        Expand an archive given as the root and walk the folder it produced.

        Archives found inside a folder are expanded by `process_directory`.
        """
        path = Path(job.target_path)
        if not is_supported_archive(path, self.settings):
            self.logger.warning(
                f"The file '{path}' is an archive, but its format is unsupported."
            )
            return ProcessingStats(archives_skipped=1)

        album_dir = self.archive_expander.expand(path, job.delete_archive_after_extract)
        stats = ProcessingStats(archives_expanded=1)
        return stats.merge(self.process(job.with_path(album_dir)))

    def process_audio(self, job: JobDescriptor) -> ProcessingStats:
        """Retag one audio file, then optionally lift it out of its album folder."""
        path = Path(job.target_path)
        outcome = self.repair_loop.run(path, lambda: self.inference.retag(job, path))

        stats = ProcessingStats(files_retagged=1, files_repaired=int(outcome.repaired))
        self.logger.info(f"Successfully updated metadata for: {path}")

        if job.flatten_to_grandparent:
            success, result = self.folder_manager.move_to_grandparent(path)
            if success:
                stats.files_moved += 1
                self.logger.debug(f"Moved {path} -> {result}")
            else:
                self.logger.error(f"Failed to move '{path}': {result}")
                stats.errors.append(f"{path}: {result}")
        return stats

    def process_other(self, job: JobDescriptor) -> ProcessingStats:
        """Delete an unrecognized file if allowed, otherwise leave it alone."""
        path = Path(job.target_path)
        if job.delete_unrecognized and path.is_file():
            path.unlink()
            self.logger.info(f"Removed unrecognized file: {path}")
            return ProcessingStats(files_deleted=1)

        self.logger.debug(f"Skipping unrecognized file: {path}")
        return ProcessingStats(files_skipped=1)
