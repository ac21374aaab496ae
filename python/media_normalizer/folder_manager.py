"""Folder management for flattening, moving, and album folders."""

import logging
import re
import shutil
from pathlib import Path
from typing import Optional, Tuple

_log = logging.getLogger(__name__)

ALREADY_IN_ALBUM_FOLDER = "File already in album folder"


class FolderManager:
    """Manages folder creation, flattening and file moves."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or _log

    def ensure_directory(self, folder_path: Path) -> Path:
        """
        Create a folder (and parents) if it does not exist yet.

        Safe to call from several threads for the same path.
        """
        folder = Path(folder_path)
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    def sanitize_folder_name(self, name: str) -> str:
        """Remove/replace characters invalid for folder names."""
        # Replace problematic characters
        invalid_chars = '<>:"/\\|?*'
        for char in invalid_chars:
            name = name.replace(char, "_")
        # Remove leading/trailing whitespace and dots
        name = name.strip(". ")
        # Collapse multiple spaces/underscores
        name = re.sub(r"[_\s]+", " ", name)
        return name

    def _free_target(self, folder: Path, name: str) -> Path:
        """Return folder/name, or 'stem (N).ext' if that is taken."""
        target = folder / name
        if not target.exists():
            return target
        stem, suffix = Path(name).stem, Path(name).suffix
        counter = 2
        while (folder / f"{stem} ({counter}){suffix}").exists():
            counter += 1
        return folder / f"{stem} ({counter}){suffix}"

    def flatten_directory(self, folder_path: Path) -> int:
        """
        Pull every file in nested subfolders up into `folder_path`.

        Emptied subfolders are removed. A name clash gets a ' (N)' suffix.
        Running it on an already flat folder changes nothing.

        Args:
            folder_path: Folder to flatten

        Returns:
            Number of files moved

        Raises:
            NotADirectoryError: If folder_path is not a folder
            OSError: If a move or removal fails
        """
        root = Path(folder_path)
        if not root.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        moved = 0
        for subfolder in sorted(p for p in root.iterdir() if p.is_dir()):
            moved += self._drain_into(subfolder, root)
        return moved

    def _drain_into(self, source: Path, target: Path) -> int:
        moved = 0
        for entry in sorted(source.iterdir()):
            if entry.is_dir():
                moved += self._drain_into(entry, target)
            else:
                destination = self._free_target(target, entry.name)
                shutil.move(str(entry), str(destination))
                self.logger.debug(f"Flattened {entry} -> {destination}")
                moved += 1
        source.rmdir()
        return moved

    def move_file_to_folder(self, file_path: Path, folder: Path) -> Tuple[bool, str]:
        """
        Move a file into a folder, keeping its name.

        Args:
            file_path: File to move
            folder: Destination folder (must exist)

        Returns:
            (success, new_path or error message)
        """
        source = Path(file_path)
        target = Path(folder) / source.name

        if not source.exists():
            return False, f"Source file not found: {source}"

        if target.exists():
            return False, f"Target already exists: {target}"

        try:
            shutil.move(str(source), str(target))
            return True, str(target)
        except OSError as e:
            return False, str(e)

    def move_to_grandparent(self, file_path: Path) -> Tuple[bool, str]:
        """
        Move a file one level up, out of its album folder.

        Returns:
            (success, new_path or error message)
        """
        source = Path(file_path).absolute()
        grandparent = source.parent.parent
        if grandparent == source.parent:
            return False, f"No grandparent directory for: {source}"
        return self.move_file_to_folder(source, grandparent)

    def move_into_album_folder(self, file_path: Path, album: str) -> Tuple[bool, str]:
        """
        Move a file into a sibling folder named after its album.

        A file already inside a folder with that name stays where it is.

        Returns:
            (success, new_path or message)
        """
        source = Path(file_path)
        folder_name = self.sanitize_folder_name(album)
        if not folder_name:
            return False, f"Album name unusable as folder name: {album!r}"

        if source.parent.name == folder_name:
            return True, ALREADY_IN_ALBUM_FOLDER

        album_folder = self.ensure_directory(source.parent / folder_name)
        return self.move_file_to_folder(source, album_folder)
