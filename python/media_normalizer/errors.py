"""Exceptions raised while normalizing a media tree."""

from pathlib import Path
from typing import Optional, Union


class NormalizerError(Exception):
    """Base class for failures tied to one path."""

    action = "Processing"

    def __init__(self, path: Union[str, Path], cause: Optional[str] = None):
        self.path = Path(path)
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        message = f"{self.action} failed for '{self.path}'"
        if self.cause:
            message += f": {self.cause}"
        return message


class UnsupportedPathError(NormalizerError):
    """Root path is neither a directory nor a supported audio file."""

    action = "Path check"


class NoParentDirectoryError(NormalizerError):
    """Audio file sits at the filesystem root."""

    action = "Ancestor lookup"


class NoPrimaryTagError(NormalizerError):
    """File has no tag container the tag handler can work with."""

    action = "Tag lookup"


class TagReadError(NormalizerError):
    action = "Tag read"


class TagWriteError(NormalizerError):
    action = "Tag write"


class RepairError(NormalizerError):
    """ffmpeg could not rebuild the file."""

    action = "Repair"


class ArchiveError(NormalizerError):
    action = "Archive expansion"
