"""Data models for Media Normalizer."""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import List, Optional


class ModeKind(Enum):
    """How a single tag field is handled."""
    DISABLED = "disable"
    AUTO = "auto"
    FIXED = "default"


@dataclass(frozen=True)
class FieldMode:
    """Per-field policy: leave alone, infer from the path, or force a value."""
    kind: ModeKind = ModeKind.AUTO
    value: Optional[str] = None

    @classmethod
    def disabled(cls) -> "FieldMode":
        return cls(ModeKind.DISABLED)

    @classmethod
    def auto(cls) -> "FieldMode":
        return cls(ModeKind.AUTO)

    @classmethod
    def fixed(cls, value: str) -> "FieldMode":
        return cls(ModeKind.FIXED, value)

    @property
    def is_disabled(self) -> bool:
        return self.kind is ModeKind.DISABLED

    @property
    def is_auto(self) -> bool:
        return self.kind is ModeKind.AUTO

    @property
    def is_fixed(self) -> bool:
        return self.kind is ModeKind.FIXED

    def __str__(self) -> str:
        if self.is_fixed:
            return f"default={self.value}"
        return self.kind.value


def parse_field_mode(text: str) -> FieldMode:
    """
    Parse a CLI field mode.

    Accepts 'disable', 'auto' or 'default=<value>'.

    Raises:
        ValueError: If the text is none of the above
    """
    lowered = text.strip().lower()
    if lowered == ModeKind.DISABLED.value:
        return FieldMode.disabled()
    if lowered == ModeKind.AUTO.value:
        return FieldMode.auto()
    prefix = ModeKind.FIXED.value + "="
    if lowered.startswith(prefix):
        value = text.strip()[len(prefix):]
        if value:
            return FieldMode.fixed(value)
    raise ValueError(
        f"invalid field mode {text!r} (expected 'disable', 'auto' or 'default=<value>')"
    )


class PathKind(Enum):
    """Classification of a path during traversal."""
    DIRECTORY = "directory"
    AUDIO_FILE = "audio"
    ARCHIVE_FILE = "archive"
    OTHER = "other"


@dataclass(frozen=True)
class JobDescriptor:
    """Immutable description of what to do with one path."""
    target_path: Path
    artist_mode: FieldMode = field(default_factory=FieldMode.auto)
    album_mode: FieldMode = field(default_factory=FieldMode.auto)
    title_mode: FieldMode = field(default_factory=FieldMode.auto)
    delete_unrecognized: bool = False
    delete_archive_after_extract: bool = False
    flatten_to_grandparent: bool = False
    retag: bool = True

    def with_path(self, target_path: Path) -> "JobDescriptor":
        """Clone this job for a sub-path, keeping every policy field."""
        return replace(self, target_path=Path(target_path))


@dataclass
class TrackTags:
    """Tag values to write. None means leave the field untouched."""
    artist: Optional[str] = None
    album: Optional[str] = None
    title: Optional[str] = None
    track_number: Optional[int] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.artist, self.album, self.title, self.track_number))


@dataclass
class TrackMetadata:
    """Tags currently stored in an audio file."""
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    track_number: Optional[int] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class ArchiveLocation:
    """Artist and album folders derived from an archive's file name."""
    artist_dir: Path
    album_dir: Path


@dataclass
class ProcessingStats:
    """Statistics for one traversal branch; merged upward at join time."""
    files_retagged: int = 0
    files_repaired: int = 0
    files_moved: int = 0
    files_deleted: int = 0
    files_skipped: int = 0
    archives_expanded: int = 0
    archives_skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def merge(self, other: "ProcessingStats") -> "ProcessingStats":
        """Add another branch's counts into this one and return self."""
        self.files_retagged += other.files_retagged
        self.files_repaired += other.files_repaired
        self.files_moved += other.files_moved
        self.files_deleted += other.files_deleted
        self.files_skipped += other.files_skipped
        self.archives_expanded += other.archives_expanded
        self.archives_skipped += other.archives_skipped
        self.errors.extend(other.errors)
        return self

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
