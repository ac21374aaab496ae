"""Shared test fixtures for media_normalizer tests."""

import shutil
import subprocess
import sys
import threading
from pathlib import Path

import pytest

# Add the python/ directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from media_normalizer.config import NormalizerSettings
from media_normalizer.errors import NoPrimaryTagError, TagReadError, TagWriteError
from media_normalizer.models import JobDescriptor, TrackMetadata, TrackTags


class FakeTagHandler:
    """In-memory stand-in for ID3Handler.

    Tags are keyed by file name string. `read_failures` / `write_failures`
    map a path to how many times the next calls should fail.
    """

    def __init__(self):
        self.tags = {}
        self.read_failures = {}
        self.write_failures = {}
        self.no_container = set()
        self.writes = []
        self._lock = threading.Lock()

    def _fail(self, failures: dict, path: str) -> bool:
        with self._lock:
            remaining = failures.get(path, 0)
            if remaining:
                failures[path] = remaining - 1
                return True
            return False

    def read_tags(self, file_path: str) -> TrackMetadata:
        if file_path in self.no_container:
            raise NoPrimaryTagError(file_path, "no tag container")
        if self._fail(self.read_failures, file_path):
            raise TagReadError(file_path, "can't sync to MPEG frame")
        with self._lock:
            return self.tags.get(file_path, TrackMetadata(comment="old comment"))

    def write_tags(self, file_path: str, tags: TrackTags) -> None:
        if self._fail(self.write_failures, file_path):
            raise TagWriteError(file_path, "corrupt ID3 frame")
        with self._lock:
            current = self.tags.get(file_path, TrackMetadata(comment="old comment"))
            self.tags[file_path] = TrackMetadata(
                title=tags.title if tags.title is not None else current.title,
                artist=tags.artist if tags.artist is not None else current.artist,
                album=tags.album if tags.album is not None else current.album,
                track_number=(tags.track_number if tags.track_number is not None
                              else current.track_number),
                comment=None,
            )
            self.writes.append((file_path, tags))


class FakeFFmpeg:
    """subprocess.run stand-in that copies the input to the output path."""

    def __init__(self, returncode: int = 0, timeout: bool = False):
        self.returncode = returncode
        self.timeout = timeout
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.timeout:
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))
        source = cmd[cmd.index("-i") + 1]
        output = cmd[-1]
        if self.returncode == 0:
            shutil.copyfile(source, output)
        else:
            # ffmpeg often leaves a partial file behind on failure
            Path(output).write_bytes(b"partial")
        return subprocess.CompletedProcess(cmd, self.returncode)


@pytest.fixture
def settings():
    """Default settings with a small worker pool."""
    return NormalizerSettings(max_workers=4)


@pytest.fixture
def tag_handler():
    return FakeTagHandler()


@pytest.fixture
def ffmpeg():
    return FakeFFmpeg()


@pytest.fixture
def make_file():
    """Create a file (and its folders) under a base path."""
    def _make(base: Path, relative: str, content: bytes = b"ID3 fake audio") -> Path:
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def library(tmp_path, make_file):
    """A small artist/album tree with one stray text file."""
    root = tmp_path / "music"
    make_file(root, "Shadows/Bright Days/05) Bright Lights.mp3")
    make_file(root, "Shadows/Bright Days/shadows - Dark Nights.mp3")
    make_file(root, "Sia-vash/Single Songs/128-track.mp3")
    make_file(root, "Shadows/Bright Days/cover.txt", b"not audio")
    return root


@pytest.fixture
def auto_job(library):
    """Job with every field on auto and no destructive flags."""
    return JobDescriptor(target_path=library)
