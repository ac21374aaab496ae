"""Track number and title extraction from file names."""

import re
from typing import Optional, Tuple

from media_normalizer.utils import collapse_whitespace

# Pattern 1: "01) my song", "07 - title"
NUMBERED_TRACK_RE = re.compile(
    r"(?P<track>\d{2})[^a-zA-Z]*(?P<name>[a-zA-Z0-9\(\)\[\],\s]+)"
)

# Pattern 2: "some artist - name"
SEPARATOR_RE = re.compile(r"[a-zA-Z\& ]*-(?P<name>[a-zA-Z0-9 ]*)")


def _strip_artist(text: str, artist: str) -> str:
    if artist:
        text = text.replace(artist, "")
    return text


def parse_title(stem: str, artist: str) -> Tuple[Optional[int], str]:
    """
    Split a file name stem into an optional track number and a title.

    Patterns are tried in order and the first match wins:
    a two digit track prefix, then an '<something> - <name>' separator,
    then the underscore-to-space fallback.

    Args:
        stem: File name without extension (usually already cleaned)
        artist: Resolved artist name, removed wherever it appears

    Returns:
        (track_number, title) tuple; track_number is None unless pattern 1 matched
    """
    without_artist = _strip_artist(stem, artist)
    spaced = without_artist.replace("-", " ").strip()

    match = NUMBERED_TRACK_RE.search(spaced)
    if match:
        return int(match.group("track")), match.group("name").strip()

    # The dash is the separator here, so match before it is replaced
    match = SEPARATOR_RE.search(without_artist.strip())
    if match and match.group("name").strip():
        return None, match.group("name").strip()

    fallback = _strip_artist(spaced.replace("_", " "), artist)
    return None, fallback.strip()


def finalize_title(title: str, artist: str) -> str:
    """Collapse whitespace and drop tokens that just repeat the artist."""
    return collapse_whitespace(title, drop=(artist,))
