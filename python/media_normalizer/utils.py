"""Utility functions for Media Normalizer."""

import re
from typing import Iterable

DEFAULT_NOISE_MARKERS = ("128", "192", "320")

EMPTY_BRACKETS = ("()", "[]")


def _clean_once(s: str, noise_markers: Iterable[str]) -> str:
    s = s.replace(".", "-")
    for marker in noise_markers:
        if marker:
            s = re.sub(re.escape(marker), "", s, flags=re.IGNORECASE)
    for pair in EMPTY_BRACKETS:
        s = s.replace(pair, "")
    return s.lower().strip()


def clean_name(s: str, noise_markers: Iterable[str] = DEFAULT_NOISE_MARKERS) -> str:
    """Normalize a directory or file name fragment into a lowercase tag token.

    Dots become dashes, bitrate markers and empty brackets are dropped, and
    the result is lowercased and trimmed. The steps repeat until the value
    is stable, so cleaning twice gives the same result as cleaning once.

    Args:
        s: Raw name fragment
        noise_markers: Substrings to strip (bitrate markers by default)

    Returns:
        Cleaned token, possibly empty
    """
    noise_markers = tuple(noise_markers)
    previous = None
    while s != previous:
        previous = s
        s = _clean_once(s, noise_markers)
    return s


def collapse_whitespace(s: str, drop: Iterable[str] = ()) -> str:
    """Join whitespace-separated tokens with single spaces, skipping `drop` tokens."""
    dropped = {d for d in drop if d}
    return " ".join(t for t in s.split() if t and t not in dropped)
