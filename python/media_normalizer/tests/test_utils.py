"""Tests for utils.py name cleaning functions."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from media_normalizer.utils import clean_name, collapse_whitespace


class TestCleanName:
    """Tests for clean_name function."""

    def test_lowercases_and_trims(self):
        """Should lowercase and strip surrounding whitespace."""
        assert clean_name("  Bright Days  ") == "bright days"

    def test_replaces_dots_with_dashes(self):
        """Should turn dots into dashes."""
        assert clean_name("Mr.Smith") == "mr-smith"

    def test_strips_bitrate_markers(self):
        """Should remove 128, 192 and 320 wherever they appear."""
        assert clean_name("Song 320") == "song"
        assert clean_name("128-track") == "-track"
        assert clean_name("Album192") == "album"

    def test_strips_empty_brackets(self):
        """Should drop () and [] left behind by marker removal."""
        assert clean_name("Song (320)") == "song"
        assert clean_name("Song [128]") == "song"

    def test_keeps_non_empty_brackets(self):
        """Should keep brackets that still have content."""
        assert clean_name("Song (Live)") == "song (live)"

    def test_empty_string(self):
        """Should accept and return the empty string."""
        assert clean_name("") == ""

    def test_custom_markers(self):
        """Should strip the markers it is given instead of the defaults."""
        assert clean_name("Song 256", noise_markers=("256",)) == "song"
        assert clean_name("Song 320", noise_markers=("256",)) == "song 320"

    @pytest.mark.parametrize("raw", [
        "Sia-vash",
        "Single Songs",
        "112828",
        "(())",
        "[(128)]",
        " a.b.c 320 ",
        "3128 20",
        "",
    ])
    def test_idempotent(self, raw):
        """Cleaning an already clean value should not change it."""
        once = clean_name(raw)
        assert clean_name(once) == once

    def test_exposed_markers_are_removed(self):
        """Removing one marker must not leave a new one behind."""
        assert clean_name("112828") == ""
        assert clean_name("(())") == ""


class TestCollapseWhitespace:
    """Tests for collapse_whitespace function."""

    def test_collapses_runs_of_spaces(self):
        """Should join tokens with single spaces."""
        assert collapse_whitespace("  bright   lights \t") == "bright lights"

    def test_drops_tokens(self):
        """Should drop tokens equal to a dropped value."""
        assert collapse_whitespace("shadows bright shadows lights", drop=("shadows",)) == "bright lights"

    def test_ignores_empty_drop_values(self):
        """An empty drop value should not remove anything."""
        assert collapse_whitespace("a b", drop=("",)) == "a b"
