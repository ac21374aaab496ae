"""Tests for main.py command line handling."""

import logging
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from media_normalizer.config import LOGGER_NAME, NormalizerSettings
from media_normalizer.errors import UnsupportedPathError
from media_normalizer.main import build_job, build_parser, main
from media_normalizer.models import FieldMode, ProcessingStats
from media_normalizer.traversal import TraversalEngine


@pytest.fixture(autouse=True)
def reset_logger():
    """main() configures the package logger; undo it after each test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def quiet_config():
    """Skip .env loading and the ffmpeg check."""
    with patch("media_normalizer.main.load_settings", return_value=NormalizerSettings()), \
            patch("media_normalizer.main.validate_settings", return_value=[]):
        yield


class TestBuildParser:
    """Tests for CLI argument parser."""

    def test_has_required_path_argument(self):
        """Should require path argument."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_defaults(self):
        """Every field mode defaults to auto, flags off."""
        args = build_parser().parse_args(["/music"])
        assert args.artist == FieldMode.auto()
        assert args.album == FieldMode.auto()
        assert args.title == FieldMode.auto()
        assert args.remove_other_files is False
        assert args.remove_archives is False
        assert args.move_to_parent is False
        assert args.organize is False
        assert args.env_file == ".env"

    def test_field_modes(self):
        """disable and default=<value> are parsed."""
        args = build_parser().parse_args(
            ["/music", "--artist", "default=The Shadows", "--album", "disable"]
        )
        assert args.artist == FieldMode.fixed("The Shadows")
        assert args.album.is_disabled

    def test_rejects_bad_mode(self, capsys):
        """Unknown modes are a usage error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["/music", "--title", "sometimes"])
        assert "--title" in capsys.readouterr().err


class TestBuildJob:
    """Tests for build_job."""

    def test_maps_flags(self):
        """CLI flags map onto the job fields."""
        args = build_parser().parse_args([
            "/music", "--remove-other-files", "--remove-archives", "--move-to-parent",
        ])
        job = build_job(args)
        assert job.target_path == Path("/music")
        assert job.delete_unrecognized is True
        assert job.delete_archive_after_extract is True
        assert job.flatten_to_grandparent is True
        assert job.retag is True

    def test_organize(self):
        """--organize turns off retagging."""
        job = build_job(build_parser().parse_args(["/music", "--organize"]))
        assert job.retag is False


class TestMain:
    """Tests for main()."""

    def test_missing_path(self, tmp_path):
        """A path that does not exist is a usage error."""
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing")])
        assert exc.value.code == 2

    def test_non_positive_workers(self, tmp_path):
        """--workers must be positive."""
        with pytest.raises(SystemExit):
            main([str(tmp_path), "--workers", "0"])

    def test_runs_traversal_engine(self, tmp_path, quiet_config, capsys):
        """Retag mode uses TraversalEngine and prints a summary."""
        engine = Mock()
        engine.run.return_value = ProcessingStats(files_retagged=2)
        with patch("media_normalizer.main.TraversalEngine", return_value=engine) as cls:
            assert main([str(tmp_path), "--workers", "3", "--ffmpeg", "/opt/ffmpeg"]) == 0

        settings = cls.call_args.args[0]
        assert settings.max_workers == 3
        assert settings.ffmpeg_path == "/opt/ffmpeg"
        assert engine.run.call_args.args[0].target_path == tmp_path
        assert "Files retagged: 2" in capsys.readouterr().out

    def test_runs_organizer(self, tmp_path, quiet_config):
        """--organize uses LibraryOrganizer."""
        organizer = Mock()
        organizer.run.return_value = ProcessingStats(files_moved=1)
        with patch("media_normalizer.main.LibraryOrganizer", return_value=organizer), \
                patch("media_normalizer.main.TraversalEngine") as engine_cls:
            assert main([str(tmp_path), "--organize"]) == 0
        engine_cls.assert_not_called()
        organizer.run.assert_called_once()

    def test_unsupported_root(self, tmp_path, quiet_config, capsys):
        """A rejected root exits with status 1."""
        engine = Mock()
        engine.run.side_effect = UnsupportedPathError(tmp_path, "not audio")
        with patch("media_normalizer.main.TraversalEngine", return_value=engine):
            assert main([str(tmp_path)]) == 1
        assert "Path check failed" in capsys.readouterr().err

    def test_interrupted(self, tmp_path, quiet_config):
        """Ctrl-C exits with 130."""
        engine = Mock()
        engine.run.side_effect = KeyboardInterrupt
        with patch("media_normalizer.main.TraversalEngine", return_value=engine):
            assert main([str(tmp_path)]) == 130

    def test_settings_warnings_are_printed(self, tmp_path, capsys):
        """Configuration problems are shown but do not stop the run."""
        engine = Mock()
        engine.run.return_value = ProcessingStats()
        with patch("media_normalizer.main.load_settings", return_value=NormalizerSettings()), \
                patch("media_normalizer.main.validate_settings",
                      return_value=["ffmpeg not found at: ffmpeg"]), \
                patch("media_normalizer.main.TraversalEngine", return_value=engine):
            assert main([str(tmp_path)]) == 0
        assert "Warning: ffmpeg not found" in capsys.readouterr().err

    def test_end_to_end(self, library, capsys):
        """A real run over a tree with a mocked tag handler."""
        handler = Mock()
        handler.read_tags.return_value = None

        def engine_factory(settings, logger=None):
            return TraversalEngine(settings, tag_handler=handler, logger=logger)

        with patch("media_normalizer.main.load_settings", return_value=NormalizerSettings()), \
                patch("media_normalizer.main.validate_settings", return_value=[]), \
                patch("media_normalizer.main.TraversalEngine", side_effect=engine_factory):
            assert main([str(library), "--remove-other-files"]) == 0

        assert handler.write_tags.call_count == 3
        assert not (library / "Shadows/Bright Days/cover.txt").exists()
        out = capsys.readouterr().out
        assert "Files retagged: 3" in out
        assert "Files deleted: 1" in out
