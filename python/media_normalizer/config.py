"""Configuration management for Media Normalizer."""

import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from dotenv import load_dotenv

LOGGER_NAME = "media_normalizer"

ENV_PREFIX = "MEDIA_NORMALIZER_"


def eprint(*args, **kwargs):
    """Print to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def _extensions(*values: str) -> FrozenSet[str]:
    """Normalize extensions to lowercase with a leading dot."""
    result = set()
    for value in values:
        value = value.strip().lower()
        if not value:
            continue
        result.add(value if value.startswith(".") else f".{value}")
    return frozenset(result)


@dataclass(frozen=True)
class NormalizerSettings:
    """Tunable defaults shared by every component of a run."""

    default_album_name: str = "single songs"
    unknown_name: str = "unknown"
    audio_extensions: FrozenSet[str] = field(
        default_factory=lambda: _extensions(".mp3", ".flac", ".m4a")
    )
    archive_extensions: FrozenSet[str] = field(
        default_factory=lambda: _extensions(".zip", ".rar", ".tar", ".7z", ".gz")
    )
    supported_archive_extensions: FrozenSet[str] = field(
        default_factory=lambda: _extensions(".zip")
    )
    noise_markers: Tuple[str, ...] = ("128", "192", "320")
    ffmpeg_path: str = "ffmpeg"
    repair_suffix: str = ".fix"
    repair_timeout: int = 300
    max_workers: Optional[int] = None


def _get_list(name: str) -> Optional[List[str]]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return [v for v in value.split(",") if v.strip()]


def _get_int(name: str) -> Optional[int]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"{ENV_PREFIX}{name} must be an integer, got {value!r}"
        ) from None


def load_settings(env_file: Optional[str] = None) -> NormalizerSettings:
    """
    Load settings from .env file and the process environment.

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        NormalizerSettings with environment overrides applied.
    """
    if env_file is None:
        env_file = ".env"

    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        eprint(f"Loaded environment from {env_path.resolve()}")
    else:
        eprint(
            f"Warning: .env file not found at {env_path.resolve()} "
            "- falling back to process env."
        )

    overrides = {}

    default_album = os.getenv(ENV_PREFIX + "DEFAULT_ALBUM")
    if default_album:
        overrides["default_album_name"] = default_album.strip().lower()

    unknown_name = os.getenv(ENV_PREFIX + "UNKNOWN_NAME")
    if unknown_name:
        overrides["unknown_name"] = unknown_name.strip()

    audio = _get_list("AUDIO_EXTENSIONS")
    if audio is not None:
        overrides["audio_extensions"] = _extensions(*audio)

    archives = _get_list("ARCHIVE_EXTENSIONS")
    if archives is not None:
        overrides["archive_extensions"] = _extensions(*archives)

    markers = _get_list("NOISE_MARKERS")
    if markers is not None:
        overrides["noise_markers"] = tuple(m.strip() for m in markers)

    ffmpeg = os.getenv(ENV_PREFIX + "FFMPEG")
    if ffmpeg:
        overrides["ffmpeg_path"] = ffmpeg.strip()

    timeout = _get_int("REPAIR_TIMEOUT")
    if timeout is not None:
        overrides["repair_timeout"] = timeout

    workers = _get_int("MAX_WORKERS")
    if workers is not None:
        overrides["max_workers"] = workers

    return NormalizerSettings(**overrides)


def validate_settings(settings: NormalizerSettings) -> List[str]:
    """
    Validate settings and return a list of problems.

    Args:
        settings: Settings from load_settings()

    Returns:
        List of human-readable problems (empty if all good).
    """
    problems = []

    if not settings.audio_extensions:
        problems.append("No audio extensions configured")

    unknown_archives = settings.supported_archive_extensions - settings.archive_extensions
    if unknown_archives:
        problems.append(
            "Supported archive extensions missing from archive extensions: "
            + ", ".join(sorted(unknown_archives))
        )

    if settings.repair_timeout <= 0:
        problems.append(f"Repair timeout must be positive, got {settings.repair_timeout}")

    if settings.max_workers is not None and settings.max_workers <= 0:
        problems.append(f"Worker count must be positive, got {settings.max_workers}")

    if shutil.which(settings.ffmpeg_path) is None:
        problems.append(
            f"ffmpeg not found at: {settings.ffmpeg_path} "
            "(broken files cannot be repaired)"
        )

    return problems


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None) -> logging.Logger:
    """Configure logging with console and optional file handlers."""

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)
        # File output is always DEBUG, so the logger itself must let it through
        logger.setLevel(logging.DEBUG)

    return logger
