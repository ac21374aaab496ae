"""Rebuild-and-retry for files whose tag container is broken."""

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional

from media_normalizer.config import NormalizerSettings
from media_normalizer.errors import RepairError, TagReadError, TagWriteError

_log = logging.getLogger(__name__)


class RepairState(Enum):
    """States of a single repair run."""
    ATTEMPT = "attempt"
    REPAIR = "repair"
    RETRY = "retry"
    SUCCESS = "success"


@dataclass
class RepairOutcome:
    """Result of RepairLoop.run."""
    state: RepairState
    repaired: bool
    value: Any = None


class RepairLoop:
    """
    Runs a tag operation, rebuilding the file through ffmpeg on failure.

    ATTEMPT -> REPAIR -> RETRY -> SUCCESS. There is exactly one
    repair per run; a second failure goes to the caller.
    """

    def __init__(self, settings: Optional[NormalizerSettings] = None,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the repair loop.

        Args:
            settings: ffmpeg path, temp suffix and timeout
            runner: subprocess.run compatible callable
            logger: Logger to report repairs to
        """
        self.settings = settings or NormalizerSettings()
        self.runner = runner
        self.logger = logger or _log

    def temp_path(self, file_path: Path) -> Path:
        """Sibling path ffmpeg writes to, e.g. song.fix.mp3."""
        file_path = Path(file_path)
        return file_path.with_name(
            f"{file_path.stem}{self.settings.repair_suffix}{file_path.suffix}"
        )

    def build_command(self, file_path: Path, output: Path,
                      strip_metadata: bool) -> List[str]:
        """Build the ffmpeg command that copies the audio streams."""
        cmd = [self.settings.ffmpeg_path, "-y", "-i", str(file_path)]
        if strip_metadata:
            cmd += ["-map_metadata", "-1", "-c:a", "copy"]
        else:
            cmd += ["-codec", "copy"]
        cmd.append(str(output))
        return cmd

    def rebuild(self, file_path: Path, strip_metadata: bool) -> None:
        """
        Re-encode a file into a fresh container and swap it into place.

        Args:
            file_path: File to rebuild
            strip_metadata: Drop all existing metadata (used after a write failure)

        Raises:
            RepairError: If ffmpeg is missing, times out or fails
        """
        file_path = Path(file_path)
        tmp_file = self.temp_path(file_path)
        cmd = self.build_command(file_path, tmp_file, strip_metadata)
        self.logger.debug(f"Running command: {' '.join(cmd)}")

        try:
            process = self.runner(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.settings.repair_timeout,
            )
            if process.returncode != 0:
                raise RepairError(file_path, f"ffmpeg exited with code {process.returncode}")
            if not tmp_file.exists():
                raise RepairError(file_path, f"ffmpeg produced no output at {tmp_file}")
            os.replace(tmp_file, file_path)
        except subprocess.TimeoutExpired as e:
            raise RepairError(
                file_path, f"ffmpeg timed out after {self.settings.repair_timeout}s"
            ) from e
        except OSError as e:
            raise RepairError(file_path, f"could not run ffmpeg: {e}") from e
        finally:
            if tmp_file.exists():
                try:
                    tmp_file.unlink()
                except OSError as e:
                    self.logger.warning(f"Failed to delete temp file {tmp_file}: {e}")

    def run(self, file_path: Path, operation: Callable[[], Any]) -> RepairOutcome:
        """
        Run `operation`, repairing the file and retrying once if it fails.

        A TagReadError repairs with metadata kept; a TagWriteError repairs
        with metadata stripped.

        Raises:
            RepairError: If the rebuild fails
            NormalizerError: Whatever the retried operation raises
        """
        state = RepairState.ATTEMPT
        strip_metadata = False
        repaired = False
        value = None

        while state is not RepairState.SUCCESS:
            if state is RepairState.ATTEMPT:
                try:
                    value = operation()
                    state = RepairState.SUCCESS
                except TagReadError as e:
                    self.logger.warning(f"{e}; rebuilding container")
                    strip_metadata = False
                    state = RepairState.REPAIR
                except TagWriteError as e:
                    self.logger.warning(f"{e}; rebuilding without metadata")
                    strip_metadata = True
                    state = RepairState.REPAIR

            elif state is RepairState.REPAIR:
                self.rebuild(file_path, strip_metadata)
                repaired = True
                state = RepairState.RETRY

            elif state is RepairState.RETRY:
                # Single retry: anything raised here goes to the caller
                value = operation()
                self.logger.info(f"Repaired: {file_path}")
                state = RepairState.SUCCESS

        return RepairOutcome(state=state, repaired=repaired, value=value)
