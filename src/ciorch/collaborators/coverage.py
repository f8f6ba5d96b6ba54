"""Coverage backend uploads."""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from ciorch.common.errors import CoverageUploadError
from ciorch_logging import get_logger

logger = get_logger(__name__)

CODECOV_CLI = "codecovcli"


class CoverageUploader(ABC):
    """Send coverage reports to a backend."""

    @abstractmethod
    def upload(self, token: str, files: Sequence[Path]) -> None:
        """Upload ``files``.

        Raises
        ------
        CoverageUploadError
            If the backend does not accept the reports
        """


class CodecovUploader(CoverageUploader):
    """Upload through ``codecovcli upload-process``.

    A failed upload is always fatal.
    """

    def __init__(self, executable: str = CODECOV_CLI, extra_args: Sequence[str] = ()) -> None:
        self.executable = executable
        self.extra_args = tuple(extra_args)

    def build_command(self, token: str, files: Sequence[Path]) -> list[str]:
        command = [self.executable, "upload-process", "-t", token, "--fail-on-error"]
        for path in files:
            command.extend(["-f", str(path)])
        command.extend(self.extra_args)
        return command

    def upload(self, token: str, files: Sequence[Path]) -> None:
        if not files:
            msg = "No coverage reports to upload"
            raise CoverageUploadError(msg)

        command = self.build_command(token, files)
        logger.info("Uploading %d coverage reports", len(files))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            msg = f"Cannot run {self.executable}: {e}"
            raise CoverageUploadError(msg) from e

        if result.returncode != 0:
            message = result.stderr.strip() or result.stdout.strip()
            msg = f"Coverage upload failed with exit code {result.returncode}: {message}"
            raise CoverageUploadError(msg)
