"""Artifact storage used to hand coverage reports from jobs to the gate."""

from __future__ import annotations

import fnmatch
import shutil
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from ciorch_common.io import ensure_dir
from ciorch_logging import get_logger

logger = get_logger(__name__)


class ArtifactStore(ABC):
    """Named artifact upload and pattern-based download."""

    @abstractmethod
    def upload(self, name: str, paths: Iterable[Path]) -> None:
        """Store ``paths`` under the artifact ``name``."""

    @abstractmethod
    def download(self, pattern: str, destination: Path) -> list[Path]:
        """Fetch every artifact whose name matches ``pattern`` into ``destination``.

        Returns
        -------
        list[Path]
            Downloaded files
        """


class LocalArtifactStore(ArtifactStore):
    """Artifacts kept as one directory per name under ``root``."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def names(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def upload(self, name: str, paths: Iterable[Path]) -> None:
        target = ensure_dir(self.root / name)
        count = 0
        for path in paths:
            shutil.copy2(path, target / Path(path).name)
            count += 1
        logger.debug("Uploaded %d files to artifact %s", count, name)

    def download(self, pattern: str, destination: Path) -> list[Path]:
        files: list[Path] = []
        for name in self.names():
            if not fnmatch.fnmatch(name, pattern):
                continue
            target = ensure_dir(destination / name)
            for source in sorted((self.root / name).iterdir()):
                if source.is_file():
                    copied = target / source.name
                    shutil.copy2(source, copied)
                    files.append(copied)
        logger.info(
            "Downloaded %d files matching %r into %s",
            len(files),
            pattern,
            destination,
        )
        return files
