"""Version control through the ``git`` command line."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from ciorch.common.errors import VcsError
from ciorch.reconcile.interfaces import VersionControl
from ciorch_logging import get_logger

logger = get_logger(__name__)

REMOTE = "origin"

# ``git ls-remote --exit-code`` exits with 2 when no matching ref exists.
LS_REMOTE_NO_MATCH = 2


class GitCli(VersionControl):
    """Run git commands in ``workdir``."""

    def __init__(self, workdir: Path | str = ".", remote: str = REMOTE) -> None:
        self.workdir = Path(workdir)
        self.remote = remote

    def _run(
        self,
        args: Sequence[str],
        ok_codes: tuple[int, ...] = (0,),
    ) -> subprocess.CompletedProcess[str]:
        command = ["git", *args]
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.workdir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            msg = f"Cannot run git: {e}"
            raise VcsError(msg, command=command) from e

        if result.returncode not in ok_codes:
            message = result.stderr.strip() or result.stdout.strip() or "unknown git error"
            msg = f"git {' '.join(args)} failed: {message}"
            raise VcsError(
                msg,
                command=command,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    def changed_paths(self, scope: Sequence[str]) -> list[str]:
        result = self._run(["status", "--porcelain", "--", *scope])
        paths = []
        for line in result.stdout.splitlines():
            if len(line) < 4:
                continue
            # "XY path" or "XY old -> new" for renames
            path = line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            paths.append(path.strip('"'))
        return paths

    def remote_branch_exists(self, branch: str) -> bool:
        result = self._run(
            ["ls-remote", "--exit-code", self.remote, f"refs/heads/{branch}"],
            ok_codes=(0, LS_REMOTE_NO_MATCH),
        )
        return result.returncode == 0

    def checkout(self, branch: str) -> None:
        self._run(["checkout", branch])

    def create_branch(self, branch: str) -> None:
        self._run(["checkout", "-b", branch])

    def configure_author(self, name: str, email: str) -> None:
        self._run(["config", "user.name", name])
        self._run(["config", "user.email", email])

    def stage(self, scope: Sequence[str]) -> None:
        self._run(["add", "--", *scope])

    def commit(self, message: str) -> None:
        self._run(["commit", "-m", message])

    def force_push(self, branch: str) -> None:
        self._run(["push", "-f", "--set-upstream", self.remote, branch])
