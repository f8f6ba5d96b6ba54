"""Tests for ciorch.reconcile.git."""

import subprocess
from unittest.mock import patch

import pytest

from ciorch.common.errors import VcsError
from ciorch.reconcile.git import GitCli


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(["git"], returncode, stdout, stderr)


@pytest.mark.unit
class TestGitCli:
    """Tests for GitCli."""

    @pytest.fixture
    def git(self, tmp_path):
        """GitCli rooted in a temporary directory."""
        return GitCli(tmp_path)

    def test_changed_paths_parses_porcelain(self, git):
        """Test parsing of modified, untracked and renamed entries."""
        output = " M docs/a.html\n?? docs/new.html\nR  docs/old.html -> docs/moved.html\n"
        with patch("subprocess.run", return_value=_completed(stdout=output)) as run:
            paths = git.changed_paths(["docs"])

        assert paths == ["docs/a.html", "docs/new.html", "docs/moved.html"]
        assert run.call_args.args[0] == ["git", "status", "--porcelain", "--", "docs"]
        assert run.call_args.kwargs["cwd"] == git.workdir

    def test_changed_paths_empty(self, git):
        """Test a clean working tree."""
        with patch("subprocess.run", return_value=_completed(stdout="")):
            assert git.changed_paths(["docs"]) == []

    def test_remote_branch_exists(self, git):
        """Test that exit code 0 means the branch exists."""
        with patch("subprocess.run", return_value=_completed(0, "abc\trefs/heads/b\n")) as run:
            assert git.remote_branch_exists("b") is True

        assert run.call_args.args[0] == [
            "git",
            "ls-remote",
            "--exit-code",
            "origin",
            "refs/heads/b",
        ]

    def test_remote_branch_absent(self, git):
        """Test that exit code 2 means no such branch."""
        with patch("subprocess.run", return_value=_completed(2)):
            assert git.remote_branch_exists("b") is False

    def test_remote_unreachable(self, git):
        """Test that other ls-remote failures are errors."""
        with patch("subprocess.run", return_value=_completed(128, stderr="fatal: no remote")):
            with pytest.raises(VcsError) as exc_info:
                git.remote_branch_exists("b")

        assert exc_info.value.returncode == 128
        assert "fatal: no remote" in exc_info.value.stderr

    def test_force_push_command(self, git):
        """Test the push invocation."""
        with patch("subprocess.run", return_value=_completed()) as run:
            git.force_push("bot/artifacts")

        assert run.call_args.args[0] == [
            "git",
            "push",
            "-f",
            "--set-upstream",
            "origin",
            "bot/artifacts",
        ]

    def test_stage_uses_pathspec(self, git):
        """Test that staging is limited to the scope."""
        with patch("subprocess.run", return_value=_completed()) as run:
            git.stage(["docs", "api"])

        assert run.call_args.args[0] == ["git", "add", "--", "docs", "api"]

    def test_branch_commands(self, git):
        """Test checkout and branch creation."""
        with patch("subprocess.run", return_value=_completed()) as run:
            git.checkout("b")
            git.create_branch("c")

        commands = [c.args[0] for c in run.call_args_list]
        assert commands == [["git", "checkout", "b"], ["git", "checkout", "-b", "c"]]

    def test_configure_author(self, git):
        """Test that name and email are both configured."""
        with patch("subprocess.run", return_value=_completed()) as run:
            git.configure_author("bot", "bot@example.invalid")

        commands = [c.args[0] for c in run.call_args_list]
        assert commands == [
            ["git", "config", "user.name", "bot"],
            ["git", "config", "user.email", "bot@example.invalid"],
        ]

    def test_commit_failure(self, git):
        """Test that a failing commit raises VcsError."""
        with patch("subprocess.run", return_value=_completed(1, stdout="nothing to commit")):
            with pytest.raises(VcsError, match="nothing to commit"):
                git.commit("msg")

    def test_git_missing(self, git):
        """Test that a missing git binary raises VcsError."""
        with patch("subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(VcsError, match="Cannot run git"):
                git.checkout("b")
