"""Version-control collaborators.

Git has no exclusive checkout, so a tracked file counts as "checked out"
when it is writable, and checking it out makes it writable again. This
covers working copies where generated files were marked read-only (e.g.
by a lock-based workflow or `git update-index --skip-worktree` tooling).
"""

from __future__ import annotations

import logging
import os
import stat
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_TIMEOUT_S = 10


class GitVersionControl:
    """Version control backed by the `git` command line."""

    def __init__(self, repo_path: str | Path) -> None:
        self.repo_path = Path(repo_path)

    def _run_git(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository.

        Args:
            args: Git command arguments (without 'git')

        Returns:
            The completed process; callers check returncode.
        """
        cmd = ["git", "-C", str(self.repo_path), *args]
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_S,
        )

    def is_tracked(self, path: str) -> bool:
        """Whether git tracks the file at `path`."""
        result = self._run_git(["ls-files", "--error-unmatch", "--", str(path)])
        return result.returncode == 0

    def is_checked_out(self, path: str) -> bool:
        """Whether the file can be written in place."""
        return os.access(path, os.W_OK)

    def check_out(self, path: str) -> None:
        """Make the file writable for the current user."""
        mode = Path(path).stat().st_mode
        os.chmod(path, mode | stat.S_IWUSR)
        logger.info("Made %s writable", path)


class NullVersionControl:
    """Version control that tracks nothing; every checkout is a no-op."""

    def is_tracked(self, path: str) -> bool:
        return False

    def is_checked_out(self, path: str) -> bool:
        return True

    def check_out(self, path: str) -> None:
        return None


def create_version_control(backend: str, repo_path: str | Path, enabled: bool = True):
    """Build the version-control collaborator named in the config.

    Args:
        backend: "git" or "none"
        repo_path: Repository working directory
        enabled: When False, version control is never consulted

    Returns:
        A VersionControl implementation.
    """
    if not enabled or backend == "none":
        return NullVersionControl()
    if backend == "git":
        return GitVersionControl(repo_path)
    raise ValueError(f"Unknown version control backend: {backend}")
