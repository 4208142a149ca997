"""Thin git client driven through subprocess.

Each method maps onto one git invocation in the repository's working tree
and raises :class:`~dependency_report.errors.GitCommandError` on failure.
Callers decide which pipeline error that becomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .command import run_command
from .errors import GitCommandError
from .models import RepositoryState


@dataclass(slots=True)
class Repository:
    """A local git working tree."""

    path: Path = field(default_factory=lambda: Path("."))
    git_executable: str = "git"

    def head(self) -> str:
        """Return the full hash of HEAD."""
        return self._run_git("rev-parse", "HEAD")

    def current_branch(self) -> str:
        """Return the checked-out branch; fails on a detached HEAD."""
        return self._run_git("symbolic-ref", "--quiet", "--short", "HEAD")

    def state(self) -> RepositoryState:
        return RepositoryState(branch=self.current_branch(), head=self.head())

    def checkout(self, branch: str) -> None:
        self._run_git("checkout", "--quiet", branch)

    def add(self, *paths: str) -> None:
        self._run_git("add", "--", *paths)

    def commit(self, message: str) -> None:
        self._run_git("commit", "--quiet", "--message", message)

    def push(self, remote: str, branch: str) -> None:
        self._run_git("push", "--quiet", remote, f"{branch}:{branch}")

    def _run_git(self, *args: str) -> str:
        return run_command(
            [self.git_executable, *args],
            cwd=self.path,
            error=GitCommandError,
        )


__all__ = ["Repository"]
