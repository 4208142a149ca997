"""Publication of the report to the publishing branch.

Purpose
-------
Commit the rendered report to the root of the publishing branch and push
it, leaving the working tree on whichever branch it started on.

Contents
--------
* :func:`checked_out` - scoped checkout that always switches back
* :class:`Publisher` - walks the publish states and records progress
* :func:`credential_present` - whether the publishing credential is set

System Role
-----------
Last stage of the pipeline. Runs only when the credential variable is
set; otherwise the run ends in the ``SKIPPED`` state with a zero exit.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field

from .errors import (
    CheckoutError,
    CommitError,
    GitCommandError,
    PushError,
    RepoStateError,
    ReportIOError,
)
from .git import Repository
from .models import PublishState, RepositoryState

logger = logging.getLogger(__name__)


def credential_present(token_env: str, environ: Mapping[str, str] | None = None) -> bool:
    """True when ``token_env`` is set to a non-empty value."""
    env = os.environ if environ is None else environ
    return bool(env.get(token_env))


@contextmanager
def checked_out(repository: Repository, branch: str, original: str) -> Iterator[None]:
    """Check out ``branch`` and return to ``original`` on every exit path.

    If switching back fails while the body is already raising, the failure
    is logged and the body's exception propagates. If it fails after a clean
    exit, it is raised as :class:`CheckoutError`.

    Raises:
        CheckoutError: If ``branch`` cannot be checked out, or ``original``
            cannot be restored after a successful body.
    """
    logger.info("Checking out branch %s", branch)
    try:
        repository.checkout(branch)
    except GitCommandError as exc:
        raise CheckoutError(f"checkout {branch} branch", exc) from exc

    try:
        yield
    except BaseException:
        try:
            repository.checkout(original)
        except GitCommandError as restore_exc:
            logger.error("Unable to restore %s branch: %s", original, restore_exc)
        raise
    logger.info("Restoring branch %s", original)
    try:
        repository.checkout(original)
    except GitCommandError as exc:
        raise CheckoutError(f"restore {original} branch", exc) from exc


@dataclass(slots=True)
class Publisher:
    """Commits and pushes the report on the publishing branch.

    Attributes:
        repository: Working tree to publish from.
        branch: Publishing branch, e.g. ``gh-pages``.
        remote: Remote the branch is pushed to.
        file_name: Report path relative to the repository root.
        commit_message: Message of the report commit.
        token_env: Variable holding the publishing credential.
        state: Last state reached.
        captured: Branch and HEAD recorded before the checkout.
    """

    repository: Repository
    branch: str = "gh-pages"
    remote: str = "origin"
    file_name: str = "dependencies.md"
    commit_message: str = "Update dependency report"
    token_env: str = "GITHUB_TOKEN"
    state: PublishState = PublishState.NOT_STARTED
    captured: RepositoryState | None = field(default=None)

    def publish(self, content: str, environ: Mapping[str, str] | None = None) -> PublishState:
        """Publish ``content`` and return the terminal state.

        Returns ``PublishState.SKIPPED`` without touching the repository when
        the credential is missing, otherwise ``PublishState.BRANCH_RESTORED``.

        Raises:
            DependencyReportError: The first failing step; ``state`` is then
                ``PublishState.FAILED``.
        """
        if not credential_present(self.token_env, environ):
            logger.info("%s environment variable is not set", self.token_env)
            self.state = PublishState.SKIPPED
            return self.state
        try:
            self._publish(content)
        except BaseException:
            self.state = PublishState.FAILED
            raise
        self.state = PublishState.BRANCH_RESTORED
        return self.state

    def _publish(self, content: str) -> None:
        try:
            self.captured = self.repository.state()
        except GitCommandError as exc:
            raise RepoStateError("get current branch", exc) from exc
        self.state = PublishState.BRANCH_CAPTURED

        with checked_out(self.repository, self.branch, self.captured.branch):
            self.state = PublishState.CHECKED_OUT_TARGET
            self._write(content)
            self.state = PublishState.FILE_WRITTEN

            try:
                self.repository.add(self.file_name)
            except GitCommandError as exc:
                raise RepoStateError("add file to repo", exc) from exc
            self.state = PublishState.STAGED

            try:
                self.repository.commit(self.commit_message)
            except GitCommandError as exc:
                raise CommitError("commit", exc) from exc
            self.state = PublishState.COMMITTED

            logger.info("Pushing %s to %s", self.branch, self.remote)
            try:
                self.repository.push(self.remote, self.branch)
            except GitCommandError as exc:
                raise PushError("push changes", exc) from exc
            self.state = PublishState.PUSHED

    def _write(self, content: str) -> None:
        target = self.repository.path / self.file_name
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ReportIOError("write content to file", exc) from exc


__all__ = [
    "Publisher",
    "checked_out",
    "credential_present",
]
