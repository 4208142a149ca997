"""Error taxonomy for the report pipeline.

Purpose
-------
Every failure in the pipeline surfaces as a :class:`DependencyReportError`
subclass that names the step which failed and keeps the underlying cause.
The CLI prints ``Unable to <step>: <cause>`` and exits non-zero.

Contents
--------
* :class:`DependencyReportError` - base class carrying ``step`` and ``cause``
* :class:`ReportIOError` - filesystem failures
* :class:`ReportEnvironmentError` - invalid lister environment
* :class:`DependencyListError` / :class:`FormatError` - external tool failures
* :class:`RepoStateError` / :class:`CheckoutError` / :class:`CommitError` /
  :class:`PushError` - version-control failures
* :class:`CommandError` / :class:`GitCommandError` - raw process failures,
  wrapped into the classes above by the pipeline
"""

from __future__ import annotations

from collections.abc import Sequence


class DependencyReportError(Exception):
    """A pipeline step failed.

    Attributes:
        step: Short description of the failed operation, e.g. ``"commit"``.
        cause: The underlying exception or message, if any.
    """

    def __init__(self, step: str, cause: BaseException | str | None = None) -> None:
        super().__init__(step)
        self.step = step
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None or str(self.cause) == "":
            return self.step
        return f"{self.step}: {self.cause}"


class ReportIOError(DependencyReportError):
    """Creating the output path or writing a report file failed."""


class ReportEnvironmentError(DependencyReportError):
    """The environment for the dependency lister could not be built."""


class DependencyListError(DependencyReportError):
    """The dependency lister failed or emitted malformed output."""


class FormatError(DependencyReportError):
    """The report formatter failed."""


class RepoStateError(DependencyReportError):
    """Reading or staging repository state failed."""


class CheckoutError(DependencyReportError):
    """Switching branches failed."""


class CommitError(DependencyReportError):
    """Creating the report commit failed."""


class PushError(DependencyReportError):
    """Pushing the publishing branch failed."""


class CommandError(RuntimeError):
    """An external command exited non-zero, could not be started or wrote undecodable output."""

    def __init__(self, argv: Sequence[str], returncode: int | None, stderr: str = "") -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(self._describe())

    def _describe(self) -> str:
        command = " ".join(self.argv)
        if self.returncode is None:
            return f"{command} failed: {self.stderr}"
        detail = f": {self.stderr}" if self.stderr else ""
        return f"{command} exited with status {self.returncode}{detail}"


class GitCommandError(CommandError):
    """A git invocation failed."""


__all__ = [
    "CheckoutError",
    "CommandError",
    "CommitError",
    "DependencyListError",
    "DependencyReportError",
    "FormatError",
    "GitCommandError",
    "PushError",
    "RepoStateError",
    "ReportEnvironmentError",
    "ReportIOError",
]
