"""Domain models for the dependency report (dataclasses).

Purpose
-------
Define the data that flows through the report pipeline. These are plain
dataclasses; the lister's raw JSON is validated by the pydantic schemas in
schemas.py and converted into :class:`DependencyRecord` at the boundary.

Data Flow Pattern
-----------------
Lister JSON → Pydantic (validate) → DependencyRecord → Formatter → ReportFragment
→ Report → markdown

Contents
--------
* :class:`FormatMode` - The two formatter passes
* :class:`PublishState` - States the publisher moves through
* :class:`DependencyRecord` - One resolved module and its available update
* :class:`ReportFragment` - Markdown produced by one formatter pass
* :class:`Report` - Everything needed to render the final document
* :class:`RepositoryState` - Branch and HEAD captured before any mutation
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

SHORT_COMMIT_LENGTH = 7


class FormatMode(str, Enum):
    """Formatter passes run over the same dependency list.

    Attributes:
        OUTDATED: Direct dependencies with a newer version available.
        ALL: Every dependency, unfiltered.
    """

    OUTDATED = "outdated"
    ALL = "all"


class PublishState(str, Enum):
    """Progress of the publisher.

    ``SKIPPED`` and ``BRANCH_RESTORED`` are the normal terminal states;
    ``FAILED`` is recorded when any step raises.
    """

    NOT_STARTED = "not started"
    BRANCH_CAPTURED = "branch captured"
    CHECKED_OUT_TARGET = "checked out target"
    FILE_WRITTEN = "file written"
    STAGED = "staged"
    COMMITTED = "committed"
    PUSHED = "pushed"
    BRANCH_RESTORED = "branch restored"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DependencyRecord:
    """A resolved dependency as reported by the lister.

    Attributes:
        module_path: Module identifier, e.g. ``github.com/pkg/errors``.
        current_version: Version currently selected by the project.
        available_version: Latest version known to the lister; equal to
            ``current_version`` when no update was reported.
        direct: Whether the project declares the dependency itself.
    """

    module_path: str
    current_version: str
    available_version: str
    direct: bool

    @property
    def is_outdated(self) -> bool:
        """True when a different (newer) version is available."""
        return bool(self.available_version) and self.available_version != self.current_version


@dataclass(frozen=True, slots=True)
class ReportFragment:
    """Markdown text produced by one formatter pass."""

    mode: FormatMode
    markdown: str


@dataclass(frozen=True, slots=True)
class Report:
    """Inputs of the rendered report.

    Attributes:
        generated_at: Timestamp shown in the generation line.
        commit: Full HEAD commit hash.
        outdated: Fragment for the "Outdated Dependencies" section.
        all: Fragment for the "All Dependencies" section.
    """

    generated_at: datetime
    commit: str
    outdated: ReportFragment
    all: ReportFragment

    @property
    def short_commit(self) -> str:
        """First seven characters of the commit hash."""
        return self.commit[:SHORT_COMMIT_LENGTH]


@dataclass(frozen=True, slots=True)
class RepositoryState:
    """Branch and HEAD captured before the publisher touches the repository."""

    branch: str
    head: str


__all__ = [
    "DependencyRecord",
    "FormatMode",
    "PublishState",
    "Report",
    "ReportFragment",
    "RepositoryState",
    "SHORT_COMMIT_LENGTH",
]
