"""Markdown formatting of the dependency list.

Purpose
-------
Turn the lister's output into the two markdown fragments of the report:
outdated direct dependencies, and all dependencies.

Contents
--------
* :class:`Formatter` - protocol shared by both implementations
* :class:`CommandFormatter` - pipes the list file into an external tool
* :class:`MarkdownTableFormatter` - renders the tables in-process
* :func:`create_formatter` - picks an implementation from a command
* :func:`format_fragments` - runs the two passes in order
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .command import run_command
from .errors import CommandError, FormatError
from .models import DependencyRecord, FormatMode, ReportFragment

logger = logging.getLogger(__name__)

_MODE_ARGUMENTS: dict[FormatMode, tuple[str, ...]] = {
    FormatMode.OUTDATED: ("--direct", "--update", "--style=markdown"),
    FormatMode.ALL: ("--style=markdown",),
}

_COLUMNS = ("MODULE", "VERSION", "NEW VERSION", "DIRECT")


class Formatter(Protocol):
    """Renders the dependency list file as markdown for one mode."""

    def format(self, list_file: Path, mode: FormatMode) -> ReportFragment:
        ...


@dataclass(frozen=True, slots=True)
class CommandFormatter:
    """Formatter backed by an external command such as go-mod-outdated.

    The list file is fed on stdin; the mode decides the extra arguments.
    Relative commands resolve against ``cwd``, the repository root.
    """

    command: tuple[str, ...]
    cwd: Path | None = None

    def format(self, list_file: Path, mode: FormatMode) -> ReportFragment:
        argv = [*self.command, *_MODE_ARGUMENTS[mode]]
        try:
            with list_file.open(encoding="utf-8") as stdin:
                output = run_command(argv, stdin=stdin, cwd=self.cwd)
        except OSError as exc:
            raise CommandError(argv, None, str(exc)) from exc
        return ReportFragment(mode=mode, markdown=output)


def _cell(value: str) -> str:
    return value.replace("|", "\\|")


def _row(cells: Iterable[str]) -> str:
    return "| " + " | ".join(_cell(c) for c in cells) + " |"


def select_records(records: Iterable[DependencyRecord], mode: FormatMode) -> list[DependencyRecord]:
    """Filter records for a mode: direct and outdated, or everything."""
    if mode is FormatMode.OUTDATED:
        return [r for r in records if r.direct and r.is_outdated]
    return list(records)


def render_table(records: Sequence[DependencyRecord]) -> str:
    """Render records as a markdown table, keeping their order."""
    lines = [_row(_COLUMNS), _row("-" * len(c) for c in _COLUMNS)]
    for record in records:
        lines.append(
            _row(
                (
                    record.module_path,
                    record.current_version,
                    record.available_version if record.is_outdated else "",
                    "true" if record.direct else "false",
                )
            )
        )
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class MarkdownTableFormatter:
    """In-process formatter producing the same two tables as go-mod-outdated.

    Works on records already validated by
    :func:`~dependency_report.lister.parse_module_stream`; the list file is not
    read again.
    """

    records: tuple[DependencyRecord, ...] = ()

    def format(self, list_file: Path, mode: FormatMode) -> ReportFragment:
        records = select_records(self.records, mode)
        return ReportFragment(mode=mode, markdown=render_table(records))


def create_formatter(
    command: Sequence[str],
    records: Sequence[DependencyRecord] = (),
    *,
    cwd: Path | None = None,
) -> Formatter:
    """Return a CommandFormatter for ``command``, or the built-in one over ``records`` if empty."""
    if command:
        return CommandFormatter(command=tuple(command), cwd=cwd)
    return MarkdownTableFormatter(records=tuple(records))


def _run_pass(formatter: Formatter, list_file: Path, mode: FormatMode, step: str) -> ReportFragment:
    try:
        return formatter.format(list_file, mode)
    except CommandError as exc:
        raise FormatError(step, exc) from exc


def format_fragments(formatter: Formatter, list_file: Path) -> tuple[ReportFragment, ReportFragment]:
    """Run the outdated pass, then the all pass, against the same list file.

    Raises:
        FormatError: If either pass fails; a failed first pass skips the second.
    """
    logger.info("Retrieving outdated dependencies")
    outdated = _run_pass(formatter, list_file, FormatMode.OUTDATED, "retrieving outdated dependencies")
    logger.info("Retrieving all dependencies")
    everything = _run_pass(formatter, list_file, FormatMode.ALL, "retrieving all dependencies")
    return outdated, everything


__all__ = [
    "CommandFormatter",
    "Formatter",
    "MarkdownTableFormatter",
    "create_formatter",
    "format_fragments",
    "render_table",
    "select_records",
]
