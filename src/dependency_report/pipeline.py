"""Report generation and publication pipeline.

Purpose
-------
Run the whole report in order: prepare the output path, list
dependencies, format both fragments, render, write locally, publish.
The first failing step aborts the run with a
:class:`~dependency_report.errors.DependencyReportError`.

Contents
--------
* :class:`RunResult` - what a run produced
* :func:`generate_report` - everything up to and including the local write
* :func:`run_pipeline` - generate, then publish
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .config import ReportSettings
from .errors import GitCommandError, RepoStateError
from .formatter import Formatter, create_formatter, format_fragments
from .git import Repository
from .lister import (
    dependency_list_file,
    list_dependencies,
    lister_environment,
    parse_module_stream,
    prepare_output_path,
)
from .models import PublishState, Report
from .publisher import Publisher
from .report import render_report, write_report

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of a successful run.

    Attributes:
        report_path: Local file the report was written to.
        content: Rendered markdown.
        publish_state: ``SKIPPED`` or ``BRANCH_RESTORED``.
    """

    report_path: Path
    content: str
    publish_state: PublishState


def generate_report(
    output_path: Path | str,
    settings: ReportSettings,
    *,
    repository: Repository,
    formatter: Formatter | None = None,
    now: datetime | None = None,
    base_env: Mapping[str, str] | None = None,
) -> tuple[Path, str]:
    """Build the report and write it to ``output_path``.

    The lister output is validated before any formatter sees it.

    Returns:
        The local report path and the rendered content.

    Raises:
        DependencyListError: If the lister fails or its output is malformed.
    """
    directory = prepare_output_path(output_path)
    env = lister_environment(base_env, settings.lister_env)
    raw = list_dependencies(settings.lister_command, env=env, cwd=repository.path)
    records = parse_module_stream(raw)

    if formatter is None:
        formatter = create_formatter(settings.formatter_command, records, cwd=repository.path)
    with dependency_list_file(raw) as list_file:
        outdated, everything = format_fragments(formatter, list_file)

    try:
        head = repository.head()
    except GitCommandError as exc:
        raise RepoStateError("get repository HEAD", exc) from exc

    report = Report(
        generated_at=now or datetime.now(timezone.utc).astimezone(),
        commit=head,
        outdated=outdated,
        all=everything,
    )
    content = render_report(report, project_name=settings.project_name, commit_url=settings.commit_url)
    return write_report(content, directory, settings.report_file), content


def run_pipeline(
    output_path: Path | str,
    settings: ReportSettings,
    *,
    repository: Repository | None = None,
    formatter: Formatter | None = None,
    now: datetime | None = None,
    environ: Mapping[str, str] | None = None,
) -> RunResult:
    """Generate the report and publish it when the credential is present.

    Args:
        output_path: Directory for the local report; empty means cwd.
        settings: Resolved report settings.
        repository: Repository to report on; built from settings when None.
        formatter: Formatter override; built from settings when None.
        now: Generation time; the current time when None.
        environ: Environment used for the lister and the credential check;
            ``os.environ`` when None.

    Raises:
        DependencyReportError: The first step that failed.
    """
    if repository is None:
        repository = Repository(path=settings.repository_path)
    report_path, content = generate_report(
        output_path,
        settings,
        repository=repository,
        formatter=formatter,
        now=now,
        base_env=environ,
    )
    publisher = Publisher(
        repository=repository,
        branch=settings.publish_branch,
        remote=settings.remote,
        file_name=settings.report_file,
        commit_message=settings.commit_message,
        token_env=settings.token_env,
    )
    state = publisher.publish(content, environ)
    return RunResult(report_path=report_path, content=content, publish_state=state)


__all__ = [
    "RunResult",
    "generate_report",
    "run_pipeline",
]
