"""Generate and publish a dependency freshness report.

The tool lists a project's dependencies, renders a markdown report of the
outdated ones and all of them, writes it locally and, when a publishing
token is available, commits and pushes it to the ``gh-pages`` branch.

Main API
--------
* :func:`run_pipeline` - Run the full report pipeline
* :class:`ReportSettings` - Settings resolved from layered configuration
* :class:`Publisher` - Commit and push the report on the publishing branch
* :class:`DependencyReportError` - Base class of all pipeline failures
"""

from __future__ import annotations

from .__init__conf__ import print_info
from .config import ReportSettings, get_config, get_report_settings
from .errors import (
    CheckoutError,
    CommitError,
    DependencyListError,
    DependencyReportError,
    FormatError,
    PushError,
    RepoStateError,
    ReportEnvironmentError,
    ReportIOError,
)
from .formatter import CommandFormatter, MarkdownTableFormatter
from .git import Repository
from .models import DependencyRecord, FormatMode, PublishState, Report, ReportFragment, RepositoryState
from .pipeline import RunResult, generate_report, run_pipeline
from .publisher import Publisher
from .report import render_report

__all__ = [
    "CheckoutError",
    "CommandFormatter",
    "CommitError",
    "DependencyListError",
    "DependencyRecord",
    "DependencyReportError",
    "FormatError",
    "FormatMode",
    "MarkdownTableFormatter",
    "PublishState",
    "Publisher",
    "PushError",
    "RepoStateError",
    "Report",
    "ReportEnvironmentError",
    "ReportFragment",
    "ReportIOError",
    "ReportSettings",
    "Repository",
    "RepositoryState",
    "RunResult",
    "generate_report",
    "get_config",
    "get_report_settings",
    "print_info",
    "render_report",
    "run_pipeline",
]
