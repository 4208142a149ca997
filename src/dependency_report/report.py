"""Rendering and local writing of the dependency report."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from .errors import ReportIOError
from .models import Report

logger = logging.getLogger(__name__)

_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

REPORT_TEMPLATE = """\
# {project} Dependency Report

_Generated on {timestamp} for commit [{short_commit}][0]._

[0]: {commit_link}

## Outdated Dependencies

{outdated}

## All Dependencies

{all}
"""


def format_rfc1123(moment: datetime) -> str:
    """Format ``moment`` like ``Mon, 02 Jan 2006 15:04:05 MST``.

    Naive datetimes are taken as local time. Day and month names are always
    English, whatever the locale.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    zone = moment.tzname() or "UTC"
    return (
        f"{_DAYS[moment.weekday()]}, {moment.day:02d} {_MONTHS[moment.month - 1]} "
        f"{moment.year:04d} {moment:%H:%M:%S} {zone}"
    )


def render_report(report: Report, *, project_name: str, commit_url: str) -> str:
    """Render the markdown document.

    Args:
        report: Timestamp, commit and both fragments.
        project_name: Name shown in the title.
        commit_url: URL template with a ``{commit}`` placeholder for the full hash.
    """
    return REPORT_TEMPLATE.format(
        project=project_name,
        timestamp=format_rfc1123(report.generated_at),
        short_commit=report.short_commit,
        commit_link=commit_url.format(commit=report.commit),
        outdated=report.outdated.markdown.rstrip("\n"),
        all=report.all.markdown.rstrip("\n"),
    )


def write_report(content: str, output_path: Path | str, file_name: str) -> Path:
    """Replace ``output_path/file_name`` with ``content``.

    A pre-existing file is removed first; a missing one is fine.

    Raises:
        ReportIOError: If the old file cannot be removed or the new one written.
    """
    target = Path(output_path) / file_name
    try:
        target.unlink(missing_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ReportIOError("writing report", exc) from exc
    logger.info("Wrote report to %s", target)
    return target


__all__ = [
    "REPORT_TEMPLATE",
    "format_rfc1123",
    "render_report",
    "write_report",
]
