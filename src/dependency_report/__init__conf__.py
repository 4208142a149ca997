"""Static package metadata and configuration identifiers.

The LAYEREDCONF_* constants feed :func:`dependency_report.config.get_config`
and decide where lib_layered_config looks for app, host and user files.
"""

from __future__ import annotations

import click

name = "dependency_report"
title = "Generate and publish a dependency freshness report"
version = "1.0.0"
homepage = "https://github.com/cri-o/cri-o"
shell_command = "dependency-report"

LAYEREDCONF_VENDOR = "cri-o"
LAYEREDCONF_APP = "dependency-report"
LAYEREDCONF_SLUG = "dependency-report"


def print_info() -> None:
    """Print the package metadata block."""
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    click.echo(f"Info for {name}:\n")
    for label, value in fields:
        click.echo(f"    {label:<{pad}} = {value}")


__all__ = [
    "LAYEREDCONF_APP",
    "LAYEREDCONF_SLUG",
    "LAYEREDCONF_VENDOR",
    "print_info",
]
