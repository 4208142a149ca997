"""Command-line interface.

``dependency-report`` with no subcommand runs the pipeline; ``config``
shows the merged configuration and ``info`` prints package metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import click

from . import __init__conf__
from .config import get_log_level, get_report_settings
from .config_show import display_config
from .errors import DependencyReportError
from .models import PublishState
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _configure_logging() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(levelname)s %(message)s",
        force=True,
    )


@click.group(
    help=__init__conf__.title,
    invoke_without_command=True,
    context_settings=CLICK_CONTEXT_SETTINGS,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--output-path",
    default="",
    show_default=True,
    help="Directory the markdown report is written to (empty: current directory).",
)
@click.pass_context
def cli(ctx: click.Context, output_path: str) -> None:
    """Generate the dependency report, then publish it when a token is set."""
    _configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["output_path"] = output_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(cli_run, output_path=None)


@cli.command("run", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--output-path", default=None, help="Overrides the group-level --output-path.")
@click.pass_context
def cli_run(ctx: click.Context, output_path: str | None) -> None:
    """Generate and publish the dependency report."""
    if output_path is None:
        output_path = (ctx.obj or {}).get("output_path", "")
    settings = get_report_settings()
    try:
        result = run_pipeline(output_path, settings)
    except DependencyReportError as exc:
        logger.critical("Unable to %s", exc)
        raise SystemExit(1) from exc
    if result.publish_state is PublishState.SKIPPED:
        logger.info("Report written to %s; publishing skipped", result.report_path)
    else:
        logger.info("Report published to %s", settings.publish_branch)


@cli.command("config", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format.",
)
@click.option("--section", default=None, help="Show only this section, e.g. 'report'.")
def cli_config(output_format: str, section: str | None) -> None:
    """Show the merged configuration from all sources."""
    display_config(format=output_format, section=section)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""
    __init__conf__.print_info()


def main(argv: Sequence[str] | None = None) -> None:
    """Console-script entry point."""
    cli.main(args=list(argv) if argv is not None else None, prog_name=__init__conf__.shell_command)


__all__ = ["cli", "main"]
