"""Display of the merged configuration for the ``config`` command.

The output is either TOML-like text, one ``[section]`` block per
top-level key, or JSON. Asking for a section that does not exist prints an
error and exits with status 1.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import click

from .config import get_config


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple, Mapping)):
        return json.dumps(_plain(value))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _echo_section(name: str, data: Any) -> None:
    click.echo(f"\n[{name}]")
    if not isinstance(data, Mapping):
        click.echo(f"  {_format_value(data)}")
        return
    for key, value in data.items():
        click.echo(f"  {key} = {_format_value(value)}")


def _missing_section(section: str) -> None:
    click.echo(f"Section '{section}' not found or empty", err=True)
    raise SystemExit(1)


def display_config(*, format: str = "human", section: str | None = None) -> None:
    """Print the effective configuration.

    Args:
        format: ``"human"`` or ``"json"``.
        section: Only print this top-level section.

    Side Effects:
        Writes to stdout via click.echo(); raises SystemExit(1) when
        ``section`` is missing.
    """
    config = get_config()
    data: dict[str, Any] = _plain(config.as_dict())

    if section is not None:
        if not data.get(section):
            _missing_section(section)
        data = {section: data[section]}

    if format.lower() == "json":
        click.echo(json.dumps(data, indent=2))
        return
    for name, value in data.items():
        _echo_section(name, value)


__all__ = ["display_config"]
