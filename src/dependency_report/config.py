"""Configuration management using lib_layered_config.

Purpose
-------
Load the report settings from layered configuration: bundled defaults,
application/host/user config files, ``.env`` files and environment
variables, in that order of precedence.

Contents
--------
* :func:`get_config` – loads configuration with lib_layered_config
* :func:`get_default_config_path` – returns path to bundled default config
* :func:`get_report_settings` – returns the resolved :class:`ReportSettings`
* :func:`get_log_level` – returns the configured logging level name

Configuration identifiers (vendor, app, slug) are imported from
:mod:`dependency_report.__init__conf__` as LAYEREDCONF_* constants.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from lib_layered_config import Config, read_config

from . import __init__conf__

# Environment variable prefix for native (short) env vars
_ENV_PREFIX = "DEPENDENCY_REPORT_"

_DEFAULT_LISTER_COMMAND = ("go", "list", "--mod=mod", "-u", "-m", "--json", "all")
_DEFAULT_FORMATTER_COMMAND = ("./build/bin/go-mod-outdated",)
_COMMAND_KEYS = frozenset({"lister_command", "formatter_command"})


def get_default_config_path() -> Path:
    """Return the path to the bundled defaultconfig.toml."""
    return Path(__file__).parent / "defaultconfig.toml"


@lru_cache(maxsize=1)
def get_config(*, start_dir: str | None = None) -> Config:
    """Load layered configuration with application defaults.

    Loads configuration from multiple sources in precedence order:
    defaults → app → host → user → dotenv → env

    Args:
        start_dir: Optional directory that seeds .env discovery. Defaults to
            current working directory when None.

    Returns:
        Immutable configuration object with provenance tracking.
    """
    return read_config(
        vendor=__init__conf__.LAYEREDCONF_VENDOR,
        app=__init__conf__.LAYEREDCONF_APP,
        slug=__init__conf__.LAYEREDCONF_SLUG,
        default_file=get_default_config_path(),
        start_dir=start_dir,
    )


def _empty_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class ReportSettings:
    """Immutable settings for one report run.

    Attributes:
        project_name: Name used in the report title.
        commit_url: URL template with a ``{commit}`` placeholder.
        report_file: File name of the report, locally and in the repository.
        publish_branch: Branch hosting the published report.
        remote: Remote the publishing branch is pushed to.
        token_env: Environment variable holding the publishing credential.
        commit_message: Message of the report commit.
        repository_path: Working tree of the repository to report on.
        lister_command: Command emitting the dependency list as JSON.
        lister_env: Extra environment for the lister only.
        formatter_command: External formatter; empty selects the built-in one.
    """

    project_name: str = "CRI-O"
    commit_url: str = "https://github.com/cri-o/cri-o/commit/{commit}"
    report_file: str = "dependencies.md"
    publish_branch: str = "gh-pages"
    remote: str = "origin"
    token_env: str = "GITHUB_TOKEN"
    commit_message: str = "Update dependency report"
    repository_path: Path = Path(".")
    lister_command: tuple[str, ...] = _DEFAULT_LISTER_COMMAND
    lister_env: Mapping[str, str] = field(default_factory=_empty_env)
    formatter_command: tuple[str, ...] = _DEFAULT_FORMATTER_COMMAND


def _as_command(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        return tuple(value.split())
    return tuple(str(part) for part in value)


def get_report_settings() -> ReportSettings:
    """Get report settings from configuration with environment variable overrides.

    Native environment variables (``DEPENDENCY_REPORT_PUBLISH_BRANCH`` and
    friends, one per field) take precedence over every configuration layer.
    Command overrides are split on whitespace; an empty
    ``DEPENDENCY_REPORT_FORMATTER_COMMAND`` selects the built-in formatter.

    Returns:
        ReportSettings with resolved values.
    """
    section: dict[str, Any] = dict(get_config().get("report", default={}))

    for key in ReportSettings.__dataclass_fields__:
        if key == "lister_env":
            continue
        env_value = os.environ.get(f"{_ENV_PREFIX}{key.upper()}")
        if env_value is None:
            continue
        # An empty command is meaningful: it selects the built-in formatter.
        if env_value or key in _COMMAND_KEYS:
            section[key] = env_value

    defaults = ReportSettings()
    return ReportSettings(
        project_name=str(section.get("project_name", defaults.project_name)),
        commit_url=str(section.get("commit_url", defaults.commit_url)),
        report_file=str(section.get("report_file", defaults.report_file)),
        publish_branch=str(section.get("publish_branch", defaults.publish_branch)),
        remote=str(section.get("remote", defaults.remote)),
        token_env=str(section.get("token_env", defaults.token_env)),
        commit_message=str(section.get("commit_message", defaults.commit_message)),
        repository_path=Path(section.get("repository_path", defaults.repository_path)),
        lister_command=_as_command(section.get("lister_command"), defaults.lister_command),
        lister_env={str(k): str(v) for k, v in dict(section.get("lister_env") or {}).items()},
        formatter_command=_as_command(section.get("formatter_command"), defaults.formatter_command),
    )


def get_log_level() -> str:
    """Return the configured logging level name, upper-cased."""
    if env_level := os.environ.get(f"{_ENV_PREFIX}LOG_LEVEL"):
        return env_level.upper()
    logging_section = get_config().get("logging", default={})
    return str(logging_section.get("level", "INFO")).upper()


__all__ = [
    "ReportSettings",
    "get_config",
    "get_default_config_path",
    "get_log_level",
    "get_report_settings",
]
