"""Synchronous execution of external tools.

Every collaborator the pipeline talks to (the dependency lister, the
formatter, git) is an external process. :func:`run_command` runs one to
completion, returns its stdout and raises :class:`CommandError` on failure.
No timeout is applied.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO

from .errors import CommandError

logger = logging.getLogger(__name__)


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    stdin: IO[str] | None = None,
    error: type[CommandError] = CommandError,
) -> str:
    """Run ``argv`` and return its stdout with trailing newlines removed.

    Args:
        argv: Command and arguments.
        cwd: Working directory for the process.
        env: Full environment for the process; inherits ours when None.
        stdin: Open text file fed to the process on stdin.
        error: CommandError subclass raised on failure.

    Raises:
        CommandError: If the command cannot be started, exits non-zero or
            writes output that is not valid UTF-8.
    """
    if not argv:
        raise error(argv, None, "empty command")
    logger.debug("Running %s", " ".join(argv))
    try:
        result = subprocess.run(
            list(argv),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdin=stdin if stdin is not None else subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )
    except OSError as exc:
        raise error(argv, None, f"could not be started: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise error(argv, None, f"emitted output that is not UTF-8: {exc}") from exc
    if result.returncode != 0:
        raise error(argv, result.returncode, result.stderr)
    return result.stdout.rstrip("\n")


__all__ = ["run_command"]
