"""Environment preparation and the dependency lister.

Purpose
-------
First stage of the pipeline: make sure the output directory exists, build
the lister's environment, run the lister once and keep its output in a
run-scoped temporary file so the formatter can read it twice.

Contents
--------
* :func:`prepare_output_path` - ``mkdir -p`` for the report directory
* :func:`lister_environment` - environment for the lister with GOSUMDB off
* :func:`list_dependencies` - run the lister and return its raw output
* :func:`parse_module_stream` - validate the output into DependencyRecords
* :func:`dependency_list_file` - temp file holding the output for one run
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from .command import run_command
from .errors import CommandError, DependencyListError, ReportEnvironmentError, ReportIOError
from .models import DependencyRecord
from .schemas import ModuleSchema

logger = logging.getLogger(__name__)

CHECKSUM_DB_VARIABLE = "GOSUMDB"

_decoder = json.JSONDecoder()


def prepare_output_path(output_path: Path | str) -> Path:
    """Create the output directory, including parents, if it is missing.

    An empty path resolves to the current working directory.

    Raises:
        ReportIOError: If the directory cannot be created.
    """
    path = Path(output_path) if str(output_path) else Path.cwd()
    logger.info("Ensuring output path %s", path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ReportIOError("create output path", exc) from exc
    return path


def _validate_variable(name: str, value: str) -> None:
    if not name or "=" in name or "\0" in name:
        raise ValueError(f"invalid environment variable name {name!r}")
    if "\0" in value:
        raise ValueError(f"invalid value for environment variable {name}")


def lister_environment(
    base: Mapping[str, str] | None = None,
    overrides: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the environment for the dependency lister.

    Checksum-database verification is switched off in the returned mapping
    only; the process environment is left alone.

    Args:
        base: Starting environment, ``os.environ`` when None.
        overrides: Extra variables applied last.

    Raises:
        ReportEnvironmentError: If a variable name or value is not valid.
    """
    env = dict(os.environ if base is None else base)
    extra = {CHECKSUM_DB_VARIABLE: "off", **(overrides or {})}
    try:
        for name, value in extra.items():
            _validate_variable(name, value)
    except ValueError as exc:
        raise ReportEnvironmentError(f"disabling {CHECKSUM_DB_VARIABLE}", exc) from exc
    env.update(extra)
    return env


def list_dependencies(
    command: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | str | None = None,
) -> str:
    """Run the dependency lister and return its output.

    Raises:
        DependencyListError: If the lister cannot run or exits non-zero.
    """
    logger.info("Getting go modules")
    try:
        return run_command(command, cwd=cwd, env=env)
    except CommandError as exc:
        raise DependencyListError("listing go modules", exc) from exc


def parse_module_stream(text: str) -> list[DependencyRecord]:
    """Parse the lister's stream of JSON objects.

    Accepts concatenated objects as printed by ``go list -json`` as well as a
    single JSON array. The main module is skipped.

    Raises:
        DependencyListError: If the output is not valid JSON or an entry does
            not describe a module.
    """
    records: list[DependencyRecord] = []
    index = 0
    length = len(text)
    try:
        while True:
            while index < length and text[index].isspace():
                index += 1
            if index >= length:
                break
            obj, index = _decoder.raw_decode(text, index)
            for item in obj if isinstance(obj, list) else [obj]:
                module = ModuleSchema.model_validate(item)
                if not module.main:
                    records.append(module.to_record())
    except (json.JSONDecodeError, ValidationError) as exc:
        raise DependencyListError("parsing go modules", exc) from exc
    logger.debug("Parsed %d modules", len(records))
    return records


@contextmanager
def dependency_list_file(content: str) -> Iterator[Path]:
    """Yield a temporary file holding ``content``; it is removed on exit.

    Raises:
        ReportIOError: If the file cannot be created or written.
    """
    try:
        handle = tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", prefix="modules-", suffix=".json", delete=False
        )
    except OSError as exc:
        raise ReportIOError("creating temp file", exc) from exc
    path = Path(handle.name)
    try:
        try:
            with handle:
                handle.write(content)
        except OSError as exc:
            raise ReportIOError("writing to temp file", exc) from exc
        yield path
    finally:
        path.unlink(missing_ok=True)


__all__ = [
    "CHECKSUM_DB_VARIABLE",
    "dependency_list_file",
    "list_dependencies",
    "lister_environment",
    "parse_module_stream",
    "prepare_output_path",
]
