"""Shared fixtures: fake external tools and throwaway git repositories."""

from __future__ import annotations

import subprocess
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from dependency_report.config import ReportSettings
from dependency_report.git import Repository

MODULE_STREAM = textwrap.dedent(
    """\
    {"Path": "example.com/project", "Main": true, "GoVersion": "1.22"}
    {
        "Path": "github.com/pkg/errors",
        "Version": "v0.9.0",
        "Update": {"Path": "github.com/pkg/errors", "Version": "v0.9.1"}
    }
    {"Path": "github.com/sirupsen/logrus", "Version": "v1.9.3"}
    {
        "Path": "golang.org/x/sys",
        "Version": "v0.1.0",
        "Update": {"Path": "golang.org/x/sys", "Version": "v0.20.0"},
        "Indirect": true
    }
    """
)

# Prints the module stream, but only when GOSUMDB=off reached the process.
_LISTER_SCRIPT = """\
import os, sys
if os.environ.get("GOSUMDB") != "off":
    sys.stderr.write("checksum database still enabled")
    sys.exit(3)
with open(sys.argv[1], encoding="utf-8") as fh:
    sys.stdout.write(fh.read())
"""

# Echoes its arguments and a digest of stdin as a tiny markdown table.
_FORMATTER_SCRIPT = """\
import hashlib, sys
data = sys.stdin.read()
print("| ARGS | SHA256 |")
print("|------|--------|")
print("| " + " ".join(sys.argv[1:]) + " | " + hashlib.sha256(data.encode()).hexdigest()[:12] + " |")
"""

_FAILING_SCRIPT = """\
import sys
sys.stderr.write("boom")
sys.exit(2)
"""


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str, str], tuple[str, ...]]:
    """Write a Python script and return the command that runs it."""

    def _write(name: str, body: str) -> tuple[str, ...]:
        script = tmp_path / "bin" / f"{name}.py"
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text(body, encoding="utf-8")
        return (sys.executable, str(script))

    return _write


@pytest.fixture
def lister_command(tmp_path: Path, write_script: Callable[[str, str], tuple[str, ...]]) -> tuple[str, ...]:
    data = tmp_path / "modules.json"
    data.write_text(MODULE_STREAM, encoding="utf-8")
    return (*write_script("lister", _LISTER_SCRIPT), str(data))


@pytest.fixture
def formatter_command(write_script: Callable[[str, str], tuple[str, ...]]) -> tuple[str, ...]:
    return write_script("formatter", _FORMATTER_SCRIPT)


@pytest.fixture
def failing_command(write_script: Callable[[str, str], tuple[str, ...]]) -> tuple[str, ...]:
    return write_script("failing", _FAILING_SCRIPT)


@pytest.fixture
def git_repo(tmp_path: Path) -> Repository:
    """A working tree on ``main`` with a ``gh-pages`` branch and a bare origin."""
    origin = tmp_path / "origin.git"
    git(tmp_path, "init", "--quiet", "--bare", str(origin))

    work = tmp_path / "work"
    work.mkdir()
    git(work, "init", "--quiet")
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    git(work, "config", "user.name", "Report Bot")
    git(work, "config", "user.email", "bot@example.com")
    git(work, "config", "commit.gpgsign", "false")
    (work / "README.md").write_text("project\n", encoding="utf-8")
    git(work, "add", "README.md")
    git(work, "commit", "--quiet", "-m", "Initial commit")
    git(work, "branch", "gh-pages")
    git(work, "remote", "add", "origin", str(origin))
    git(work, "push", "--quiet", "origin", "main", "gh-pages")
    return Repository(path=work)


@pytest.fixture
def settings(
    git_repo: Repository,
    lister_command: tuple[str, ...],
    formatter_command: tuple[str, ...],
) -> ReportSettings:
    return ReportSettings(
        project_name="CRI-O",
        commit_url="https://github.com/cri-o/cri-o/commit/{commit}",
        repository_path=git_repo.path,
        lister_command=lister_command,
        formatter_command=formatter_command,
    )
