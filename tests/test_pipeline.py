"""Pipeline stories: end to end with fake tools and a real git repository."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

from dependency_report.config import ReportSettings
from dependency_report.errors import CheckoutError, DependencyListError, FormatError, RepoStateError
from dependency_report.git import Repository
from dependency_report.models import PublishState
from dependency_report.pipeline import run_pipeline

from conftest import git

MOMENT = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)


def no_token() -> dict[str, str]:
    return {k: v for k, v in os.environ.items() if k != "GITHUB_TOKEN"}


def with_token() -> dict[str, str]:
    return {**no_token(), "GITHUB_TOKEN": "secret"}


# ════════════════════════════════════════════════════════════════════════════
# Local report: always written, repository untouched without a token
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.posix_only
def test_run_without_token_writes_report_and_leaves_repository_alone(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
) -> None:
    head = git_repo.head()
    output = tmp_path / "report"

    result = run_pipeline(output, settings, repository=git_repo, now=MOMENT, environ=no_token())

    report = output / "dependencies.md"
    assert result.publish_state is PublishState.SKIPPED
    assert result.report_path == report
    content = report.read_text(encoding="utf-8")
    assert content == result.content
    assert f"for commit [{head[:7]}][0]._" in content
    assert f"[0]: https://github.com/cri-o/cri-o/commit/{head}\n" in content
    assert "_Generated on Tue, 05 Mar 2024 14:07:09 UTC" in content
    assert git_repo.current_branch() == "main"
    assert git_repo.head() == head
    assert git(git_repo.path, "rev-list", "--count", "gh-pages") == "1"


@pytest.mark.posix_only
def test_run_renders_both_fragments_in_order(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
) -> None:
    result = run_pipeline(tmp_path / "out", settings, repository=git_repo, now=MOMENT, environ=no_token())

    outdated_at = result.content.index("## Outdated Dependencies")
    all_at = result.content.index("## All Dependencies")
    assert outdated_at < result.content.index("--direct --update --style=markdown") < all_at
    assert result.content.rstrip("\n").splitlines()[-1].startswith("| --style=markdown |")


@pytest.mark.posix_only
def test_run_with_builtin_formatter_lists_outdated_direct_modules(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
) -> None:
    builtin = dataclasses.replace(settings, formatter_command=())

    result = run_pipeline(tmp_path / "out", builtin, repository=git_repo, now=MOMENT, environ=no_token())

    outdated_section = result.content.split("## All Dependencies")[0]
    assert "| github.com/pkg/errors | v0.9.0 | v0.9.1 | true |" in outdated_section
    assert "golang.org/x/sys" not in outdated_section
    assert "| golang.org/x/sys | v0.1.0 | v0.20.0 | false |" in result.content


@pytest.mark.posix_only
def test_run_replaces_previous_local_report(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
) -> None:
    output = tmp_path / "out"
    output.mkdir()
    (output / "dependencies.md").write_text("old")

    run_pipeline(output, settings, repository=git_repo, now=MOMENT, environ=no_token())

    assert (output / "dependencies.md").read_text(encoding="utf-8").startswith("# CRI-O Dependency Report")


@pytest.mark.posix_only
def test_run_with_empty_output_path_writes_to_cwd(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)

    run_pipeline("", settings, repository=git_repo, now=MOMENT, environ=no_token())

    assert (cwd / "dependencies.md").exists()


# ════════════════════════════════════════════════════════════════════════════
# Publication: the token turns the publisher on
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.posix_only
def test_run_with_token_publishes_and_restores_branch(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
) -> None:
    result = run_pipeline(tmp_path / "out", settings, repository=git_repo, now=MOMENT, environ=with_token())

    assert result.publish_state is PublishState.BRANCH_RESTORED
    assert git_repo.current_branch() == "main"
    published = git(git_repo.path, "show", "origin/gh-pages:dependencies.md")
    assert published == result.content.rstrip("\n")
    assert (tmp_path / "out" / "dependencies.md").read_text(encoding="utf-8") == result.content


@pytest.mark.posix_only
def test_run_with_token_and_missing_branch_fails_but_keeps_local_report(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
) -> None:
    broken = dataclasses.replace(settings, publish_branch="no-such-branch")

    with pytest.raises(CheckoutError, match="checkout no-such-branch branch"):
        run_pipeline(tmp_path / "out", broken, repository=git_repo, now=MOMENT, environ=with_token())

    assert (tmp_path / "out" / "dependencies.md").exists()
    assert git_repo.current_branch() == "main"


# ════════════════════════════════════════════════════════════════════════════
# Failures: the first broken step aborts the run
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.posix_only
def test_run_aborts_when_lister_fails(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
    failing_command: tuple[str, ...],
) -> None:
    broken = dataclasses.replace(settings, lister_command=failing_command)

    with pytest.raises(DependencyListError, match="listing go modules"):
        run_pipeline(tmp_path / "out", broken, repository=git_repo, now=MOMENT, environ=no_token())

    assert not (tmp_path / "out" / "dependencies.md").exists()


@pytest.mark.posix_only
@pytest.mark.parametrize("builtin", [False, True], ids=["command-formatter", "builtin-formatter"])
def test_run_rejects_malformed_lister_output_before_formatting(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
    write_script: Callable[[str, str], tuple[str, ...]],
    builtin: bool,
) -> None:
    marker = tmp_path / "formatter-ran"
    formatter = write_script("marking", f"import pathlib\npathlib.Path({str(marker)!r}).write_text(\"ran\")\n")
    broken = dataclasses.replace(
        settings,
        lister_command=write_script("garbage", "print(\"this is not json\")\n"),
        formatter_command=() if builtin else formatter,
    )

    with pytest.raises(DependencyListError, match="parsing go modules"):
        run_pipeline(tmp_path / "out", broken, repository=git_repo, now=MOMENT, environ=no_token())

    assert not marker.exists()
    assert not (tmp_path / "out" / "dependencies.md").exists()


@pytest.mark.posix_only
def test_run_reports_undecodable_lister_output_as_list_error(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
    write_script: Callable[[str, str], tuple[str, ...]],
) -> None:
    broken = dataclasses.replace(
        settings,
        lister_command=write_script("binary", "import sys\nsys.stdout.buffer.write(b\"\\xff\\xfe{}\")\n"),
    )

    with pytest.raises(DependencyListError, match="not UTF-8"):
        run_pipeline(tmp_path / "out", broken, repository=git_repo, now=MOMENT, environ=no_token())


@pytest.mark.posix_only
def test_run_aborts_when_formatter_fails(
    tmp_path: Path,
    git_repo: Repository,
    settings: ReportSettings,
    failing_command: tuple[str, ...],
) -> None:
    broken = dataclasses.replace(settings, formatter_command=failing_command)

    with pytest.raises(FormatError, match="retrieving outdated dependencies"):
        run_pipeline(tmp_path / "out", broken, repository=git_repo, now=MOMENT, environ=no_token())


@pytest.mark.posix_only
def test_run_outside_a_repository_fails_reading_head(
    tmp_path: Path,
    settings: ReportSettings,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    plain = tmp_path / "plain"
    plain.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

    with pytest.raises(RepoStateError, match="get repository HEAD"):
        run_pipeline(tmp_path / "out", settings, repository=Repository(path=plain), now=MOMENT, environ=no_token())
