from __future__ import annotations

from pathlib import Path
from typing import Callable, Generator, List, Optional, Sequence
from unittest.mock import patch

import pytest
from click.testing import CliRunner, Result

from versionkeeper.cli import cli
from versionkeeper.exceptions import CollaboratorUnavailableError


class FakeRepository:
    """In-memory replacement for GitRepository used by the commands."""

    def __init__(self) -> None:
        self.tags: List[str] = []
        self.commits: List[str] = []
        self.default = "main"
        self.current: Optional[str] = None
        self.path: Optional[Path] = None

    def list_tags(self) -> List[str]:
        return list(self.tags)

    def commits_since(self, ref: Optional[str], target: str = "HEAD") -> List[str]:
        return list(self.commits)

    def default_branch(self) -> str:
        return self.default

    def current_branch(self) -> str:
        if self.current is None:
            raise CollaboratorUnavailableError("HEAD is detached")
        return self.current


@pytest.fixture
def fake_repo() -> Generator[FakeRepository, None, None]:
    repo = FakeRepository()

    def factory(path: Path) -> FakeRepository:
        repo.path = path
        return repo

    with patch("versionkeeper.commands.next.GitRepository", side_effect=factory):
        yield repo


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An isolated working directory with no CI or branch variables set."""
    for name in (
        "GITHUB_OUTPUT",
        "GITHUB_STEP_SUMMARY",
        "VERSIONKEEPER_BRANCH",
        "VERSIONKEEPER_TARGET_BRANCH",
        "VERSIONKEEPER_CONFIG",
        "VERSIONKEEPER_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_manifest(workdir: Path) -> Callable[[str], Path]:
    def _write(version: str) -> Path:
        path = workdir / "pyproject.toml"
        path.write_text(
            f'[project]\nname = "demo"\nversion = "{version}"\n', encoding="utf-8"
        )
        return path

    return _write


@pytest.fixture
def invoke(workdir: Path) -> Callable[..., Result]:
    runner = CliRunner()

    def _invoke(args: Sequence[str], input: Optional[str] = None) -> Result:
        return runner.invoke(cli, ["--no-color", *args], input=input)

    return _invoke
