from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest
from click.testing import Result

from versionkeeper.commands.update import manifest_version
from versionkeeper.core import read_declared_version
from versionkeeper.models.decision import VersionDecision

from .conftest import FakeRepository


@pytest.fixture
def released(write_manifest: Callable[[str], Path], fake_repo: FakeRepository) -> Path:
    """A manifest at 1.0.0 with v1.0.0 released and one fix merged since."""
    fake_repo.tags = ["v1.0.0"]
    fake_repo.commits = ["fix: crash on empty input"]
    return write_manifest("1.0.0")


@pytest.mark.unit
class TestUpdateCommand:
    """Tests for ``versionkeeper update``."""

    def test_writes_manifest(self, invoke: Callable[..., Result], released: Path) -> None:
        result = invoke(["update", "--branch", "release", "-y"])

        assert result.exit_code == 0
        assert "Updated pyproject.toml: 1.0.0 -> 1.0.1" in result.output
        assert read_declared_version(released) == "1.0.1"

    def test_dry_run_leaves_manifest(
        self, invoke: Callable[..., Result], released: Path
    ) -> None:
        before = released.read_text(encoding="utf-8")

        result = invoke(["update", "--branch", "release", "--dry-run"])

        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert released.read_text(encoding="utf-8") == before

    def test_prerelease_writes_base_version(
        self, invoke: Callable[..., Result], released: Path
    ) -> None:
        result = invoke(["update", "--branch", "main", "-y"])

        assert result.exit_code == 0
        assert read_declared_version(released) == "1.0.1"

    def test_full_version(self, invoke: Callable[..., Result], released: Path) -> None:
        result = invoke(["update", "--branch", "main", "-y", "--full-version"])

        assert result.exit_code == 0
        assert read_declared_version(released) == "1.0.1-beta.1"

    def test_full_version_is_read_back(
        self,
        invoke: Callable[..., Result],
        released: Path,
        fake_repo: FakeRepository,
    ) -> None:
        invoke(["update", "--branch", "main", "-y", "--full-version"])
        fake_repo.tags = ["v1.0.0", "v1.0.1-beta.1"]
        fake_repo.commits = ["fix: follow-up"]

        result = invoke(["next", "--branch", "main", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["current_version"] == "1.0.1-beta.1"
        assert data["new_version"] == "1.0.1-beta.2"

    def test_confirmation_declined(
        self, invoke: Callable[..., Result], released: Path
    ) -> None:
        result = invoke(["update", "--branch", "release"], input="n\n")

        assert result.exit_code == 0
        assert read_declared_version(released) == "1.0.0"

    def test_confirmation_accepted(
        self, invoke: Callable[..., Result], released: Path
    ) -> None:
        result = invoke(["update", "--branch", "release"], input="y\n")

        assert result.exit_code == 0
        assert read_declared_version(released) == "1.0.1"

    def test_backup(
        self, invoke: Callable[..., Result], released: Path, workdir: Path
    ) -> None:
        result = invoke(["update", "--branch", "release", "-y", "--backup"])

        assert result.exit_code == 0
        backups = list(workdir.glob("pyproject.toml.*.backup"))
        assert len(backups) == 1
        assert 'version = "1.0.0"' in backups[0].read_text(encoding="utf-8")

    def test_already_current(
        self,
        invoke: Callable[..., Result],
        write_manifest: Callable[[str], Path],
        fake_repo: FakeRepository,
    ) -> None:
        # Left behind by a run that updated the manifest but never tagged
        fake_repo.tags = ["v1.0.0"]
        fake_repo.commits = ["fix: crash"]
        manifest = write_manifest("1.0.1")

        result = invoke(["update", "--branch", "release"])

        assert result.exit_code == 0
        assert "already declares 1.0.1" in result.output
        assert read_declared_version(manifest) == "1.0.1"

    def test_blocked_decision_leaves_manifest(
        self,
        invoke: Callable[..., Result],
        write_manifest: Callable[[str], Path],
        fake_repo: FakeRepository,
    ) -> None:
        fake_repo.tags = ["v1.0.0"]
        manifest = write_manifest("0.9.0")

        result = invoke(["update", "--branch", "release", "-y"])

        assert result.exit_code == 1
        assert "Action required" in result.output
        assert read_declared_version(manifest) == "0.9.0"

    def test_non_release_branch(
        self, invoke: Callable[..., Result], released: Path
    ) -> None:
        result = invoke(["update", "--branch", "feature/login", "-y"])

        assert result.exit_code == 1
        assert read_declared_version(released) == "1.0.0"


@pytest.mark.unit
class TestManifestVersion:
    """Tests for manifest_version."""

    @pytest.mark.parametrize(
        "new_version,full,expected",
        [
            ("1.3.0-beta.2", False, "1.3.0"),
            ("1.3.0-beta.2", True, "1.3.0-beta.2"),
            ("2.0.0", False, "2.0.0"),
        ],
    )
    def test_versions(self, new_version: str, full: bool, expected: str) -> None:
        decision = VersionDecision(success=True, new_version=new_version)

        assert manifest_version(decision, full_version=full) == expected
