from __future__ import annotations

from pathlib import Path

import pytest

from versionkeeper.models.decision import VersionDecision
from versionkeeper.models.version import BumpCategory, PreReleaseTag
from versionkeeper.utils.ci_output import (
    format_github_outputs,
    format_step_summary,
    write_github_outputs,
    write_step_summary,
)


@pytest.fixture
def decision() -> VersionDecision:
    return VersionDecision(
        success=True,
        bump_category=BumpCategory.PATCH,
        current_version="1.0.0",
        new_version="1.0.1-beta.1",
        new_tag="v1.0.1-beta.1",
        pre_release_tag=PreReleaseTag.BETA,
        build_number=1,
        last_tag="v1.0.0",
        branch_name="main",
        target_branch="main",
    )


@pytest.fixture
def blocked() -> VersionDecision:
    return VersionDecision(
        success=False,
        current_version="0.9.0",
        last_tag="v1.0.0",
        error_message="Manifest version 0.9.0 is lower than the latest release tag v1.0.0",
        error_kind="VersionTagMismatch",
        action_required=True,
        action_instructions="Choose one of the following:\n  1. Raise it\n  2. Force it",
    )


@pytest.mark.unit
class TestFormatGithubOutputs:
    """Tests for the $GITHUB_OUTPUT file format."""

    def test_single_line_values(self) -> None:
        result = format_github_outputs({"new-version": "1.0.1", "warning": ""})

        assert result == "new-version=1.0.1\nwarning=\n"

    def test_multiline_value_uses_heredoc(self) -> None:
        result = format_github_outputs({"action-instructions": "line one\nline two"})

        lines = result.splitlines()
        assert lines[0].startswith("action-instructions<<ghadelimiter_")
        delimiter = lines[0].split("<<", 1)[1]
        assert lines[1:] == ["line one", "line two", delimiter]

    def test_delimiters_are_unique(self) -> None:
        outputs = {"a": "x\ny", "b": "z\nw"}

        first, second = [
            line.split("<<", 1)[1]
            for line in format_github_outputs(outputs).splitlines()
            if "<<" in line
        ]

        assert first != second


@pytest.mark.unit
class TestWriteGithubOutputs:
    """Tests for write_github_outputs."""

    def test_appends_to_env_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, decision: VersionDecision
    ) -> None:
        output_file = tmp_path / "output"
        output_file.write_text("earlier=step\n", encoding="utf-8")
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))

        result = write_github_outputs(decision.to_outputs())

        content = output_file.read_text(encoding="utf-8")
        assert result == output_file
        assert content.startswith("earlier=step\n")
        assert "new-version=1.0.1-beta.1\n" in content
        assert "suffix=beta.1\n" in content
        assert "new-tag=v1.0.1-beta.1\n" in content

    def test_explicit_path(self, tmp_path: Path, decision: VersionDecision) -> None:
        output_file = tmp_path / "explicit"

        write_github_outputs(decision.to_outputs(), output_file)

        assert "success=true\n" in output_file.read_text(encoding="utf-8")

    def test_skipped_without_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)

        assert write_github_outputs({"a": "b"}) is None


@pytest.mark.unit
class TestStepSummary:
    """Tests for the Markdown step summary."""

    def test_success_summary(self, decision: VersionDecision) -> None:
        summary = format_step_summary(decision)

        assert summary.startswith("## versionkeeper: Version computed\n")
        assert "| new-version | 1.0.1-beta.1 |" in summary
        assert "| warning | - |" in summary
        assert "Action required" not in summary

    def test_blocked_summary_includes_instructions(self, blocked: VersionDecision) -> None:
        summary = format_step_summary(blocked)

        assert summary.startswith("## versionkeeper: Version not computed\n")
        assert "| action-required | true |" in summary
        assert "### Action required" in summary
        assert "  1. Raise it" in summary
        assert "| action-instructions |" not in summary

    def test_pipes_are_escaped(self) -> None:
        decision = VersionDecision(success=False, error_message="a | b")

        assert "| warning | a \\| b |" in format_step_summary(decision)

    def test_write_to_env_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, decision: VersionDecision
    ) -> None:
        summary_file = tmp_path / "summary.md"
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary_file))

        assert write_step_summary(decision) == summary_file
        assert "Version computed" in summary_file.read_text(encoding="utf-8")

    def test_skipped_without_env(
        self, monkeypatch: pytest.MonkeyPatch, decision: VersionDecision
    ) -> None:
        monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)

        assert write_step_summary(decision) is None
