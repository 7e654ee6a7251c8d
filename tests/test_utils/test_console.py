from __future__ import annotations

import io
import sys
from typing import Dict, Generator
from unittest.mock import patch

import pytest
from rich.console import Console

import versionkeeper.utils.console as console_module
from versionkeeper.utils.console import (
    VERSIONKEEPER_THEME,
    _get_console,
    _should_use_color,
    colorize_bump_type,
    confirm,
    get_raw_console,
    print_error,
    print_panel,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def streams() -> Dict[str, io.StringIO]:
    """Install plain, wide stdout and stderr consoles that write to buffers."""
    buffers = {"out": io.StringIO(), "err": io.StringIO()}
    for stderr, key in ((False, "out"), (True, "err")):
        console_module._consoles[stderr] = Console(
            file=buffers[key],
            theme=VERSIONKEEPER_THEME,
            no_color=True,
            width=120,
        )
    return buffers


@pytest.mark.unit
class TestConsoleLifecycle:
    """Tests for console creation and color detection."""

    def test_shared_instances(self) -> None:
        assert _get_console() is _get_console()
        assert get_raw_console() is _get_console()
        assert _get_console(stderr=True) is not _get_console()
        assert _get_console(stderr=True).stderr is True

    def test_reconfigure_creates_new_instances(self) -> None:
        first = _get_console()

        reconfigure_console()

        assert _get_console() is not first

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        assert _should_use_color() is False

    def test_tty_enables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True

    def test_non_tty_disables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)

        with patch.object(sys.stdout, "isatty", return_value=False):
            assert _should_use_color() is False


@pytest.mark.unit
class TestStatusMessages:
    """Tests for the print_* helpers."""

    def test_success_goes_to_stdout(self, streams: Dict[str, io.StringIO]) -> None:
        print_success("Updated pyproject.toml")

        assert streams["out"].getvalue() == "[OK] Updated pyproject.toml\n"
        assert streams["err"].getvalue() == ""

    def test_error_goes_to_stderr(self, streams: Dict[str, io.StringIO]) -> None:
        print_error("Manifest not found")

        assert streams["err"].getvalue() == "[ERROR] Manifest not found\n"
        assert streams["out"].getvalue() == ""

    def test_warning_custom_prefix(self, streams: Dict[str, io.StringIO]) -> None:
        print_warning("forced", prefix="!")

        assert streams["err"].getvalue() == "! forced\n"

    def test_markup_is_not_interpreted(self, streams: Dict[str, io.StringIO]) -> None:
        print_error("branch [red] is unusual")

        assert "[red]" in streams["err"].getvalue()


@pytest.mark.unit
class TestStructuredOutput:
    """Tests for tables, panels and bump labels."""

    def test_table(self, streams: Dict[str, io.StringIO]) -> None:
        print_table(
            [{"Field": "New version", "Value": "1.2.0-beta.1"}],
            title="Next Version",
        )

        output = streams["out"].getvalue()
        assert "Next Version" in output
        assert "New version" in output
        assert "1.2.0-beta.1" in output

    def test_empty_table_prints_nothing(self, streams: Dict[str, io.StringIO]) -> None:
        print_table([])

        assert streams["out"].getvalue() == ""

    def test_table_header_order(self, streams: Dict[str, io.StringIO]) -> None:
        print_table([{"Alpha": "1", "Beta": "2"}], headers=["Beta", "Alpha"])

        header_line = next(
            line for line in streams["out"].getvalue().splitlines() if "Alpha" in line
        )
        assert header_line.index("Beta") < header_line.index("Alpha")

    def test_panel_goes_to_stderr(self, streams: Dict[str, io.StringIO]) -> None:
        print_panel("Choose one of the following:\n  1. [retry]", title="Action required")

        output = streams["err"].getvalue()
        assert "Action required" in output
        assert "1. [retry]" in output

    @pytest.mark.parametrize(
        "bump,expected",
        [
            ("major", "[bump.major]major[/bump.major]"),
            ("MINOR", "[bump.minor]MINOR[/bump.minor]"),
            ("patch", "[bump.patch]patch[/bump.patch]"),
            ("none", "[bump.none]none[/bump.none]"),
            ("huge", "huge"),
        ],
    )
    def test_colorize_bump_type(self, bump: str, expected: str) -> None:
        assert colorize_bump_type(bump) == expected


@pytest.mark.unit
class TestConfirm:
    """Tests for confirm."""

    @pytest.mark.parametrize(
        "answer,default,expected",
        [
            ("y", False, True),
            ("N", True, False),
            ("", True, True),
            ("", False, False),
        ],
    )
    def test_answers(
        self, streams: Dict[str, io.StringIO], answer: str, default: bool, expected: bool
    ) -> None:
        with patch("builtins.input", return_value=answer):
            assert confirm("Write 1.0.1?", default=default) is expected

    def test_reprompts_on_invalid_answer(self, streams: Dict[str, io.StringIO]) -> None:
        with patch("builtins.input", side_effect=["maybe", "y"]):
            assert confirm("Write 1.0.1?") is True

        assert "Write 1.0.1?" in streams["out"].getvalue()

    @pytest.mark.parametrize("error", [KeyboardInterrupt, EOFError])
    def test_interrupt_declines(self, streams: Dict[str, io.StringIO], error: type) -> None:
        with patch("builtins.input", side_effect=error):
            assert confirm("Write 1.0.1?", default=True) is False
