"""
Console output for versionkeeper, built on Rich.

Results (tables, the computed version) go to stdout. Status messages and
remediation panels go to stderr, so ``versionkeeper next -f env > out``
captures nothing but the outputs. Diagnostics belong in
:mod:`versionkeeper.utils.logger`, never here.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme
from rich.prompt import Confirm
from rich.console import Console

VERSIONKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "bump.major": "bold red",
        "bump.minor": "bold yellow",
        "bump.patch": "green",
        "bump.none": "dim",
    }
)

_consoles: Dict[bool, Console] = {}
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console(*, stderr: bool = False) -> Console:
    """Return the shared console for stdout (default) or stderr."""
    console = _consoles.get(stderr)
    if console is None:
        with _console_lock:
            console = _consoles.get(stderr)
            if console is None:
                use_color = _should_use_color()
                console = Console(
                    stderr=stderr,
                    theme=VERSIONKEEPER_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
                _consoles[stderr] = console
    return console


def reconfigure_console() -> None:
    """Drop the shared consoles so the next call re-reads ``NO_COLOR``."""
    with _console_lock:
        _consoles.clear()


def get_raw_console() -> Console:
    """Return the stdout console."""
    return _get_console()


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _get_console().print(f"{prefix} {message}", style="success", markup=False)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console(stderr=True).print(f"{prefix} {message}", style="error", markup=False)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console(stderr=True).print(f"{prefix} {message}", style="warning", markup=False)


def print_table(
    rows: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render ``rows`` as a Rich table on stdout.

    Args:
        rows: Row dictionaries; values may contain Rich markup.
        headers: Column order. Defaults to the keys of the first row.
        title: Optional table title.
        column_styles: Per-column ``style``, ``justify`` and ``no_wrap``.
    """
    if not rows:
        return

    headers = headers or list(rows[0].keys())
    column_styles = column_styles or {}

    table = Table(title=title, show_header=True, header_style="bold")
    for header in headers:
        style = column_styles.get(header, {})
        table.add_column(
            header,
            style=style.get("style"),
            justify=style.get("justify", "left"),
            no_wrap=style.get("no_wrap", False),
        )
    for row in rows:
        table.add_row(*(str(row.get(header, "")) for header in headers))

    _get_console().print(table)


def print_panel(message: str, *, title: str, style: str = "info") -> None:
    """Print multi-line guidance a human has to act on, boxed, to stderr."""
    _get_console(stderr=True).print(
        Panel(Text(message), title=title, border_style=style, expand=False)
    )


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question; Ctrl+C or end of input count as "no"."""
    console = _get_console()
    try:
        return Confirm.ask(message, default=default, console=console)
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False


def colorize_bump_type(bump_type: str) -> str:
    """Return ``bump_type`` wrapped in its theme style markup."""
    style = f"bump.{bump_type.lower()}"
    if style not in VERSIONKEEPER_THEME.styles:
        return bump_type
    return f"[{style}]{bump_type}[/{style}]"
