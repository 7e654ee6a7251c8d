"""
Utility helpers shared by the versionkeeper commands and core.

- :mod:`~versionkeeper.utils.logger`: namespaced logging, CI annotations
- :mod:`~versionkeeper.utils.console`: Rich output for humans
- :mod:`~versionkeeper.utils.filesystem`: atomic manifest writes
- :mod:`~versionkeeper.utils.version_utils`: release tag ordering
- :mod:`~versionkeeper.utils.ci_output`: ``$GITHUB_OUTPUT`` and step summary
"""

from __future__ import annotations

from versionkeeper.utils.logger import get_logger, setup_logging
from versionkeeper.utils.filesystem import (
    append_text,
    create_backup,
    safe_read_file,
    safe_write_file,
)
from versionkeeper.utils.console import (
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
from versionkeeper.utils.version_utils import (
    filter_release_tags,
    latest_release_tag,
    max_build_number,
    sort_release_tags,
)
from versionkeeper.utils.ci_output import (
    format_github_outputs,
    write_github_outputs,
    write_step_summary,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "append_text",
    "create_backup",
    "safe_read_file",
    "safe_write_file",
    "colorize_bump_type",
    "confirm",
    "get_raw_console",
    "print_error",
    "print_panel",
    "print_success",
    "print_table",
    "print_warning",
    "reconfigure_console",
    "filter_release_tags",
    "latest_release_tag",
    "max_build_number",
    "sort_release_tags",
    "format_github_outputs",
    "write_github_outputs",
    "write_step_summary",
]
