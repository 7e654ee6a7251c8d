"""
CI output helpers for versionkeeper.

Writes a decision's key/value outputs for GitHub Actions:

- ``$GITHUB_OUTPUT`` receives ``key=value`` lines; multi-line values use
  the ``key<<DELIMITER`` heredoc form
- ``$GITHUB_STEP_SUMMARY`` receives a Markdown table

Both files are appended to, never replaced, because earlier steps of the
same job may already have written to them.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Mapping, Optional, Union

from versionkeeper.constants import GITHUB_OUTPUT_ENV, GITHUB_STEP_SUMMARY_ENV
from versionkeeper.models.decision import VersionDecision
from versionkeeper.utils.filesystem import append_text
from versionkeeper.utils.logger import get_logger

logger = get_logger("ci_output")

PathLike = Union[str, Path]


def format_github_outputs(outputs: Mapping[str, str]) -> str:
    """Render outputs in the ``$GITHUB_OUTPUT`` file format."""
    lines = []
    for key, value in outputs.items():
        if "\n" in value or "\r" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            lines.append(f"{key}<<{delimiter}")
            lines.append(value)
            lines.append(delimiter)
        else:
            lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"


def write_github_outputs(
    outputs: Mapping[str, str],
    path: Optional[PathLike] = None,
) -> Optional[Path]:
    """Append ``outputs`` to the step output file.

    Args:
        outputs: Output key/value pairs.
        path: Output file; defaults to ``$GITHUB_OUTPUT``.

    Returns:
        The file written, or ``None`` when no output file is configured.
    """
    target = path or os.environ.get(GITHUB_OUTPUT_ENV)
    if not target:
        logger.debug("%s not set, skipping step outputs", GITHUB_OUTPUT_ENV)
        return None

    append_text(target, format_github_outputs(outputs))
    logger.debug("Wrote %d output(s) to %s", len(outputs), target)
    return Path(target)


def format_step_summary(decision: VersionDecision) -> str:
    """Render a decision as a Markdown step summary."""
    status = "Version computed" if decision.success else "Version not computed"
    lines = [
        f"## versionkeeper: {status}",
        "",
        "| Field | Value |",
        "| --- | --- |",
    ]
    for key, value in decision.to_outputs().items():
        if key == "action-instructions":
            continue
        cell = value.replace("|", "\\|") if value else "-"
        lines.append(f"| {key} | {cell} |")

    if decision.action_instructions:
        lines.extend(["", "### Action required", "", "```", decision.action_instructions, "```"])

    return "\n".join(lines) + "\n"


def write_step_summary(
    decision: VersionDecision,
    path: Optional[PathLike] = None,
) -> Optional[Path]:
    """Append the decision summary to the step summary file.

    Args:
        decision: Decision to summarize.
        path: Summary file; defaults to ``$GITHUB_STEP_SUMMARY``.

    Returns:
        The file written, or ``None`` when no summary file is configured.
    """
    target = path or os.environ.get(GITHUB_STEP_SUMMARY_ENV)
    if not target:
        return None

    append_text(target, format_step_summary(decision))
    return Path(target)
