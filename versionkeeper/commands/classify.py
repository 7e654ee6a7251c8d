"""Classify command implementation for versionkeeper.

Shows how commit messages are classified with the configured keyword
groups, without deciding a version. Useful when tuning ``keywords`` in the
configuration, or to see why ``next`` chose a bump.

With no arguments the merge-commit subjects since the latest release tag
are read from the repository; otherwise the given messages are classified.

Typical usage::

    # Why would the next release be a minor bump?
    $ versionkeeper classify

    # Try messages against the configured keywords
    $ versionkeeper classify "feat!: drop py2" "FIX-BETA: crash"
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.markup import escape

from versionkeeper.context import pass_context, VersionKeeperContext
from versionkeeper.core import GitRepository, VersionDecisionEngine
from versionkeeper.exceptions import VersionKeeperError
from versionkeeper.models import Classification, HistorySummary
from versionkeeper.utils import (
    colorize_bump_type,
    get_logger,
    latest_release_tag,
    print_error,
    print_table,
)

logger = get_logger("commands.classify")


@click.command()
@click.argument("messages", nargs=-1)
@click.option(
    "--repo",
    "repo_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository read when no messages are given.",
)
@click.option(
    "--branch",
    "-b",
    default=None,
    help="Branch name, also scanned for pre-release markers.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def classify(
    ctx: VersionKeeperContext,
    messages: Tuple[str, ...],
    repo_path: Path,
    branch: Optional[str],
    output_format: str,
) -> None:
    """Show the bump evidence found in commit messages.

    Exits:
        0 on success, 1 if the repository history could not be read.
    """
    aggregator = VersionDecisionEngine.from_config(ctx.config).aggregator

    if messages:
        history = list(messages)
    else:
        try:
            history = _history_since_latest_tag(GitRepository(repo_path))
        except VersionKeeperError as e:
            print_error(str(e))
            sys.exit(1)

    results = [aggregator.classifier.classify(message, branch) for message in history]
    summary = aggregator.aggregate(history)

    if output_format.lower() == "json":
        click.echo(json.dumps(_as_dict(history, results, summary), indent=2))
    else:
        _render_table(history, results, summary)
    sys.exit(0)


def _history_since_latest_tag(repo: GitRepository) -> List[str]:
    latest = latest_release_tag(repo.list_tags())
    logger.info("Reading history since %s", latest or "the first commit")
    return repo.commits_since(latest)


def _as_dict(
    history: List[str],
    results: List[Classification],
    summary: HistorySummary,
) -> dict:
    return {
        "messages": [
            {
                "message": message,
                "bump": str(result.bump),
                "prerelease": str(result.prerelease),
                "keyword": result.keyword,
            }
            for message, result in zip(history, results)
        ],
        "summary": {
            "bump": str(summary.bump),
            "prerelease": str(summary.prerelease),
            "explicit": summary.explicit,
            "message_count": summary.message_count,
        },
    }


def _render_table(
    history: List[str],
    results: List[Classification],
    summary: HistorySummary,
) -> None:
    rows = [
        {
            "Message": escape(message),
            "Bump": colorize_bump_type(str(result.bump)),
            "Pre-release": str(result.prerelease) if result.prerelease.is_prerelease else "-",
            "Keyword": result.keyword or "(default)",
        }
        for message, result in zip(history, results)
    ]
    if rows:
        print_table(rows, title="Commit Classification")

    hint = f", {summary.prerelease} hint" if summary.prerelease.is_prerelease else ""
    source = "explicit keyword" if summary.explicit else "default"
    click.echo(f"{summary.message_count} message(s): {summary.bump} bump ({source}{hint})")
