"""Update command implementation for versionkeeper.

Computes the next version exactly like ``versionkeeper next`` and writes it
back into the manifest, so the release commit carries the version that is
about to be tagged.

By default only the ``major.minor.patch`` base is written; pass
``--full-version`` to write the pre-release suffix as well.

The manifest is never touched when the decision failed or needs a human
decision.

Typical usage::

    # Preview the manifest change
    $ versionkeeper update --dry-run

    # Apply on the dev branch without prompting, keeping a backup
    $ versionkeeper update --branch dev --backup -y

    # Write "1.3.0-beta.2" instead of "1.3.0"
    $ versionkeeper update --full-version
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from versionkeeper.context import pass_context, VersionKeeperContext
from versionkeeper.core import write_declared_version
from versionkeeper.exceptions import VersionKeeperError
from versionkeeper.models import ReleaseVersion, VersionDecision
from versionkeeper.commands.next import compute_decision, decision_options, render_decision
from versionkeeper.utils import (
    confirm,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.update")


@click.command()
@decision_options
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview the change without writing the manifest.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip confirmation prompt.",
)
@click.option(
    "--backup",
    is_flag=True,
    help="Create a backup of the manifest before updating.",
)
@click.option(
    "--full-version",
    is_flag=True,
    help="Write the pre-release suffix too (e.g. 1.3.0-beta.2).",
)
@pass_context
def update(
    ctx: VersionKeeperContext,
    repo_path: Path,
    manifest: Optional[Path],
    branch: Optional[str],
    target_branch: Optional[str],
    force_first_release: bool,
    force_mismatch: bool,
    dry_run: bool,
    yes: bool,
    backup: bool,
    full_version: bool,
) -> None:
    """Compute the next version and write it to the manifest.

    Exits:
        0 if the manifest was updated, already current, or the run was a
        dry run; 1 if no version was computed, a human decision is
        required, or the manifest could not be written.

    Example::

        $ versionkeeper update --branch main --dry-run
    """
    config = ctx.config
    manifest_path = manifest or (repo_path / config.manifest)

    decision = compute_decision(
        config,
        repo_path,
        manifest=manifest_path,
        branch=branch,
        target_branch=target_branch,
        force_first_release=force_first_release,
        force_mismatch=force_mismatch,
    )

    if decision.exit_code != 0:
        render_decision(decision, "table")
        sys.exit(decision.exit_code)

    for warning in decision.warnings:
        print_warning(warning)

    target = manifest_version(decision, full_version=full_version)
    _display_update_plan(manifest_path, decision, target, dry_run)

    if target == decision.current_version:
        print_success(f"{manifest_path.name} already declares {target}")
        sys.exit(0)

    if dry_run:
        print_warning("\nDry run mode - no changes applied")
        sys.exit(0)

    if not yes and not confirm(f"\nWrite {target} to {manifest_path.name}?", default=True):
        logger.info("Update cancelled by user")
        sys.exit(0)

    try:
        backup_path = write_declared_version(
            manifest_path, target, config.version_field, backup=backup
        )
    except VersionKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if backup_path is not None:
        logger.info("Created backup: %s", backup_path)
    print_success(f"Updated {manifest_path.name}: {decision.current_version} -> {target}")
    sys.exit(0)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def manifest_version(decision: VersionDecision, *, full_version: bool = False) -> str:
    """Return the version string to write for a successful ``decision``.

    Example::

        >>> manifest_version(VersionDecision(success=True, new_version="1.3.0-beta.2"))
        '1.3.0'
    """
    if full_version:
        return str(decision.new_version)
    return str(ReleaseVersion.parse(str(decision.new_version)).base)


def _display_update_plan(
    manifest_path: Path,
    decision: VersionDecision,
    target: str,
    dry_run: bool,
) -> None:
    """Display the planned manifest change as a Rich-formatted table."""
    title = "Update Plan (Dry Run)" if dry_run else "Update Plan"
    data = [
        {
            "Manifest": str(manifest_path),
            "Current": decision.current_version or "-",
            "New Version": f"[bold green]{target}[/bold green]",
            "Release": decision.new_version or "-",
        }
    ]
    column_styles = {
        "Manifest": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "New Version": {"justify": "center"},
        "Release": {"justify": "center"},
    }
    print_table(data, title=title, column_styles=column_styles)
