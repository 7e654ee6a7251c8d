"""Next command implementation for versionkeeper.

Computes the next version for the repository and reports it for humans
(table), for scripts (JSON) or for CI (``key=value`` outputs).

The command wires the collaborators to the decision engine:

1. **Manifest**: reads the declared version (``pyproject.toml`` by default).
2. **GitRepository**: lists tags, commit subjects and the default branch.
3. **VersionDecisionEngine**: decides the next version.

The exit status is 0 only when a version was computed and no human action
is required, so a CI job stops before tagging on anything else.

Typical usage::

    # Decide for the checked-out branch
    $ versionkeeper next

    # Preview what merging into main would release
    $ versionkeeper next --branch feature/login --target-branch main

    # Machine-readable output
    $ versionkeeper next --format json

    # First release from a migrated project
    $ versionkeeper next --force-first-release
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Any, Callable, Optional

import click

from versionkeeper.config import VersionKeeperConfig
from versionkeeper.context import pass_context, VersionKeeperContext
from versionkeeper.core import GitRepository, VersionDecisionEngine, read_declared_version
from versionkeeper.exceptions import CollaboratorUnavailableError, VersionKeeperError
from versionkeeper.models import VersionDecision
from versionkeeper.utils import (
    colorize_bump_type,
    format_github_outputs,
    get_logger,
    get_raw_console,
    print_error,
    print_panel,
    print_table,
    print_warning,
    write_github_outputs,
    write_step_summary,
)

logger = get_logger("commands.next")


def decision_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every command that computes a decision."""
    options = [
        click.option(
            "--repo",
            "repo_path",
            type=click.Path(exists=True, file_okay=False, path_type=Path),
            default=".",
            show_default=True,
            help="Repository working directory.",
        ),
        click.option(
            "--manifest",
            "-m",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Manifest holding the declared version (default from config).",
        ),
        click.option(
            "--branch",
            "-b",
            default=None,
            envvar="VERSIONKEEPER_BRANCH",
            help="Branch under evaluation (default: checked-out branch).",
        ),
        click.option(
            "--target-branch",
            "-t",
            default=None,
            envvar="VERSIONKEEPER_TARGET_BRANCH",
            help=(
                "Release branch to compute for. Defaults to --branch, not the "
                "remote default branch; that is used only on a detached HEAD."
            ),
        ),
        click.option(
            "--force-first-release",
            is_flag=True,
            help="Accept a non-standard manifest version for the first release.",
        ),
        click.option(
            "--force-mismatch",
            is_flag=True,
            help="Accept a manifest version that disagrees with the latest tag.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command("next")
@decision_options
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json", "env"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--github-output/--no-github-output",
    default=True,
    help="Write $GITHUB_OUTPUT and $GITHUB_STEP_SUMMARY when they are set.",
)
@pass_context
def next_version(
    ctx: VersionKeeperContext,
    repo_path: Path,
    manifest: Optional[Path],
    branch: Optional[str],
    target_branch: Optional[str],
    force_first_release: bool,
    force_mismatch: bool,
    output_format: str,
    github_output: bool,
) -> None:
    """Compute the next semantic version.

    Reads the declared version from the manifest, the release tags and the
    merge-commit subjects since the latest tag, and decides the next
    version for the release branch.

    Exits:
        0 if a version was computed, 1 if it was not or a human decision
        is required.

    Example::

        $ versionkeeper next --branch dev --format env
    """
    decision = compute_decision(
        ctx.config,
        repo_path,
        manifest=manifest,
        branch=branch,
        target_branch=target_branch,
        force_first_release=force_first_release,
        force_mismatch=force_mismatch,
    )

    if github_output:
        try:
            write_github_outputs(decision.to_outputs())
            write_step_summary(decision)
        except VersionKeeperError as e:
            print_error(f"Could not write CI outputs: {e}")
            sys.exit(1)

    render_decision(decision, output_format)
    sys.exit(decision.exit_code)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def compute_decision(
    config: VersionKeeperConfig,
    repo_path: Path,
    *,
    manifest: Optional[Path] = None,
    branch: Optional[str] = None,
    target_branch: Optional[str] = None,
    force_first_release: bool = False,
    force_mismatch: bool = False,
) -> VersionDecision:
    """Read the manifest and repository, and return the engine's decision.

    Manifest problems are returned as a failed decision rather than raised,
    like every other decision failure.
    """
    repo = GitRepository(repo_path)
    manifest_path = manifest or (repo_path / config.manifest)

    if branch is None:
        try:
            branch = repo.current_branch()
        except CollaboratorUnavailableError as e:
            logger.info("No checked-out branch (%s); falling back to default branch", e)

    try:
        declared = read_declared_version(manifest_path, config.version_field)
    except VersionKeeperError as e:
        logger.warning("Cannot read declared version: %s", e)
        return VersionDecision(
            success=False,
            branch_name=branch,
            target_branch=target_branch or branch,
            error_message=str(e),
            error_kind=e.kind,
        )

    engine = VersionDecisionEngine.from_config(config)
    return engine.run(
        repo,
        declared,
        branch_name=branch,
        target_branch=target_branch,
        force_first_release=force_first_release,
        force_mismatch=force_mismatch,
    )


def render_decision(decision: VersionDecision, output_format: str) -> None:
    """Print ``decision`` in the requested format."""
    output_format = output_format.lower()

    if output_format == "json":
        click.echo(json.dumps(decision.to_dict(), indent=2))
        return

    if output_format == "env":
        click.echo(format_github_outputs(decision.to_outputs()), nl=False)
        return

    _render_table(decision)


def _render_table(decision: VersionDecision) -> None:
    """Render a decision as a Rich table with guidance panels."""
    outputs = decision.to_outputs()
    rows = [
        {"Field": "Current version", "Value": outputs["current-version"] or "-"},
        {"Field": "Last release tag", "Value": outputs["last-release-tag"] or "-"},
        {"Field": "Target branch", "Value": outputs["target-branch"] or "-"},
        {"Field": "Bump", "Value": colorize_bump_type(outputs["bump-type"])},
        {
            "Field": "New version",
            "Value": (
                f"[bold green]{decision.new_version}[/bold green]"
                if decision.new_version
                else "-"
            ),
        },
        {"Field": "New tag", "Value": outputs["new-tag"] or "-"},
    ]
    if decision.is_first_release:
        rows.append({"Field": "First release", "Value": "yes"})

    title = "Next Version" if decision.success else "Next Version (not computed)"
    print_table(
        rows,
        title=title,
        column_styles={"Field": {"style": "bold cyan", "no_wrap": True}},
    )

    for warning in decision.warnings:
        print_warning(warning)

    if decision.error_message:
        print_error(decision.error_message)

    if decision.action_required and decision.action_instructions:
        print_panel(decision.action_instructions, title="Action required", style="warning")

    if decision.success and not decision.action_required:
        get_raw_console().print(f"\n{decision.new_version}", style="success", markup=False)
