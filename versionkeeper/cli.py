"""
Command-line interface for versionkeeper.

The ``versionkeeper`` group owns the options every command shares (config
file, verbosity, color, CI annotations), loads the configuration once and
hands it to the subcommands through :class:`VersionKeeperContext`.

Exit codes are uniform across commands:

    0    version computed (or manifest updated)
    1    version not computed, human action required, or application error
    2    usage error
    130  interrupted
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from versionkeeper.config import load_config
from versionkeeper.__version__ import __version__
from versionkeeper.context import VersionKeeperContext
from versionkeeper.exceptions import ConfigError, VersionKeeperError
from versionkeeper.utils.logger import get_logger, setup_logging
from versionkeeper.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")

_VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="VERSIONKEEPER_CONFIG",
    help="Configuration file (default: versionkeeper.toml or pyproject.toml).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Log decisions (-v) or every git query (-vv) to stderr.",
)
@click.option(
    "--color/--no-color",
    default=True,
    envvar="VERSIONKEEPER_COLOR",
    help="Enable or disable colored output.",
)
@click.option(
    "--annotations/--no-annotations",
    default=None,
    envvar="VERSIONKEEPER_ANNOTATIONS",
    help="Log warnings as GitHub Actions annotations (default: on in Actions).",
)
@click.version_option(
    version=__version__,
    prog_name="versionkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
    annotations: Optional[bool],
) -> None:
    """versionkeeper: decide the next semantic version from git history.

    \b
    Commands:
      versionkeeper next        Compute and report the next version
      versionkeeper update      Compute the next version and write the manifest
      versionkeeper classify    Show the bump evidence in commit messages

    \b
    Examples:
      versionkeeper next --branch dev
      versionkeeper next --target-branch main --format env
      versionkeeper -v update --dry-run
    """
    # NO_COLOR must be settled before the first console is created
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose, annotations)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    keeper_ctx = VersionKeeperContext()
    keeper_ctx.config_path = config or loaded_config.source_path
    keeper_ctx.verbose = verbose
    keeper_ctx.color = color
    keeper_ctx.config = loaded_config
    ctx.obj = keeper_ctx

    logger.debug("versionkeeper v%s, config %s", __version__, keeper_ctx.config_path)
    logger.debug("Release branches: %s", loaded_config.release_branches)


def _configure_logging(verbose: int, annotations: Optional[bool] = None) -> None:
    """Map ``-v`` counts to a log level and install the handler."""
    level = _VERBOSITY_LEVELS.get(verbose, logging.DEBUG)
    setup_logging(level=level, verbose=verbose >= 2, annotations=annotations)


from versionkeeper.commands.next import next_version  # noqa: E402
from versionkeeper.commands.update import update  # noqa: E402
from versionkeeper.commands.classify import classify  # noqa: E402

cli.add_command(next_version)
cli.add_command(update)
cli.add_command(classify)


def main() -> int:
    """Run the CLI and return its exit code instead of exiting."""
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("Operation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except VersionKeeperError as exc:
        print_error(str(exc))
        logger.debug("Error details: %s", exc.details or "<none>", exc_info=True)
        return 1

    except KeyboardInterrupt:
        print_warning("Operation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
