"""Read-only git queries for versionkeeper.

:class:`GitRepository` supplies the three data feeds the decision engine
consumes (tags, commit subjects, default branch) by running ``git`` as a
subprocess. It never creates tags, commits, or otherwise mutates the
repository.

Any failure (``git`` missing, not a repository, unknown ref) is raised as
:class:`~versionkeeper.exceptions.CollaboratorUnavailableError`; the
engine decides whether that is fatal.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Union

from versionkeeper.constants import BRANCH_REF_PREFIX
from versionkeeper.exceptions import CollaboratorUnavailableError
from versionkeeper.utils.logger import get_logger

logger = get_logger("git")

_REMOTE_HEAD_REF = "refs/remotes/origin/HEAD"
_REMOTE_PREFIX = "refs/remotes/origin/"


class GitRepository:
    """Git repository accessed through the ``git`` command line.

    Args:
        path: Repository working directory. Defaults to the current
            directory.
        git: Name or path of the git executable.
    """

    def __init__(self, path: Union[str, Path, None] = None, *, git: str = "git") -> None:
        self.path = Path(path) if path else Path.cwd()
        self.git = git

    def __repr__(self) -> str:
        return f"GitRepository(path={str(self.path)!r})"

    def _run(self, *args: str) -> str:
        """Run a git command and return its stripped stdout.

        Raises:
            CollaboratorUnavailableError: If git is missing or exits non-zero.
        """
        command = [self.git, *args]
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise CollaboratorUnavailableError(
                f"git executable not found: {self.git}",
                command=" ".join(command),
            ) from e
        except subprocess.CalledProcessError as e:
            raise CollaboratorUnavailableError(
                f"git failed with exit code {e.returncode}",
                command=" ".join(command),
                stderr=e.stderr,
            ) from e
        return result.stdout.strip()

    @staticmethod
    def _lines(output: str) -> List[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]

    # ------------------------------------------------------------------
    # Data feeds
    # ------------------------------------------------------------------

    def list_tags(self) -> List[str]:
        """Return every tag name in the repository."""
        return self._lines(self._run("tag", "--list"))

    def commits_since(self, ref: Optional[str], target: str = "HEAD") -> List[str]:
        """Return commit subjects reachable from ``target`` but not ``ref``.

        Args:
            ref: Latest release tag. When given, only merge-commit subjects
                in ``ref..target`` are returned. When ``None`` (first
                release), every commit subject reachable from ``target``.
            target: Branch or revision the release is cut from.
        """
        if ref:
            output = self._run("log", "--merges", "--format=%s", f"{ref}..{target}")
        else:
            output = self._run("log", "--format=%s", target)
        return self._lines(output)

    def default_branch(self) -> str:
        """Return the default branch name.

        Reads ``refs/remotes/origin/HEAD`` and falls back to the currently
        checked-out branch when no remote HEAD is recorded.
        """
        try:
            ref = self._run("symbolic-ref", _REMOTE_HEAD_REF)
        except CollaboratorUnavailableError:
            logger.debug("No remote HEAD recorded, using the checked-out branch")
            return self.current_branch()
        if ref.startswith(_REMOTE_PREFIX):
            return ref[len(_REMOTE_PREFIX):]
        return ref

    def current_branch(self) -> str:
        """Return the checked-out branch name."""
        ref = self._run("symbolic-ref", "--short", "HEAD")
        if ref.startswith(BRANCH_REF_PREFIX):
            return ref[len(BRANCH_REF_PREFIX):]
        return ref
