"""
Centralized constants for versionkeeper.

This module defines immutable defaults used across versionkeeper,
including the release-branch table, commit keyword groups, version and
tag patterns, CI output keys, and logging formats. All values are
intended to be treated as read-only; components receive copies of them
through :class:`~versionkeeper.config.VersionKeeperConfig`.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Release branches
# ---------------------------------------------------------------------------

#: Default mapping of release branch name to pre-release tier.
#: ``"stable"`` means the branch cuts plain ``major.minor.patch`` releases.
DEFAULT_RELEASE_BRANCHES: Final[Mapping[str, str]] = {
    "release": "stable",
    "main": "beta",
    "master": "beta",
    "staging": "beta",
    "dev": "alpha",
    "development": "alpha",
}

#: Prefix stripped from fully-qualified branch refs before lookup.
BRANCH_REF_PREFIX: Final[str] = "refs/heads/"

#: Branch matching is case-insensitive unless configured otherwise.
DEFAULT_CASE_SENSITIVE_BRANCHES: Final[bool] = False

# ---------------------------------------------------------------------------
# Commit keywords (checked in precedence order: major, minor, patch)
# ---------------------------------------------------------------------------

#: Keywords that select a major bump. ``!:`` is the conventional-commit
#: breaking marker (``feat!:``, ``fix(api)!:``).
DEFAULT_MAJOR_KEYWORDS: Final[Sequence[str]] = (
    "BREAKING",
    "MAJOR",
    "breaking change",
    "!:",
)

#: Keywords that select a minor bump.
DEFAULT_MINOR_KEYWORDS: Final[Sequence[str]] = (
    "FEATURE",
    "MINOR",
    "FEAT",
    "feat:",
    "feature:",
    "add:",
    "new:",
)

#: Keywords that select a patch bump.
DEFAULT_PATCH_KEYWORDS: Final[Sequence[str]] = (
    "PATCH",
    "FIX",
    "BUGFIX",
    "HOTFIX",
)

# ---------------------------------------------------------------------------
# Versions and tags
# ---------------------------------------------------------------------------

#: Strict ``major.minor.patch`` with optional leading ``v``.
SEMVER_PATTERN: Final[str] = r"^v?(\d+)\.(\d+)\.(\d+)$"

#: Release tag shape: stable or ``-alpha.N`` / ``-beta.N`` pre-release.
RELEASE_TAG_PATTERN: Final[str] = (
    r"^v?(\d+)\.(\d+)\.(\d+)(?:-(alpha|beta)\.(\d+))?$"
)

#: Default prefix written in front of new tags.
DEFAULT_TAG_PREFIX: Final[str] = "v"

#: First-release policies. ``broad`` accepts any ``0.x.y`` plus ``1.0.0``;
#: ``strict`` accepts only ``0.0.0`` and ``1.0.0``.
FIRST_RELEASE_POLICIES: Final[Sequence[str]] = ("broad", "strict")

DEFAULT_FIRST_RELEASE_POLICY: Final[str] = "broad"

# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------

#: Default manifest holding the declared version.
DEFAULT_MANIFEST: Final[str] = "pyproject.toml"

#: Default key holding the version inside the manifest.
DEFAULT_VERSION_FIELD: Final[str] = "version"

#: Maximum allowed manifest size (in bytes).
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# CI outputs
# ---------------------------------------------------------------------------

#: Keys emitted for CI consumption, in output order.
OUTPUT_KEYS: Final[Sequence[str]] = (
    "success",
    "current-version",
    "bump-type",
    "new-version",
    "new-tag",
    "last-release-tag",
    "target-branch",
    "suffix",
    "build-number",
    "is-first-release",
    "warning",
    "action-required",
    "action-instructions",
)

#: Environment variable naming the GitHub Actions step output file.
GITHUB_OUTPUT_ENV: Final[str] = "GITHUB_OUTPUT"

#: Environment variable naming the GitHub Actions step summary file.
GITHUB_STEP_SUMMARY_ENV: Final[str] = "GITHUB_STEP_SUMMARY"

#: Set to ``"true"`` by the GitHub Actions runner.
GITHUB_ACTIONS_ENV: Final[str] = "GITHUB_ACTIONS"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
