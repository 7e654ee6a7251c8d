"""Configuration file loader for versionkeeper.

Settings that tune the decision (branch table, keywords, manifest location,
tag prefix) live in one of two places:

- ``versionkeeper.toml``: settings under ``[versionkeeper]`` table
- ``pyproject.toml``: settings under ``[tool.versionkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``VERSIONKEEPER_CONFIG``
2. ``versionkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.versionkeeper]`` section

Later sources win: built-in defaults, then the file, then environment
variables, then command-line options.

Typical usage::

    config = load_config()
    config = load_config(Path("ci/versionkeeper.toml"))

Example (``versionkeeper.toml``)::

    [versionkeeper]
    manifest = "package.json"
    first_release_policy = "strict"

    [versionkeeper.release_branches]
    release = "stable"
    main = "beta"
    next = "alpha"

    [versionkeeper.keywords]
    minor = ["FEATURE", "FEAT", "feat:"]
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from versionkeeper.exceptions import ConfigError
from versionkeeper.models.version import PreReleaseTag
from versionkeeper.utils.logger import get_logger
from versionkeeper.constants import (
    DEFAULT_CASE_SENSITIVE_BRANCHES,
    DEFAULT_FIRST_RELEASE_POLICY,
    DEFAULT_MAJOR_KEYWORDS,
    DEFAULT_MANIFEST,
    DEFAULT_MINOR_KEYWORDS,
    DEFAULT_PATCH_KEYWORDS,
    DEFAULT_RELEASE_BRANCHES,
    DEFAULT_TAG_PREFIX,
    DEFAULT_VERSION_FIELD,
    FIRST_RELEASE_POLICIES,
)

logger = get_logger("config")

_CONFIG_FILENAME = "versionkeeper.toml"
_SECTION = "versionkeeper"


@dataclass
class VersionKeeperConfig:
    """Parsed and validated versionkeeper configuration.

    Contains settings from ``versionkeeper.toml`` or ``pyproject.toml``.
    All fields have defaults, so empty config files are valid.

    Attributes:
        manifest: Manifest file holding the declared version, relative to
            the repository root.
        version_field: Key holding the version inside the manifest.
        tag_prefix: Prefix written in front of new tags.
        case_sensitive_branches: Match release branch names exactly.
        first_release_policy: ``"broad"`` (any ``0.x.y`` or ``1.0.0``) or
            ``"strict"`` (only ``0.0.0`` or ``1.0.0``).
        release_branches: Release branch name to tier name.
        major_keywords: Commit keywords selecting a major bump.
        minor_keywords: Commit keywords selecting a minor bump.
        patch_keywords: Commit keywords selecting a patch bump.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    manifest: str = DEFAULT_MANIFEST
    version_field: str = DEFAULT_VERSION_FIELD
    tag_prefix: str = DEFAULT_TAG_PREFIX
    case_sensitive_branches: bool = DEFAULT_CASE_SENSITIVE_BRANCHES
    first_release_policy: str = DEFAULT_FIRST_RELEASE_POLICY
    release_branches: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_RELEASE_BRANCHES)
    )
    major_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_MAJOR_KEYWORDS))
    minor_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_MINOR_KEYWORDS))
    patch_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_PATCH_KEYWORDS))

    # where the values came from; not an option
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return the effective options, keyed as they are spelled in TOML."""
        return {
            "manifest": self.manifest,
            "version_field": self.version_field,
            "tag_prefix": self.tag_prefix,
            "case_sensitive_branches": self.case_sensitive_branches,
            "first_release_policy": self.first_release_policy,
            "release_branches": dict(self.release_branches),
            "keywords": {
                "major": list(self.major_keywords),
                "minor": list(self.minor_keywords),
                "patch": list(self.patch_keywords),
            },
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Locate the file to read settings from.

    Candidates, first match wins:

    1. ``explicit_path`` (from ``--config`` or ``VERSIONKEEPER_CONFIG``)
    2. ``versionkeeper.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.versionkeeper]`` section in current directory

    Args:
        explicit_path: Path given by the user; it has to exist.

    Returns:
        The file to load, or ``None`` when defaults apply.

    Raises:
        ConfigError: If ``explicit_path`` is not an existing file.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Config from --config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / _CONFIG_FILENAME
    if own_file.is_file():
        logger.debug("Found %s: %s", _CONFIG_FILENAME, own_file)
        return own_file

    pyproject = cwd / "pyproject.toml"
    if pyproject.is_file() and _pyproject_has_section(pyproject):
        logger.debug("Found [tool.versionkeeper] in %s", pyproject)
        return pyproject

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.versionkeeper] section.

    Parse errors count as "no section" so a broken pyproject.toml does not
    prevent running with defaults.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return _SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> VersionKeeperConfig:
    """Build the :class:`VersionKeeperConfig` for this run.

    Without a settings file (or with one lacking a versionkeeper table) the
    defaults are returned.

    Args:
        config_path: File named with ``--config``; ``None`` searches the
            working directory (see :func:`discover_config_file`).

    Raises:
        ConfigError: If the TOML is broken, a key is unknown, or a value
            has the wrong type.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("Using built-in defaults")
        return VersionKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(_SECTION, {})
    else:
        section = raw.get(_SECTION, {})

    if not section:
        logger.debug("Config file found but no versionkeeper section, using defaults")
        return VersionKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Effective settings: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Parse ``path`` with tomli, mapping every failure to ConfigError."""
    try:
        with open(path, "rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


_STRING_OPTIONS = ("manifest", "version_field", "tag_prefix", "first_release_policy")
_KNOWN_KEYS = set(_STRING_OPTIONS) | {
    "case_sensitive_branches",
    "release_branches",
    "keywords",
}
_KEYWORD_GROUPS = ("major", "minor", "patch")


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> VersionKeeperConfig:
    """Turn the raw versionkeeper table into a config object.

    Options missing from ``section`` keep their defaults. ``config_path``
    only appears in error messages.
    """
    config = VersionKeeperConfig()

    unknown = set(section.keys()) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for name in _STRING_OPTIONS:
        if name in section:
            val = section[name]
            if not isinstance(val, str):
                raise ConfigError(
                    f"{name} must be a string, got {type(val).__name__}",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, val)

    if config.first_release_policy not in FIRST_RELEASE_POLICIES:
        raise ConfigError(
            f"first_release_policy must be one of {', '.join(FIRST_RELEASE_POLICIES)}, "
            f"got {config.first_release_policy!r}",
            config_path=config_path,
            option="first_release_policy",
        )

    if "case_sensitive_branches" in section:
        val = section["case_sensitive_branches"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"case_sensitive_branches must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="case_sensitive_branches",
            )
        config.case_sensitive_branches = val

    if "release_branches" in section:
        config.release_branches = _parse_release_branches(
            section["release_branches"], config_path
        )

    if "keywords" in section:
        _parse_keywords(section["keywords"], config, config_path)

    return config


def _parse_release_branches(value: Any, config_path: str) -> Dict[str, str]:
    """Validate the ``release_branches`` table."""
    if not isinstance(value, dict):
        raise ConfigError(
            f"release_branches must be a table, got {type(value).__name__}",
            config_path=config_path,
            option="release_branches",
        )
    branches: Dict[str, str] = {}
    for name, tier in value.items():
        if not isinstance(tier, str):
            raise ConfigError(
                f"release_branches.{name} must be a string, got {type(tier).__name__}",
                config_path=config_path,
                option="release_branches",
            )
        try:
            PreReleaseTag.from_string(tier)
        except ValueError as exc:
            raise ConfigError(
                f"release_branches.{name}: {exc}",
                config_path=config_path,
                option="release_branches",
            ) from exc
        branches[name] = tier
    return branches


def _parse_keywords(value: Any, config: VersionKeeperConfig, config_path: str) -> None:
    """Validate the ``keywords`` table and apply it to ``config``."""
    if not isinstance(value, dict):
        raise ConfigError(
            f"keywords must be a table, got {type(value).__name__}",
            config_path=config_path,
            option="keywords",
        )
    unknown = set(value.keys()) - set(_KEYWORD_GROUPS)
    if unknown:
        raise ConfigError(
            f"Unknown keyword groups: {', '.join(sorted(unknown))}",
            config_path=config_path,
            option="keywords",
        )
    for group in _KEYWORD_GROUPS:
        if group not in value:
            continue
        words = value[group]
        if not isinstance(words, list) or not all(isinstance(w, str) and w for w in words):
            raise ConfigError(
                f"keywords.{group} must be a list of non-empty strings",
                config_path=config_path,
                option="keywords",
            )
        setattr(config, f"{group}_keywords", list(words))
