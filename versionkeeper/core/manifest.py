"""Manifest version reading and writing for versionkeeper.

The manifest is the file that declares the project's version. Three
shapes are supported:

- ``pyproject.toml``: ``[project].version``, then ``[tool.poetry].version``
- ``package.json``: top-level ``"version"``
- any other text file: the first ``version = "x.y.z"`` or
  ``version: x.y.z`` line (the key name is configurable)

Reading parses the file (``tomli`` / ``json``) where a parser exists.
Writing uses targeted regex replacement so formatting and comments are
preserved, then replaces the file atomically.
"""

from __future__ import annotations

import re
import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import tomli as tomllib

from versionkeeper.constants import DEFAULT_VERSION_FIELD
from versionkeeper.exceptions import FileOperationError, ManifestFieldMissingError
from versionkeeper.utils.filesystem import safe_read_file, safe_write_file
from versionkeeper.utils.logger import get_logger

logger = get_logger("manifest")

PathLike = Union[str, Path]


def read_declared_version(path: PathLike, field: str = DEFAULT_VERSION_FIELD) -> str:
    """Return the version declared in the manifest at ``path``.

    Args:
        path: Manifest file.
        field: Key holding the version.

    Returns:
        The raw version string, stripped of whitespace.

    Raises:
        FileOperationError: If the file cannot be read or parsed.
        ManifestFieldMissingError: If no version field is present.
    """
    manifest = Path(path)
    content = safe_read_file(manifest)

    if manifest.name == "pyproject.toml":
        version = _read_pyproject(content, manifest, field)
    elif manifest.suffix == ".json":
        version = _read_json(content, manifest, field)
    else:
        version = _read_text(content, field)

    if version is None:
        raise ManifestFieldMissingError(
            f"Could not find a '{field}' field in {manifest}",
            file_path=str(manifest),
            field=field,
        )

    logger.debug("Declared version in %s: %s", manifest, version)
    return version.strip()


def write_declared_version(
    path: PathLike,
    new_version: str,
    field: str = DEFAULT_VERSION_FIELD,
    *,
    backup: bool = False,
) -> Optional[Path]:
    """Replace the declared version in the manifest at ``path``.

    Args:
        path: Manifest file.
        new_version: Version string to write.
        field: Key holding the version.
        backup: Keep a timestamped copy of the original file.

    Returns:
        Path of the backup, if one was made.

    Raises:
        ManifestFieldMissingError: If no version field is present.
        FileOperationError: If the file cannot be read or written.
    """
    manifest = Path(path)
    content = safe_read_file(manifest)

    if manifest.name == "pyproject.toml":
        updated = _replace_in_section(content, r"\[project\]", field, new_version)
        if updated is None:
            updated = _replace_in_section(content, r"\[tool\.poetry\]", field, new_version)
    elif manifest.suffix == ".json":
        updated = _substitute(
            content,
            rf'^(\s*"{re.escape(field)}"\s*:\s*")[^"]*(")',
            new_version,
        )
    else:
        updated = _substitute(
            content,
            rf"^(\s*{re.escape(field)}\s*[:=]\s*[\"']?)[^\"'\s]+([\"']?)",
            new_version,
        )

    if updated is None:
        raise ManifestFieldMissingError(
            f"Could not find a '{field}' field to update in {manifest}",
            file_path=str(manifest),
            field=field,
        )

    if updated == content:
        logger.info("%s already declares %s", manifest, new_version)
        return None

    backup_path = safe_write_file(manifest, updated, backup=backup)
    logger.info("Updated %s to %s", manifest, new_version)
    return backup_path


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def _read_pyproject(content: str, path: Path, field: str) -> Optional[str]:
    data = _parse(tomllib.loads, content, path)
    project = data.get("project", {})
    if field in project:
        return str(project[field])
    if field in project.get("dynamic", []):
        raise ManifestFieldMissingError(
            f"{path} declares '{field}' as dynamic; point --manifest at the file "
            "that holds the version",
            file_path=str(path),
            field=field,
        )
    poetry = data.get("tool", {}).get("poetry", {})
    if field in poetry:
        return str(poetry[field])
    return None


def _read_json(content: str, path: Path, field: str) -> Optional[str]:
    data = _parse(json.loads, content, path)
    if isinstance(data, dict) and field in data:
        return str(data[field])
    return None


def _read_text(content: str, field: str) -> Optional[str]:
    match = re.search(
        rf"^\s*{re.escape(field)}\s*[:=]\s*[\"']?([^\"'\s]+)[\"']?",
        content,
        re.MULTILINE,
    )
    return match.group(1) if match else None


def _parse(loader: Callable[[str], Any], content: str, path: Path) -> Dict[str, Any]:
    try:
        return loader(content)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise FileOperationError(
            f"Cannot parse manifest {path.name}: {exc}",
            file_path=str(path),
            operation="parse",
            original_error=exc,
        ) from exc


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def _substitute(content: str, pattern: str, new_version: str) -> Optional[str]:
    """Replace the first match of ``pattern`` between its two groups."""
    new_content, count = re.subn(
        pattern,
        lambda m: f"{m.group(1)}{new_version}{m.group(2)}",
        content,
        count=1,
        flags=re.MULTILINE,
    )
    return new_content if count else None


def _replace_in_section(
    content: str,
    header: str,
    field: str,
    new_version: str,
) -> Optional[str]:
    """Replace ``field = "..."`` inside the TOML table starting at ``header``."""
    section_re = re.compile(rf"^{header}[ \t]*$.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL)
    match = section_re.search(content)
    if not match:
        return None

    section = _substitute(
        match.group(0),
        rf"^({re.escape(field)}\s*=\s*[\"'])[^\"']*([\"'])",
        new_version,
    )
    if section is None:
        return None
    return content[: match.start()] + section + content[match.end():]
