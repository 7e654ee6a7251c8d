"""
File access for versionkeeper.

Two kinds of files are touched: the project manifest, which is read and
rewritten in place, and the CI files (``$GITHUB_OUTPUT``,
``$GITHUB_STEP_SUMMARY``) that several workflow steps append to. Every
``OSError`` surfaces as :class:`FileOperationError` carrying the path and
the operation that failed.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from versionkeeper.constants import MAX_FILE_SIZE
from versionkeeper.exceptions import FileOperationError
from versionkeeper.utils.logger import get_logger

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _existing_file(path: Path, operation: str) -> Path:
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}", file_path=str(path), operation=operation
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}", file_path=str(path), operation=operation
        )
    return path.resolve()


def _discard(temp: Path) -> None:
    try:
        temp.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove %s: %s", temp, exc)


def _replace_atomically(target: Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then swap it into place.

    Readers see either the old manifest or the new one, never a partial
    write. The file mode of an existing ``target`` is carried over.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    temp = Path(name)

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if target.exists():
            shutil.copymode(target, temp)
        os.replace(temp, target)
    except OSError as exc:
        _discard(temp)
        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Return the text of a manifest file.

    Args:
        file_path: Manifest path.
        max_size: Refuse files larger than this many bytes; ``None`` reads
            any size.
        encoding: Text encoding.

    Raises:
        FileOperationError: If the file is missing, not a regular file,
            too large, or cannot be decoded.
    """
    path = _existing_file(Path(file_path), "read")

    size = path.stat().st_size
    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def create_backup(file_path: PathLike) -> Path:
    """Copy a manifest to ``<name>.<timestamp>.backup`` in the same directory."""
    path = _existing_file(Path(file_path), "backup")
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    destination = path.with_name(f"{path.name}.{stamp}.backup")

    try:
        shutil.copy2(path, destination)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Backed up %s to %s", path.name, destination)
    return destination


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    backup: bool = False,
) -> Optional[Path]:
    """Replace the contents of ``file_path`` atomically.

    Returns:
        The backup path when ``backup`` is set and the file existed,
        otherwise ``None``.
    """
    path = Path(file_path)
    backup_path = create_backup(path) if backup and path.is_file() else None
    _replace_atomically(path, content)
    return backup_path


def append_text(file_path: PathLike, content: str) -> None:
    """Append to a CI file, creating it if needed.

    Other workflow steps write to the same ``$GITHUB_OUTPUT``, so it is
    never replaced.
    """
    path = Path(file_path)
    try:
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(content)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to append to file: {exc}",
            file_path=str(path),
            operation="append",
            original_error=exc,
        ) from exc
