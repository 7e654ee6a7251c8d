"""
Custom exception hierarchy for versionkeeper.

Every error versionkeeper raises derives from :class:`VersionKeeperError`,
which carries a ``details`` mapping (tag, branch, path, ...) that is
appended to the message and logged with it.

Each subclass carries a ``kind`` naming its category in the error
taxonomy. The decision engine never lets these escape: it converts them
into a failed :class:`~versionkeeper.models.decision.VersionDecision`
whose ``error_kind`` is the exception's ``kind``.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class VersionKeeperError(Exception):
    """Base exception for all versionkeeper errors.

    Errors that a person has to resolve (a non-standard first release, a
    manifest that disagrees with the tags) also carry ``instructions``.

    Args:
        message: What went wrong.
        details: Values that identify the failing input.
        instructions: Optional remediation text shown to a human.
    """

    kind: str = "VersionKeeperError"

    __slots__ = ("message", "details", "instructions")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
        *,
        instructions: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        self.instructions: Optional[str] = instructions
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )

    @property
    def action_required(self) -> bool:
        """Return True when the error needs a human decision to resolve."""
        return self.instructions is not None


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Record ``value`` under ``key`` unless it is ``None``."""
    if value is not None:
        details[key] = value


class ConfigError(VersionKeeperError):
    """Raised when a configuration file is missing, unreadable, or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file involved.
        option: Name of the offending option, if any.
    """

    kind = "ConfigError"

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class NotReleaseBranchError(VersionKeeperError):
    """Raised when a branch is absent from the release-branch table.

    Args:
        branch: The branch that was evaluated.
        allowed: Names of the branches that may release.
    """

    kind = "NotReleaseBranch"

    __slots__ = ("branch", "allowed")

    def __init__(self, branch: str, *, allowed: Optional[list] = None) -> None:
        self.branch = branch
        self.allowed = sorted(allowed or [])
        message = f"Branch '{branch}' is not a release branch"
        if self.allowed:
            message += f"; releases are cut from: {', '.join(self.allowed)}"
        super().__init__(message, {"branch": branch})


class InvalidLifecycleTransitionError(VersionKeeperError):
    """Raised when a pre-release lifecycle step moves backwards.

    Args:
        message: Explanation naming the forbidden transition.
        current: Tier of the latest tag.
        target: Tier requested by the branch.
        base_version: Base version the series belongs to.
    """

    kind = "InvalidLifecycleTransition"

    __slots__ = ("current", "target", "base_version")

    def __init__(
        self,
        message: str,
        *,
        current: Optional[str] = None,
        target: Optional[str] = None,
        base_version: Optional[str] = None,
        instructions: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "current", current)
        _add_if(details, "target", target)
        _add_if(details, "version", base_version)

        super().__init__(message, details, instructions=instructions)

        self.current = current
        self.target = target
        self.base_version = base_version


class UnusualFirstReleaseVersionError(VersionKeeperError):
    """Raised when a first release starts from a non-standard version."""

    kind = "UnusualFirstReleaseVersion"

    __slots__ = ("declared_version",)

    def __init__(
        self,
        message: str,
        *,
        declared_version: str,
        instructions: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            {"declared": declared_version},
            instructions=instructions,
        )
        self.declared_version = declared_version


class VersionTagMismatchError(VersionKeeperError):
    """Raised when the manifest version disagrees with the latest tag.

    Args:
        message: Error description.
        declared_version: Version declared in the manifest.
        tag_version: Version of the latest release tag.
    """

    kind = "VersionTagMismatch"

    __slots__ = ("declared_version", "tag_version")

    def __init__(
        self,
        message: str,
        *,
        declared_version: str,
        tag_version: str,
        instructions: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            {"declared": declared_version, "tag": tag_version},
            instructions=instructions,
        )
        self.declared_version = declared_version
        self.tag_version = tag_version


class MalformedVersionError(VersionKeeperError):
    """Raised when a string is not a valid version.

    Args:
        value: The rejected input.
        expected: Human description of the accepted shape.
    """

    kind = "MalformedVersionString"

    __slots__ = ("value",)

    def __init__(self, value: str, *, expected: str = "MAJOR.MINOR.PATCH") -> None:
        super().__init__(
            f"Invalid version string '{value}': expected {expected}",
            {"value": value},
        )
        self.value = value


class ManifestFieldMissingError(VersionKeeperError):
    """Raised when the manifest has no version field.

    Args:
        message: Error description.
        file_path: Manifest path.
        field: Name of the missing field.
    """

    kind = "ManifestFieldMissing"

    __slots__ = ("file_path", "field")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "field", field)

        super().__init__(message, details)

        self.file_path = file_path
        self.field = field


class CollaboratorUnavailableError(VersionKeeperError):
    """Raised when a version-control query cannot be completed.

    Args:
        message: Error description.
        command: The command that failed.
        stderr: Captured error output, if any.
    """

    kind = "CollaboratorUnavailable"

    __slots__ = ("command", "stderr")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        stderr: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "command", command)
        if stderr:
            details["stderr"] = stderr.strip()[:200]

        super().__init__(message, details)

        self.command = command
        self.stderr = stderr


class FileOperationError(VersionKeeperError):
    """Raised when a manifest or CI file cannot be read or written.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write).
        original_error: The underlying ``OSError`` or decode error.
    """

    kind = "FileOperationError"

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
