"""
Decision data model for versionkeeper.

This module defines the explicit result types returned by the decision
components: lifecycle steps, consistency checks, and the final
:class:`VersionDecision` record handed to CI.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from versionkeeper.constants import OUTPUT_KEYS
from versionkeeper.models.version import BumpCategory, PreReleaseTag


class LifecycleAction(Enum):
    """What a release does to the pre-release series."""

    CONTINUE = "continue"
    START = "start"
    END = "end"
    TRANSITION = "transition"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LifecycleStep:
    """Outcome of :meth:`PreReleaseLifecycle.next_state`.

    Attributes:
        valid: Whether the transition is allowed.
        action: The lifecycle action the transition represents.
        current: Tier of the latest release.
        target: Tier requested by the release branch.
        error: Explanation when ``valid`` is ``False``.
        instructions: Remediation text when ``valid`` is ``False``.
    """

    valid: bool
    action: LifecycleAction
    current: PreReleaseTag
    target: PreReleaseTag
    error: Optional[str] = None
    instructions: Optional[str] = None


class ConsistencyRelation(Enum):
    """How the manifest version relates to the latest tag."""

    EQUAL = "equal"
    EXPECTED_BUMP = "expected-bump"
    FORWARD_JUMP = "forward-jump"
    BACKWARD = "backward"


@dataclass(frozen=True)
class ConsistencyResult:
    """Outcome of :meth:`ConsistencyChecker.check`.

    Attributes:
        relation: Manifest-to-tag relation.
        requires_action: True when the release must stop for a human.
        error: Explanation when ``requires_action`` is ``True``.
        instructions: Remediation text when ``requires_action`` is ``True``.
        warning: Note recorded when a mismatch was overridden.
    """

    relation: ConsistencyRelation
    requires_action: bool = False
    error: Optional[str] = None
    instructions: Optional[str] = None
    warning: Optional[str] = None


@dataclass
class VersionDecision:
    """Final result of a version decision.

    A decision is always returned, never raised: failures set ``success``
    to ``False`` and fill ``error_message`` (and, when a human must act,
    ``action_required`` and ``action_instructions``).

    Attributes:
        success: Whether a new version was computed.
        bump_category: Aggregate bump category of the analysed history.
        current_version: Version declared in the manifest.
        new_version: Computed version string, or ``None`` on failure.
        new_tag: Tag to create for ``new_version`` (with the tag prefix).
        pre_release_tag: Tier of ``new_version`` (the branch tier).
        build_number: Build counter of a pre-release ``new_version``.
        is_first_release: True when no release tag existed.
        last_tag: Latest release tag, as found in the repository.
        branch_name: Branch under evaluation.
        target_branch: Release branch the version is computed for.
        error_message: Failure explanation.
        error_kind: Error taxonomy name of the failure.
        action_required: True when a human decision is needed.
        action_instructions: Guidance text for that decision.
        warnings: Non-fatal notes (overrides, degraded history, hints).
        commit_prerelease_hint: Pre-release hint found in commit messages.
    """

    success: bool
    bump_category: BumpCategory = BumpCategory.NONE
    current_version: Optional[str] = None
    new_version: Optional[str] = None
    new_tag: Optional[str] = None
    pre_release_tag: PreReleaseTag = PreReleaseTag.NONE
    build_number: Optional[int] = None
    is_first_release: bool = False
    last_tag: Optional[str] = None
    branch_name: Optional[str] = None
    target_branch: Optional[str] = None
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    action_required: bool = False
    action_instructions: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    commit_prerelease_hint: PreReleaseTag = PreReleaseTag.NONE

    @property
    def exit_code(self) -> int:
        """Process exit code: 0 only for a successful, unblocked decision."""
        return 0 if self.success and not self.action_required else 1

    @property
    def suffix(self) -> str:
        """Pre-release suffix of ``new_version`` (``"alpha.2"``), or empty."""
        if self.pre_release_tag.is_prerelease and self.build_number is not None:
            return f"{self.pre_release_tag.value}.{self.build_number}"
        return ""

    @property
    def warning(self) -> str:
        """All warnings joined into a single line."""
        return "; ".join(self.warnings)

    def to_outputs(self) -> Dict[str, str]:
        """Serialize to the CI key/value pairs.

        Returns:
            Mapping of output key to string value. Booleans are rendered
            as ``"true"``/``"false"``; missing values as ``""``.
        """
        warning = self.warning
        if self.error_message:
            warning = f"{self.error_message}; {warning}" if warning else self.error_message

        values = {
            "success": _flag(self.success),
            "current-version": self.current_version or "",
            "bump-type": str(self.bump_category),
            "new-version": self.new_version or "",
            "new-tag": self.new_tag or "",
            "last-release-tag": self.last_tag or "",
            "target-branch": self.target_branch or "",
            "suffix": self.suffix,
            "build-number": "" if self.build_number is None else str(self.build_number),
            "is-first-release": _flag(self.is_first_release),
            "warning": warning,
            "action-required": _flag(self.action_required),
            "action-instructions": self.action_instructions or "",
        }
        return {key: values[key] for key in OUTPUT_KEYS}

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serializable representation."""
        return {
            "success": self.success,
            "bump_category": str(self.bump_category),
            "current_version": self.current_version,
            "new_version": self.new_version,
            "new_tag": self.new_tag,
            "pre_release_tag": str(self.pre_release_tag),
            "build_number": self.build_number,
            "is_first_release": self.is_first_release,
            "last_tag": self.last_tag,
            "branch_name": self.branch_name,
            "target_branch": self.target_branch,
            "error_message": self.error_message,
            "error_kind": self.error_kind,
            "action_required": self.action_required,
            "action_instructions": self.action_instructions,
            "warnings": list(self.warnings),
            "commit_prerelease_hint": str(self.commit_prerelease_hint),
        }


def _flag(value: bool) -> str:
    return "true" if value else "false"
