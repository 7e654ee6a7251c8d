"""First release resolution for versionkeeper.

A repository without any release tag is cutting its first release. The
manifest's declared version is the starting point, but only a
*standard start* is accepted without confirmation:

- ``broad`` policy (default): any ``0.x.y``, or exactly ``1.0.0``
- ``strict`` policy: only ``0.0.0`` or ``1.0.0``

Anything else (``2.3.0`` in a fresh repository usually means a project
migrated from elsewhere) blocks until forced, with guidance describing
the options.

The first release publishes the declared version itself as its base;
``0.0.0`` is a placeholder and is bumped by the aggregated commit
evidence instead.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from versionkeeper.constants import DEFAULT_FIRST_RELEASE_POLICY, FIRST_RELEASE_POLICIES
from versionkeeper.core.classifier import HistoryAggregator
from versionkeeper.core.lifecycle import PreReleaseLifecycle
from versionkeeper.exceptions import UnusualFirstReleaseVersionError
from versionkeeper.models.decision import LifecycleAction, VersionDecision
from versionkeeper.models.version import PreReleaseTag, ReleaseVersion, SemanticVersion
from versionkeeper.utils.logger import get_logger

logger = get_logger("first_release")

_PLACEHOLDER = SemanticVersion(0, 0, 0)
_ONE = SemanticVersion(1, 0, 0)


class FirstReleaseResolver:
    """Validate the starting version and compute the initial release.

    Args:
        aggregator: Commit history aggregator.
        lifecycle: Lifecycle used for build-number computation.
        policy: ``"broad"`` or ``"strict"`` standard-start policy.

    Raises:
        ValueError: If ``policy`` is unknown.
    """

    def __init__(
        self,
        aggregator: Optional[HistoryAggregator] = None,
        lifecycle: Optional[PreReleaseLifecycle] = None,
        *,
        policy: str = DEFAULT_FIRST_RELEASE_POLICY,
    ) -> None:
        if policy not in FIRST_RELEASE_POLICIES:
            raise ValueError(
                f"Unknown first release policy {policy!r}; "
                f"expected one of {', '.join(FIRST_RELEASE_POLICIES)}"
            )
        self.aggregator = aggregator or HistoryAggregator()
        self.lifecycle = lifecycle or PreReleaseLifecycle()
        self.policy = policy

    def is_standard_start(self, version: SemanticVersion) -> bool:
        """Return True if ``version`` is an accepted first-release version."""
        if version in (_PLACEHOLDER, _ONE):
            return True
        return self.policy == "broad" and version.major == 0

    def validate(self, declared: SemanticVersion, forced: bool) -> None:
        """Check the declared starting version.

        Raises:
            UnusualFirstReleaseVersionError: If ``declared`` is not a
                standard start and ``forced`` is false.
        """
        if self.is_standard_start(declared) or forced:
            if forced and not self.is_standard_start(declared):
                logger.warning("Forcing first release from unusual version %s", declared)
            return

        raise UnusualFirstReleaseVersionError(
            f"First release with unusual version {declared}: no release tags exist "
            f"and the manifest does not declare a standard starting version",
            declared_version=str(declared),
            instructions=self._guidance(declared),
        )

    def resolve(
        self,
        declared_version: str,
        history: Sequence[str],
        forced: bool = False,
        *,
        tier: PreReleaseTag = PreReleaseTag.NONE,
        existing_tags: Iterable[str] = (),
    ) -> VersionDecision:
        """Compute the first release.

        Args:
            declared_version: Version declared in the manifest.
            history: Every commit subject in the repository.
            forced: Accept a non-standard declared version.
            tier: Tier of the release branch.
            existing_tags: Full tag list (non-release tags are ignored).

        Returns:
            A :class:`VersionDecision` with ``is_first_release=True``.

        Raises:
            MalformedVersionError: If ``declared_version`` is not
                ``MAJOR.MINOR.PATCH``, optionally with a pre-release suffix
                (only its base is used).
            UnusualFirstReleaseVersionError: See :meth:`validate`.
        """
        declared_release = ReleaseVersion.parse(declared_version)
        declared = declared_release.base
        self.validate(declared, forced)

        summary = self.aggregator.aggregate(history)
        base = declared
        if declared == _PLACEHOLDER:
            base = self.lifecycle.stepper.step(declared, summary.bump)

        build = self.lifecycle.build_number(LifecycleAction.START, base, tier, existing_tags)
        new_version = self.lifecycle.stepper.with_suffix(base, tier, build)
        logger.info("First release: %s -> %s", declared, new_version)

        warnings = []
        if forced and not self.is_standard_start(declared):
            warnings.append(f"First release forced from non-standard version {declared}")

        return VersionDecision(
            success=True,
            bump_category=summary.bump,
            current_version=str(declared_release),
            new_version=str(new_version),
            pre_release_tag=tier,
            build_number=build,
            is_first_release=True,
            warnings=warnings,
            commit_prerelease_hint=summary.prerelease,
        )

    @staticmethod
    def _guidance(declared: SemanticVersion) -> str:
        """Return the multi-option guidance text for an unusual start."""
        return (
            f"No release tags were found, but the manifest declares {declared}.\n"
            "Choose one of the following:\n"
            "  1. Fresh start: set the manifest version to 0.1.0 (or 1.0.0 for a\n"
            "     stable first release) and run again.\n"
            f"  2. Forced migration: keep {declared} (for example a project moved\n"
            "     from another repository) and re-run with --force-first-release.\n"
            "  3. Reset: if release tags should exist, fetch them (git fetch --tags)\n"
            "     or recreate the last release tag, then run again."
        )
