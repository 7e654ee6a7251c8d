"""Numeric version stepping for versionkeeper."""

from __future__ import annotations

from typing import Optional

from versionkeeper.models.version import (
    BumpCategory,
    PreReleaseTag,
    ReleaseVersion,
    SemanticVersion,
)


class VersionStepper:
    """Pure version arithmetic, with no pre-release awareness."""

    @staticmethod
    def step(version: SemanticVersion, bump: BumpCategory) -> SemanticVersion:
        """Increment ``version`` by ``bump``.

        Major zeros minor and patch, minor zeros patch, patch increments
        patch. ``BumpCategory.NONE`` returns ``version`` unchanged.
        """
        return version.bump(bump)

    @staticmethod
    def with_suffix(
        base: SemanticVersion,
        tier: PreReleaseTag,
        build_number: Optional[int] = None,
    ) -> ReleaseVersion:
        """Attach a ``-tier.N`` suffix to ``base`` (nothing for stable)."""
        if not tier.is_prerelease:
            return ReleaseVersion(base)
        return ReleaseVersion(base, tier, build_number)
