"""
Version data model for versionkeeper.

This module defines the value types the decision engine works with:

- :class:`BumpCategory`: magnitude of a version increment
- :class:`PreReleaseTag`: pre-release tier with lifecycle maturity order
- :class:`SemanticVersion`: the numeric ``major.minor.patch`` base
- :class:`ReleaseVersion`: a base plus optional ``-tier.N`` suffix

All types are immutable and hashable.
"""

from __future__ import annotations

import re
from enum import Enum, IntEnum
from dataclasses import dataclass
from typing import Optional

from versionkeeper.constants import RELEASE_TAG_PATTERN, SEMVER_PATTERN
from versionkeeper.exceptions import MalformedVersionError

_SEMVER_RE = re.compile(SEMVER_PATTERN)
_RELEASE_RE = re.compile(RELEASE_TAG_PATTERN, re.IGNORECASE)


class BumpCategory(IntEnum):
    """Magnitude of a version increment, ordered ``NONE < PATCH < MINOR < MAJOR``."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_string(cls, value: str) -> "BumpCategory":
        """Parse ``"major"``, ``"minor"``, ``"patch"`` or ``"none"``."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown bump category: {value!r}") from None


class PreReleaseTag(Enum):
    """Pre-release tier of a version.

    ``NONE`` is a stable release. For lifecycle purposes the tiers are
    ordered by maturity: ``ALPHA < BETA < NONE``.
    """

    NONE = "stable"
    ALPHA = "alpha"
    BETA = "beta"

    def __str__(self) -> str:
        return self.value

    @property
    def maturity(self) -> int:
        """Lifecycle rank; higher means closer to a stable release."""
        return _MATURITY[self]

    @property
    def is_prerelease(self) -> bool:
        return self is not PreReleaseTag.NONE

    @property
    def suffix(self) -> str:
        """Suffix label used in version strings (empty for stable)."""
        return self.value if self.is_prerelease else ""

    @classmethod
    def from_string(cls, value: Optional[str]) -> "PreReleaseTag":
        """Parse a tier name. ``None``, ``""``, ``"none"`` and ``"stable"`` are stable."""
        if value is None:
            return cls.NONE
        normalized = value.strip().lower()
        if normalized in ("", "none", "stable"):
            return cls.NONE
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown pre-release tier: {value!r}")


_MATURITY = {
    PreReleaseTag.ALPHA: 1,
    PreReleaseTag.BETA: 2,
    PreReleaseTag.NONE: 3,
}


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A ``major.minor.patch`` triple, totally ordered lexicographically.

    Attributes:
        major: Major component (non-negative).
        minor: Minor component (non-negative).
        patch: Patch component (non-negative).
    """

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise MalformedVersionError(
                    f"{self.major}.{self.minor}.{self.patch}",
                    expected="non-negative integer components",
                )

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, value: str) -> "SemanticVersion":
        """Parse ``MAJOR.MINOR.PATCH`` with an optional leading ``v``.

        Raises:
            MalformedVersionError: If ``value`` has any other shape.
        """
        match = _SEMVER_RE.match(value.strip()) if value else None
        if not match:
            raise MalformedVersionError(str(value))
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major, minor, patch)

    def bump(self, category: BumpCategory) -> "SemanticVersion":
        """Return this version incremented by ``category``."""
        if category is BumpCategory.MAJOR:
            return SemanticVersion(self.major + 1, 0, 0)
        if category is BumpCategory.MINOR:
            return SemanticVersion(self.major, self.minor + 1, 0)
        if category is BumpCategory.PATCH:
            return SemanticVersion(self.major, self.minor, self.patch + 1)
        return self


@dataclass(frozen=True)
class ReleaseVersion:
    """A released (or to-be-released) version: base plus optional tier suffix.

    Serialized as ``{base}`` for stable versions and
    ``{base}-{tier}.{build_number}`` for pre-releases.

    Attributes:
        base: Numeric base version.
        tag: Pre-release tier; ``PreReleaseTag.NONE`` for stable.
        build_number: Build counter within the tier (``>= 1``), or ``None``
            for stable versions.
    """

    base: SemanticVersion
    tag: PreReleaseTag = PreReleaseTag.NONE
    build_number: Optional[int] = None

    def __post_init__(self) -> None:
        if self.tag.is_prerelease:
            if self.build_number is None or self.build_number < 1:
                raise MalformedVersionError(
                    f"{self.base}-{self.tag.value}.{self.build_number}",
                    expected="a build number >= 1 for pre-release versions",
                )
        elif self.build_number is not None:
            raise MalformedVersionError(
                f"{self.base}+{self.build_number}",
                expected="no build number on stable versions",
            )

    def __str__(self) -> str:
        if self.tag.is_prerelease:
            return f"{self.base}-{self.tag.value}.{self.build_number}"
        return str(self.base)

    @property
    def is_prerelease(self) -> bool:
        return self.tag.is_prerelease

    @classmethod
    def parse(cls, value: str) -> "ReleaseVersion":
        """Parse ``[v]MAJOR.MINOR.PATCH[-alpha.N|-beta.N]`` (tier case-insensitive).

        Raises:
            MalformedVersionError: If ``value`` has any other shape.
        """
        match = _RELEASE_RE.match(value.strip()) if value else None
        if not match:
            raise MalformedVersionError(
                str(value), expected="MAJOR.MINOR.PATCH[-alpha.N|-beta.N]"
            )
        major, minor, patch, tier, build = match.groups()
        base = SemanticVersion(int(major), int(minor), int(patch))
        if tier is None:
            return cls(base)
        return cls(base, PreReleaseTag.from_string(tier), int(build))

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Return True if ``value`` parses as a release version."""
        return bool(value) and _RELEASE_RE.match(value.strip()) is not None
