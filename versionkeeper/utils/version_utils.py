"""
Tag filtering and ordering utilities for versionkeeper.

Release tags are ordered with PEP 440 precedence from ``packaging``.
For the tag shapes versionkeeper accepts (``1.2.0``, ``1.2.0-alpha.3``,
``1.2.0-beta.1``) PEP 440 normalizes the suffix to ``a3``/``b1``, which
gives the same ordering as SemVer: ``1.2.0a3 < 1.2.0b1 < 1.2.0``.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from packaging.version import InvalidVersion, Version, parse

from versionkeeper.constants import RELEASE_TAG_PATTERN
from versionkeeper.models.version import PreReleaseTag, SemanticVersion

_RELEASE_TAG_RE = re.compile(RELEASE_TAG_PATTERN, re.IGNORECASE)


def filter_release_tags(tags: Iterable[str]) -> List[str]:
    """Return the tags that look like release versions, in input order.

    Non-conforming tags (``latest``, ``v1.2``, ``1.2.0-rc.1``) are ignored.
    """
    return [tag.strip() for tag in tags if tag and _RELEASE_TAG_RE.match(tag.strip())]


def tag_sort_key(tag: str) -> Version:
    """Return a PEP 440 sort key for a release tag.

    Raises:
        InvalidVersion: If ``tag`` cannot be parsed.
    """
    parsed = parse(tag.strip().lstrip("vV"))
    if not isinstance(parsed, Version):
        raise InvalidVersion(tag)
    return parsed


def sort_release_tags(tags: Iterable[str]) -> List[str]:
    """Return release tags sorted from lowest to highest precedence.

    Ties (``v1.0.0`` and ``1.0.0``) keep their input order.
    """
    ordered = []
    for tag in filter_release_tags(tags):
        try:
            ordered.append((tag_sort_key(tag), tag))
        except InvalidVersion:
            continue
    ordered.sort(key=lambda item: item[0])
    return [tag for _, tag in ordered]


def latest_release_tag(tags: Iterable[str]) -> Optional[str]:
    """Return the highest-precedence release tag, or ``None`` if there is none.

    Examples:
        >>> latest_release_tag(["v1.0.0", "v1.1.0-alpha.2", "nightly"])
        'v1.1.0-alpha.2'
        >>> latest_release_tag(["v1.1.0-beta.1", "v1.1.0"])
        'v1.1.0'
        >>> latest_release_tag(["docs"]) is None
        True
    """
    ordered = sort_release_tags(tags)
    return ordered[-1] if ordered else None


def max_build_number(
    tags: Iterable[str],
    base: SemanticVersion,
    tier: PreReleaseTag,
) -> int:
    """Return the highest build number among ``{base}-{tier}.N`` tags.

    Args:
        tags: Full tag list.
        base: Base version of the series.
        tier: Pre-release tier of the series.

    Returns:
        The largest ``N`` found, or ``0`` when no such tag exists.
    """
    if not tier.is_prerelease:
        return 0

    pattern = re.compile(
        rf"^v?{base.major}\.{base.minor}\.{base.patch}-{tier.value}\.(\d+)$",
        re.IGNORECASE,
    )
    highest = 0
    for tag in tags:
        match = pattern.match(tag.strip()) if tag else None
        if match:
            highest = max(highest, int(match.group(1)))
    return highest
