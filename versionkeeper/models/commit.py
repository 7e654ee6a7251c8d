"""
Commit evidence model for versionkeeper.

Commit messages are opaque strings; this module defines the typed results
produced when they are classified, one message at a time
(:class:`Classification`) or as a whole history (:class:`HistorySummary`).
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from versionkeeper.models.version import BumpCategory, PreReleaseTag


class Classification(NamedTuple):
    """Bump evidence extracted from a single commit message.

    Attributes:
        bump: Bump category selected by the highest-precedence keyword,
            ``PATCH`` when no keyword matched.
        prerelease: Pre-release hint from a ``KEYWORD-ALPHA`` or
            ``KEYWORD-BETA`` marker.
        keyword: The keyword that selected ``bump``, or ``None`` when the
            patch default was used.
    """

    bump: BumpCategory
    prerelease: PreReleaseTag = PreReleaseTag.NONE
    keyword: Optional[str] = None

    @property
    def explicit(self) -> bool:
        """True when a keyword, not the default, selected the bump."""
        return self.keyword is not None


class HistorySummary(NamedTuple):
    """Aggregate evidence over a sequence of commit messages.

    Attributes:
        bump: Highest bump category seen (``PATCH`` for empty input).
        prerelease: Resolved pre-release hint (beta wins over alpha).
        explicit: True when at least one message matched a keyword of the
            winning category.
        message_count: Number of messages examined.
    """

    bump: BumpCategory
    prerelease: PreReleaseTag = PreReleaseTag.NONE
    explicit: bool = False
    message_count: int = 0
