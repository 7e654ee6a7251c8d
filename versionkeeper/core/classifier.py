"""Commit message classification for versionkeeper.

Maps commit and merge-commit subjects to bump evidence using keyword
groups checked in strict precedence order:

1. **Major**: ``BREAKING``, ``MAJOR``, ``breaking change``, ``!:``
2. **Minor**: ``FEATURE``, ``MINOR``, ``FEAT``, ``feat:``, ``feature:``,
   ``add:``, ``new:``
3. **Patch**: ``PATCH``, ``FIX``, ``BUGFIX``, ``HOTFIX``

Matching is case-insensitive. A message that matches nothing is a patch:
every release advances at least the patch number.

Independently of which group matched, a ``KEYWORD-ALPHA`` or
``KEYWORD-BETA`` marker (``FEATURE-BETA: new login``) carries a
pre-release hint. Across a history, beta wins over alpha.

Typical usage::

    classifier = CommitClassifier()
    classifier.classify("feat: add export")
    # Classification(bump=<BumpCategory.MINOR: 2>, prerelease=..., keyword='FEATURE')

    aggregator = HistoryAggregator(classifier)
    summary = aggregator.aggregate(["fix: typo", "BREAKING: drop py2"])
    summary.bump  # BumpCategory.MAJOR
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from versionkeeper.constants import (
    DEFAULT_MAJOR_KEYWORDS,
    DEFAULT_MINOR_KEYWORDS,
    DEFAULT_PATCH_KEYWORDS,
)
from versionkeeper.models.commit import Classification, HistorySummary
from versionkeeper.models.version import BumpCategory, PreReleaseTag
from versionkeeper.utils.logger import get_logger

logger = get_logger("classifier")


@dataclass(frozen=True)
class KeywordTable:
    """Keyword groups used to classify commit messages.

    Keywords made of word characters only (``FIX``) match as whole words,
    so ``prefix`` does not count as a fix. Keywords containing punctuation
    (``feat:``, ``!:``) match literally anywhere in the message.

    Attributes:
        major: Keywords selecting a major bump.
        minor: Keywords selecting a minor bump.
        patch: Keywords selecting a patch bump.
    """

    major: Tuple[str, ...] = tuple(DEFAULT_MAJOR_KEYWORDS)
    minor: Tuple[str, ...] = tuple(DEFAULT_MINOR_KEYWORDS)
    patch: Tuple[str, ...] = tuple(DEFAULT_PATCH_KEYWORDS)

    def groups(self) -> List[Tuple[BumpCategory, Tuple[str, ...]]]:
        """Return keyword groups in precedence order."""
        return [
            (BumpCategory.MAJOR, self.major),
            (BumpCategory.MINOR, self.minor),
            (BumpCategory.PATCH, self.patch),
        ]

    def word_keywords(self) -> List[str]:
        """Return every keyword usable as a pre-release marker stem."""
        words = []
        for _, keywords in self.groups():
            words.extend(k for k in keywords if re.fullmatch(r"\w+", k))
        return words


def _keyword_pattern(keyword: str) -> Pattern[str]:
    """Compile a case-insensitive pattern for one keyword."""
    escaped = re.escape(keyword)
    if re.fullmatch(r"[\w ]+", keyword):
        escaped = rf"(?<![\w]){escaped}(?![\w])"
    if keyword == "!:":
        # Conventional-commit breaking marker: type[(scope)]!:
        escaped = r"\w+(?:\([^)]*\))?!:"
    return re.compile(escaped, re.IGNORECASE)


class CommitClassifier:
    """Classify a single commit message into bump evidence.

    Args:
        keywords: Keyword table. Defaults to the built-in table.
    """

    def __init__(self, keywords: Optional[KeywordTable] = None) -> None:
        self.keywords = keywords or KeywordTable()
        self._groups: List[Tuple[BumpCategory, List[Tuple[str, Pattern[str]]]]] = [
            (category, [(kw, _keyword_pattern(kw)) for kw in group])
            for category, group in self.keywords.groups()
        ]
        stems = "|".join(
            re.escape(k) for k in sorted(self.keywords.word_keywords(), key=len, reverse=True)
        )
        self._marker_re: Optional[Pattern[str]] = (
            re.compile(rf"(?<![\w])(?:{stems})-(ALPHA|BETA)(?![\w])", re.IGNORECASE)
            if stems
            else None
        )

    def classify(self, message: str, branch_name: Optional[str] = None) -> Classification:
        """Return the bump category and pre-release hint for ``message``.

        Args:
            message: Commit subject (or merge-commit subject).
            branch_name: Optional source branch name, scanned as extra
                evidence (``hotfix/login`` counts as a patch keyword).

        Returns:
            A :class:`Classification`. The first keyword group that matches
            wins; major is absorbing. No match yields ``PATCH``.
        """
        text = message or ""
        if branch_name:
            text = f"{text}\n{branch_name}"

        hint = self.prerelease_hint(text)

        for category, patterns in self._groups:
            for keyword, pattern in patterns:
                if pattern.search(text):
                    return Classification(category, hint, keyword)

        return Classification(BumpCategory.PATCH, hint, None)

    def prerelease_hint(self, text: str) -> PreReleaseTag:
        """Return the pre-release hint carried by ``KEYWORD-ALPHA``/``KEYWORD-BETA``."""
        if self._marker_re is None:
            return PreReleaseTag.NONE
        found = {m.group(1).lower() for m in self._marker_re.finditer(text)}
        return _resolve_hints(PreReleaseTag.from_string(tier) for tier in found)


class HistoryAggregator:
    """Reduce a commit history to one bump category and one pre-release hint.

    Args:
        classifier: Classifier applied to each message.
    """

    def __init__(self, classifier: Optional[CommitClassifier] = None) -> None:
        self.classifier = classifier or CommitClassifier()

    def aggregate(self, messages: Sequence[str]) -> HistorySummary:
        """Aggregate the evidence of ``messages``.

        The highest bump category wins. Pre-release hints are resolved with
        beta over alpha. Empty input yields ``PATCH`` with no hint and
        ``explicit=False``.
        """
        best: Optional[Classification] = None
        explicit = False
        hints = []

        for message in messages:
            result = self.classifier.classify(message)
            hints.append(result.prerelease)
            if best is None or result.bump > best.bump:
                best = result
                explicit = result.explicit
            elif result.bump == best.bump and result.explicit:
                explicit = True

        if best is None:
            return HistorySummary(BumpCategory.PATCH, PreReleaseTag.NONE, False, 0)

        summary = HistorySummary(best.bump, _resolve_hints(hints), explicit, len(messages))
        logger.debug(
            "Aggregated %d message(s): bump=%s hint=%s explicit=%s",
            summary.message_count,
            summary.bump,
            summary.prerelease,
            summary.explicit,
        )
        return summary


def _resolve_hints(hints: Iterable[PreReleaseTag]) -> PreReleaseTag:
    """Pick one hint: beta beats alpha, either beats none."""
    seen = set(hints)
    if PreReleaseTag.BETA in seen:
        return PreReleaseTag.BETA
    if PreReleaseTag.ALPHA in seen:
        return PreReleaseTag.ALPHA
    return PreReleaseTag.NONE
