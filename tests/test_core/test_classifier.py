from __future__ import annotations

from typing import List

import pytest

from versionkeeper.core.classifier import CommitClassifier, HistoryAggregator, KeywordTable
from versionkeeper.models.version import BumpCategory, PreReleaseTag


@pytest.fixture
def classifier() -> CommitClassifier:
    return CommitClassifier()


@pytest.fixture
def aggregator(classifier: CommitClassifier) -> HistoryAggregator:
    return HistoryAggregator(classifier)


@pytest.mark.unit
class TestCommitClassifier:
    """Tests for single-message classification."""

    @pytest.mark.parametrize(
        "message",
        [
            "BREAKING: drop Python 3.7",
            "major rewrite of the parser",
            "This is a Breaking Change for plugins",
            "feat!: remove legacy API",
            "fix(api)!: change response shape",
        ],
    )
    def test_major_keywords(self, classifier: CommitClassifier, message: str) -> None:
        assert classifier.classify(message).bump is BumpCategory.MAJOR

    @pytest.mark.parametrize(
        "message",
        [
            "FEATURE: export to CSV",
            "feat: add dark mode",
            "feature: search box",
            "add: new endpoint",
            "new: onboarding flow",
            "Merge pull request #12 from org/minor-tweaks",
        ],
    )
    def test_minor_keywords(self, classifier: CommitClassifier, message: str) -> None:
        assert classifier.classify(message).bump is BumpCategory.MINOR

    @pytest.mark.parametrize(
        "message",
        ["fix: typo", "BUGFIX in parser", "hotfix for login", "patch release"],
    )
    def test_patch_keywords(self, classifier: CommitClassifier, message: str) -> None:
        result = classifier.classify(message)

        assert result.bump is BumpCategory.PATCH
        assert result.explicit is True

    def test_no_keyword_defaults_to_patch(self, classifier: CommitClassifier) -> None:
        result = classifier.classify("Update README")

        assert result.bump is BumpCategory.PATCH
        assert result.prerelease is PreReleaseTag.NONE
        assert result.keyword is None
        assert result.explicit is False

    def test_empty_message_defaults_to_patch(self, classifier: CommitClassifier) -> None:
        assert classifier.classify("").bump is BumpCategory.PATCH

    def test_major_wins_over_minor_in_same_message(self, classifier: CommitClassifier) -> None:
        result = classifier.classify("feat: new API, BREAKING old clients")

        assert result.bump is BumpCategory.MAJOR
        assert result.keyword == "BREAKING"

    def test_minor_wins_over_patch_in_same_message(self, classifier: CommitClassifier) -> None:
        assert classifier.classify("fix and FEATURE combined").bump is BumpCategory.MINOR

    def test_word_keywords_need_word_boundaries(self, classifier: CommitClassifier) -> None:
        """Test 'prefix' and 'majority' do not count as keywords."""
        result = classifier.classify("Rename prefix option for the majority case")

        assert result.bump is BumpCategory.PATCH
        assert result.explicit is False

    def test_breaking_marker_needs_a_type(self, classifier: CommitClassifier) -> None:
        assert classifier.classify("!: docs").bump is BumpCategory.PATCH

    @pytest.mark.parametrize(
        "message,hint",
        [
            ("FEATURE-BETA: new login", PreReleaseTag.BETA),
            ("fix-alpha: crash on start", PreReleaseTag.ALPHA),
            ("BREAKING-ALPHA: new storage", PreReleaseTag.ALPHA),
            ("feat: plain", PreReleaseTag.NONE),
        ],
    )
    def test_prerelease_hint(
        self, classifier: CommitClassifier, message: str, hint: PreReleaseTag
    ) -> None:
        assert classifier.classify(message).prerelease is hint

    def test_prerelease_hint_independent_of_group(self, classifier: CommitClassifier) -> None:
        """Test the marker is found even when a higher group selected the bump."""
        result = classifier.classify("BREAKING: storage, also FIX-BETA")

        assert result.bump is BumpCategory.MAJOR
        assert result.prerelease is PreReleaseTag.BETA

    def test_branch_name_is_extra_evidence(self, classifier: CommitClassifier) -> None:
        result = classifier.classify("Merge pull request #4", branch_name="feature/login")

        assert result.bump is BumpCategory.MINOR

    def test_custom_keyword_table(self) -> None:
        table = KeywordTable(major=("EPIC",), minor=("ENH",), patch=("TWEAK",))
        classifier = CommitClassifier(table)

        assert classifier.classify("EPIC: rewrite").bump is BumpCategory.MAJOR
        assert classifier.classify("ENH: faster").bump is BumpCategory.MINOR
        assert classifier.classify("BREAKING: ignored").explicit is False
        assert classifier.classify("ENH-BETA: flag").prerelease is PreReleaseTag.BETA

    def test_keyword_table_groups_in_precedence_order(self) -> None:
        categories = [category for category, _ in KeywordTable().groups()]

        assert categories == [BumpCategory.MAJOR, BumpCategory.MINOR, BumpCategory.PATCH]

    def test_word_keywords_exclude_punctuation(self) -> None:
        words = KeywordTable().word_keywords()

        assert "FEATURE" in words
        assert "feat:" not in words
        assert "!:" not in words
        assert "breaking change" not in words


@pytest.mark.unit
class TestHistoryAggregator:
    """Tests for history aggregation."""

    def test_empty_history_is_patch(self, aggregator: HistoryAggregator) -> None:
        summary = aggregator.aggregate([])

        assert summary.bump is BumpCategory.PATCH
        assert summary.prerelease is PreReleaseTag.NONE
        assert summary.explicit is False
        assert summary.message_count == 0

    def test_highest_bump_wins(self, aggregator: HistoryAggregator) -> None:
        summary = aggregator.aggregate(["fix: a", "feat: b", "docs"])

        assert summary.bump is BumpCategory.MINOR
        assert summary.explicit is True
        assert summary.message_count == 3

    @pytest.mark.parametrize(
        "messages",
        [
            ["BREAKING: x"],
            ["feat: a", "BREAKING: x", "fix: b"],
            ["fix: a", "fix: b", "feat: c", "feat!: d"],
            ["chore", "MAJOR cleanup", "chore", "feature: y"],
        ],
    )
    def test_major_precedence_law(
        self, aggregator: HistoryAggregator, messages: List[str]
    ) -> None:
        """Test any history containing a major keyword aggregates to major."""
        assert aggregator.aggregate(messages).bump is BumpCategory.MAJOR

    def test_default_patch_is_not_explicit(self, aggregator: HistoryAggregator) -> None:
        summary = aggregator.aggregate(["docs: readme", "chore: deps"])

        assert summary.bump is BumpCategory.PATCH
        assert summary.explicit is False

    def test_explicit_patch_after_default(self, aggregator: HistoryAggregator) -> None:
        summary = aggregator.aggregate(["docs: readme", "fix: crash"])

        assert summary.bump is BumpCategory.PATCH
        assert summary.explicit is True

    def test_beta_wins_over_alpha(self, aggregator: HistoryAggregator) -> None:
        summary = aggregator.aggregate(["FEATURE-ALPHA: a", "FIX-BETA: b", "FIX-ALPHA: c"])

        assert summary.prerelease is PreReleaseTag.BETA

    def test_alpha_hint_alone(self, aggregator: HistoryAggregator) -> None:
        summary = aggregator.aggregate(["fix: a", "FEATURE-ALPHA: b"])

        assert summary.prerelease is PreReleaseTag.ALPHA

    def test_default_classifier(self) -> None:
        assert HistoryAggregator().aggregate(["feat: x"]).bump is BumpCategory.MINOR
