from __future__ import annotations

import pytest

from versionkeeper.core.lifecycle import PreReleaseLifecycle
from versionkeeper.models.commit import HistorySummary
from versionkeeper.models.decision import LifecycleAction
from versionkeeper.models.version import BumpCategory, PreReleaseTag, SemanticVersion

NONE = PreReleaseTag.NONE
ALPHA = PreReleaseTag.ALPHA
BETA = PreReleaseTag.BETA

BASE = SemanticVersion(1, 2, 0)


@pytest.fixture
def lifecycle() -> PreReleaseLifecycle:
    return PreReleaseLifecycle()


def _summary(bump: BumpCategory, explicit: bool = True) -> HistorySummary:
    return HistorySummary(bump, PreReleaseTag.NONE, explicit, 1)


@pytest.mark.unit
class TestNextState:
    """Tests for lifecycle transition classification."""

    @pytest.mark.parametrize(
        "current,target,action",
        [
            (NONE, NONE, LifecycleAction.CONTINUE),
            (ALPHA, ALPHA, LifecycleAction.CONTINUE),
            (BETA, BETA, LifecycleAction.CONTINUE),
            (NONE, ALPHA, LifecycleAction.START),
            (NONE, BETA, LifecycleAction.START),
            (ALPHA, NONE, LifecycleAction.END),
            (BETA, NONE, LifecycleAction.END),
            (ALPHA, BETA, LifecycleAction.TRANSITION),
        ],
    )
    def test_valid_transitions(
        self,
        lifecycle: PreReleaseLifecycle,
        current: PreReleaseTag,
        target: PreReleaseTag,
        action: LifecycleAction,
    ) -> None:
        step = lifecycle.next_state(current, target, BASE)

        assert step.valid is True
        assert step.action is action
        assert step.current is current
        assert step.target is target
        assert step.error is None

    @pytest.mark.parametrize(
        "base",
        [SemanticVersion(0, 0, 1), SemanticVersion(1, 2, 0), SemanticVersion(9, 9, 9)],
    )
    def test_beta_to_alpha_is_always_invalid(
        self, lifecycle: PreReleaseLifecycle, base: SemanticVersion
    ) -> None:
        step = lifecycle.next_state(BETA, ALPHA, base)

        assert step.valid is False
        assert step.action is LifecycleAction.TRANSITION

    def test_beta_to_alpha_error_names_transition(self, lifecycle: PreReleaseLifecycle) -> None:
        step = lifecycle.next_state(BETA, ALPHA, SemanticVersion(1, 1, 0))

        assert step.error == (
            "Cannot start alpha after beta for version 1.1.0 - alpha ended when beta began"
        )
        assert step.instructions is not None
        assert "1. Continue the beta series" in step.instructions
        assert "2. Finalize 1.1.0" in step.instructions
        assert "3. Finalize 1.1.0, then start a new alpha series" in step.instructions


@pytest.mark.unit
class TestBaseVersion:
    """Tests for base version computation per lifecycle action."""

    def test_start_applies_bump(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.START, SemanticVersion(1, 0, 0), _summary(BumpCategory.MINOR), ALPHA
        )

        assert base == SemanticVersion(1, 1, 0)

    def test_continue_stable_applies_bump(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.CONTINUE,
            SemanticVersion(1, 0, 0),
            _summary(BumpCategory.PATCH, explicit=False),
            NONE,
        )

        assert base == SemanticVersion(1, 0, 1)

    def test_continue_prerelease_holds_base(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.CONTINUE, SemanticVersion(1, 1, 0), _summary(BumpCategory.MAJOR), ALPHA
        )

        assert base == SemanticVersion(1, 1, 0)

    def test_transition_holds_base(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.TRANSITION, SemanticVersion(1, 1, 0), _summary(BumpCategory.MINOR), BETA
        )

        assert base == SemanticVersion(1, 1, 0)

    def test_end_without_explicit_keyword_keeps_base(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.END,
            SemanticVersion(1, 1, 0),
            _summary(BumpCategory.PATCH, explicit=False),
            NONE,
        )

        assert base == SemanticVersion(1, 1, 0)

    def test_end_with_explicit_patch_keeps_base(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.END, SemanticVersion(1, 1, 0), _summary(BumpCategory.PATCH), NONE
        )

        assert base == SemanticVersion(1, 1, 0)

    def test_end_with_explicit_minor_applies_bump(self, lifecycle: PreReleaseLifecycle) -> None:
        base = lifecycle.base_version(
            LifecycleAction.END, SemanticVersion(1, 1, 0), _summary(BumpCategory.MINOR), NONE
        )

        assert base == SemanticVersion(1, 2, 0)


@pytest.mark.unit
class TestBuildNumber:
    """Tests for build number derivation from existing tags."""

    def test_continue_increments_highest(self, lifecycle: PreReleaseLifecycle) -> None:
        """Test alpha.1 and alpha.2 existing yields build 3."""
        tags = ["v1.2.0-alpha.1", "v1.2.0-alpha.2"]

        build = lifecycle.build_number(LifecycleAction.CONTINUE, BASE, ALPHA, tags)

        assert build == 3

    def test_continue_ignores_other_series(self, lifecycle: PreReleaseLifecycle) -> None:
        tags = ["v1.2.0-alpha.7", "v1.2.0-beta.1", "v1.1.0-beta.5", "v1.2.0"]

        build = lifecycle.build_number(LifecycleAction.CONTINUE, BASE, BETA, tags)

        assert build == 2

    def test_continue_uses_numeric_max(self, lifecycle: PreReleaseLifecycle) -> None:
        tags = ["v1.2.0-alpha.9", "v1.2.0-alpha.10", "v1.2.0-alpha.2"]

        assert lifecycle.build_number(LifecycleAction.CONTINUE, BASE, ALPHA, tags) == 11

    def test_start_resets_to_one(self, lifecycle: PreReleaseLifecycle) -> None:
        tags = ["v1.1.0", "v1.1.0-alpha.3"]

        assert lifecycle.build_number(LifecycleAction.START, BASE, ALPHA, tags) == 1

    def test_transition_resumes_existing_series(self, lifecycle: PreReleaseLifecycle) -> None:
        tags = ["v1.2.0-alpha.2", "v1.2.0-beta.1"]

        assert lifecycle.build_number(LifecycleAction.TRANSITION, BASE, BETA, tags) == 2

    def test_end_has_no_build(self, lifecycle: PreReleaseLifecycle) -> None:
        assert lifecycle.build_number(LifecycleAction.END, BASE, NONE, ["v1.2.0-beta.3"]) is None

    def test_stable_continue_has_no_build(self, lifecycle: PreReleaseLifecycle) -> None:
        assert lifecycle.build_number(LifecycleAction.CONTINUE, BASE, NONE, []) is None
