"""Pre-release lifecycle for versionkeeper.

Versions move one way through the lifecycle::

    stable ──start──▶ alpha ──transition──▶ beta ──end──▶ stable
       │                 └──────────────end─────────────▲
       └──────────────start──────────▶ beta ─────────────┘

Given the tier of the latest release (``current``) and the tier of the
release branch (``target``), :meth:`PreReleaseLifecycle.next_state`
classifies the release:

- ``current == target`` → ``continue`` (the build number advances within a
  pre-release tier; a stable branch simply cuts the next stable release)
- stable → pre-release → ``start``
- pre-release → stable → ``end``
- alpha → beta → ``transition``
- beta → alpha → invalid: alpha ended when beta began

The lifecycle also owns the two numbers that depend on the action:
the base version (:meth:`PreReleaseLifecycle.base_version`) and the build
number (:meth:`PreReleaseLifecycle.build_number`).
"""

from __future__ import annotations

from typing import Iterable, Optional

from versionkeeper.core.stepper import VersionStepper
from versionkeeper.models.commit import HistorySummary
from versionkeeper.models.decision import LifecycleAction, LifecycleStep
from versionkeeper.models.version import BumpCategory, PreReleaseTag, SemanticVersion
from versionkeeper.utils.logger import get_logger
from versionkeeper.utils.version_utils import max_build_number

logger = get_logger("lifecycle")


class PreReleaseLifecycle:
    """State machine over ``stable → alpha → beta → stable``.

    Args:
        stepper: Version arithmetic. Defaults to :class:`VersionStepper`.
    """

    def __init__(self, stepper: Optional[VersionStepper] = None) -> None:
        self.stepper = stepper or VersionStepper()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def next_state(
        self,
        current: PreReleaseTag,
        target: PreReleaseTag,
        base_version: SemanticVersion,
    ) -> LifecycleStep:
        """Classify the move from ``current`` to ``target`` for ``base_version``."""
        if current is target:
            action = LifecycleAction.CONTINUE
        elif not current.is_prerelease:
            action = LifecycleAction.START
        elif not target.is_prerelease:
            action = LifecycleAction.END
        else:
            action = LifecycleAction.TRANSITION
            if target.maturity <= current.maturity:
                error = (
                    f"Cannot start {target.value} after {current.value} for version "
                    f"{base_version} - {target.value} ended when {current.value} began"
                )
                instructions = (
                    f"Version {base_version} is already in {current.value}. Valid options:\n"
                    f"  1. Continue the {current.value} series from a "
                    f"{current.value} release branch\n"
                    f"  2. Finalize {base_version} as a stable release from the "
                    f"release branch\n"
                    f"  3. Finalize {base_version}, then start a new {target.value} "
                    f"series for the next version"
                )
                logger.debug("Rejected lifecycle transition: %s", error)
                return LifecycleStep(
                    valid=False,
                    action=action,
                    current=current,
                    target=target,
                    error=error,
                    instructions=instructions,
                )

        logger.debug("Lifecycle %s -> %s: %s", current, target, action)
        return LifecycleStep(valid=True, action=action, current=current, target=target)

    # ------------------------------------------------------------------
    # Numbers
    # ------------------------------------------------------------------

    def base_version(
        self,
        action: LifecycleAction,
        last_base: SemanticVersion,
        summary: HistorySummary,
        target: PreReleaseTag,
    ) -> SemanticVersion:
        """Compute the base version of the next release.

        Args:
            action: Lifecycle action of the release.
            last_base: Base version of the latest release.
            summary: Aggregated commit evidence.
            target: Tier of the release branch.

        Returns:
            - ``continue`` on a stable branch: ``last_base`` bumped.
            - ``continue`` within a pre-release tier: ``last_base`` held.
            - ``start``: ``last_base`` bumped.
            - ``transition``: ``last_base`` held.
            - ``end``: ``last_base`` unless an explicit minor or major
              keyword was found, in which case it is applied first. An
              explicit patch keyword does not re-step: finalizing the
              pre-release already publishes a new patch-or-higher version.
        """
        if action is LifecycleAction.START:
            return self.stepper.step(last_base, summary.bump)

        if action is LifecycleAction.CONTINUE:
            if target.is_prerelease:
                return last_base
            return self.stepper.step(last_base, summary.bump)

        if action is LifecycleAction.END:
            if summary.explicit and summary.bump > BumpCategory.PATCH:
                return self.stepper.step(last_base, summary.bump)
            return last_base

        return last_base

    def build_number(
        self,
        action: LifecycleAction,
        base: SemanticVersion,
        tier: PreReleaseTag,
        existing_tags: Iterable[str],
    ) -> Optional[int]:
        """Compute the build number of the next release.

        One more than the highest existing ``{base}-{tier}.N`` tag, or ``1``
        when none exists. ``start`` and ``transition`` therefore reset to
        ``1`` unless an earlier run already tagged that series. Stable
        releases have no build number.
        """
        if action is LifecycleAction.END or not tier.is_prerelease:
            return None
        highest = max_build_number(existing_tags, base, tier)
        if highest and action is not LifecycleAction.CONTINUE:
            logger.info(
                "Resuming %s-%s series at build %d from existing tags",
                base,
                tier.value,
                highest + 1,
            )
        return highest + 1
