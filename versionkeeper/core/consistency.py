"""Manifest/tag consistency checking for versionkeeper.

Before computing a bump, the version declared in the manifest is compared
with the base version of the latest release tag:

- **equal**: nothing to do (an idempotent re-run)
- **expected bump**: the manifest is exactly one patch, minor or major
  step ahead of the tag, as left behind by a run that updated the
  manifest but failed before tagging; accepted
- **forward jump**: any larger step; blocks unless overridden
- **backward**: the manifest regressed below the tag; blocks unless
  overridden
"""

from __future__ import annotations

from versionkeeper.core.stepper import VersionStepper
from versionkeeper.models.decision import ConsistencyRelation, ConsistencyResult
from versionkeeper.models.version import BumpCategory, SemanticVersion
from versionkeeper.utils.logger import get_logger

logger = get_logger("consistency")


class ConsistencyChecker:
    """Compare the declared manifest version with the latest tag."""

    def relation(
        self,
        declared: SemanticVersion,
        tag: SemanticVersion,
    ) -> ConsistencyRelation:
        """Classify how ``declared`` relates to ``tag``."""
        if declared == tag:
            return ConsistencyRelation.EQUAL
        if declared < tag:
            return ConsistencyRelation.BACKWARD
        expected = {
            VersionStepper.step(tag, category)
            for category in (BumpCategory.PATCH, BumpCategory.MINOR, BumpCategory.MAJOR)
        }
        if declared in expected:
            return ConsistencyRelation.EXPECTED_BUMP
        return ConsistencyRelation.FORWARD_JUMP

    def check(
        self,
        declared: SemanticVersion,
        tag: SemanticVersion,
        force_override: bool = False,
        *,
        tag_name: str = "",
    ) -> ConsistencyResult:
        """Check ``declared`` against ``tag``.

        Args:
            declared: Version declared in the manifest.
            tag: Base version of the latest release tag.
            force_override: Accept backward and forward-jump mismatches.
            tag_name: Tag as written in the repository, for messages.

        Returns:
            A :class:`ConsistencyResult`; ``requires_action`` is set when
            the release must stop.
        """
        relation = self.relation(declared, tag)
        tag_label = tag_name or str(tag)
        logger.debug("Manifest %s vs tag %s: %s", declared, tag_label, relation.value)

        if relation in (ConsistencyRelation.EQUAL, ConsistencyRelation.EXPECTED_BUMP):
            return ConsistencyResult(relation=relation)

        if relation is ConsistencyRelation.BACKWARD:
            error = (
                f"Manifest version {declared} is lower than the latest release tag "
                f"{tag_label}"
            )
            instructions = (
                f"The manifest declares {declared} but {tag_label} is already released.\n"
                "Choose one of the following:\n"
                f"  1. Raise the manifest version to {tag} (or later) and run again.\n"
                f"  2. If {tag_label} was created by mistake, delete or correct the tag.\n"
                "  3. Re-run with --force-mismatch to compute from the tag anyway."
            )
        else:
            error = (
                f"Manifest version {declared} jumps ahead of the latest release tag "
                f"{tag_label} by more than one patch, minor or major step"
            )
            instructions = (
                f"The manifest declares {declared} but the latest tag is {tag_label}.\n"
                "Choose one of the following:\n"
                f"  1. Set the manifest version back to {tag} and let versionkeeper bump it.\n"
                "  2. If the jump is intentional, re-run with --force-mismatch.\n"
                "  3. If tags are missing locally, fetch them (git fetch --tags)."
            )

        if force_override:
            warning = f"{error}; continuing because the mismatch was overridden"
            logger.warning(warning)
            return ConsistencyResult(relation=relation, warning=warning)

        return ConsistencyResult(
            relation=relation,
            requires_action=True,
            error=error,
            instructions=instructions,
        )
