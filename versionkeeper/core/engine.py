"""Version decision engine for versionkeeper.

The engine wires the decision components into one entry point:

1. **ReleaseBranchPolicy**: gates the release branch and gives its tier.
2. **FirstReleaseResolver**: handles repositories without release tags.
3. **ConsistencyChecker**: compares the manifest with the latest tag.
4. **HistoryAggregator**: reduces commit subjects to bump evidence.
5. **PreReleaseLifecycle**: validates the tier transition and computes
   the base version and build number.
6. **VersionStepper**: renders the final version.

The engine always returns a :class:`VersionDecision`. Every
:class:`~versionkeeper.exceptions.VersionKeeperError` raised on the way is
converted into a failed decision, so a CI step can rely on the record and
its exit code alone.

Repository facts are read once per decision through
:class:`RepositorySnapshot`, so a decision never mixes two different views
of the history.

Typical usage::

    repo = GitRepository(".")
    engine = VersionDecisionEngine.from_config(load_config())
    decision = engine.run(
        repo,
        declared_version=read_declared_version("pyproject.toml"),
        branch_name="dev",
    )
    print(decision.new_version)  # "1.3.0-alpha.2"
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, List, Optional, Protocol, Sequence, Tuple

from versionkeeper.constants import DEFAULT_TAG_PREFIX
from versionkeeper.core.branch_policy import ReleaseBranchPolicy
from versionkeeper.core.classifier import CommitClassifier, HistoryAggregator, KeywordTable
from versionkeeper.core.consistency import ConsistencyChecker
from versionkeeper.core.first_release import FirstReleaseResolver
from versionkeeper.core.lifecycle import PreReleaseLifecycle
from versionkeeper.core.stepper import VersionStepper
from versionkeeper.exceptions import (
    CollaboratorUnavailableError,
    InvalidLifecycleTransitionError,
    UnusualFirstReleaseVersionError,
    VersionKeeperError,
    VersionTagMismatchError,
)
from versionkeeper.models.decision import VersionDecision
from versionkeeper.models.version import (
    BumpCategory,
    PreReleaseTag,
    ReleaseVersion,
)
from versionkeeper.utils.logger import get_logger
from versionkeeper.utils.version_utils import latest_release_tag

if TYPE_CHECKING:
    from versionkeeper.config import VersionKeeperConfig

logger = get_logger("engine")


class VersionSource(Protocol):
    """Read-only repository facts consumed by the engine."""

    def list_tags(self) -> List[str]: ...

    def commits_since(self, ref: Optional[str], target: str = "HEAD") -> List[str]: ...

    def default_branch(self) -> str: ...


@dataclass(frozen=True)
class RepositorySnapshot:
    """Repository facts captured once for a single decision.

    Attributes:
        tags: Every tag in the repository.
        latest_tag: Highest release tag, or ``None`` for a first release.
        commits: Merge-commit subjects since ``latest_tag`` (all commit
            subjects when ``latest_tag`` is ``None``).
        warnings: Notes about degraded data feeds.
    """

    tags: Tuple[str, ...] = ()
    latest_tag: Optional[str] = None
    commits: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def capture(cls, source: VersionSource, target_branch: str) -> "RepositorySnapshot":
        """Query ``source`` once per feed.

        Tag listing failures propagate: tags are authoritative. Commit
        listing failures degrade to an empty history, which classifies as
        a patch.

        Raises:
            CollaboratorUnavailableError: If tags cannot be listed.
        """
        tags = tuple(source.list_tags())
        latest = latest_release_tag(tags)
        warnings: List[str] = []

        try:
            commits = tuple(source.commits_since(latest, target_branch))
        except CollaboratorUnavailableError as exc:
            logger.warning("Commit history unavailable, defaulting to patch: %s", exc)
            commits = ()
            warnings.append("Commit history unavailable; defaulted to a patch bump")

        logger.debug(
            "Snapshot: %d tag(s), latest=%s, %d commit(s)",
            len(tags),
            latest,
            len(commits),
        )
        return cls(tags=tags, latest_tag=latest, commits=commits, warnings=tuple(warnings))


@dataclass(frozen=True)
class DecisionInputs:
    """Everything a decision depends on.

    Attributes:
        declared_version: Version declared in the manifest.
        branch_name: Branch under evaluation.
        target_branch: Release branch; defaults to ``branch_name``.
        tags: Every tag in the repository.
        commits: Commit subjects since the latest release tag.
        force_first_release: Accept an unusual first-release version.
        force_mismatch: Accept a manifest/tag mismatch.
        warnings: Notes carried over from data collection.
    """

    declared_version: str
    branch_name: Optional[str] = None
    target_branch: Optional[str] = None
    tags: Sequence[str] = ()
    commits: Sequence[str] = ()
    force_first_release: bool = False
    force_mismatch: bool = False
    warnings: Sequence[str] = field(default_factory=tuple)

    @property
    def release_branch(self) -> Optional[str]:
        return self.target_branch or self.branch_name


class VersionDecisionEngine:
    """Compute the next version from repository facts.

    Args:
        policy: Release branch policy.
        aggregator: Commit history aggregator.
        lifecycle: Pre-release lifecycle.
        first_release: First release resolver.
        consistency: Manifest/tag consistency checker.
        tag_prefix: Prefix of the tag reported for a new version.
    """

    def __init__(
        self,
        policy: Optional[ReleaseBranchPolicy] = None,
        aggregator: Optional[HistoryAggregator] = None,
        lifecycle: Optional[PreReleaseLifecycle] = None,
        first_release: Optional[FirstReleaseResolver] = None,
        consistency: Optional[ConsistencyChecker] = None,
        *,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
    ) -> None:
        self.policy = policy or ReleaseBranchPolicy()
        self.aggregator = aggregator or HistoryAggregator()
        self.lifecycle = lifecycle or PreReleaseLifecycle(VersionStepper())
        self.first_release = first_release or FirstReleaseResolver(
            self.aggregator, self.lifecycle
        )
        self.consistency = consistency or ConsistencyChecker()
        self.tag_prefix = tag_prefix

    @classmethod
    def from_config(cls, config: VersionKeeperConfig) -> "VersionDecisionEngine":
        """Build an engine from a :class:`~versionkeeper.config.VersionKeeperConfig`."""
        policy = ReleaseBranchPolicy(
            config.release_branches,
            case_sensitive=config.case_sensitive_branches,
        )
        aggregator = HistoryAggregator(
            CommitClassifier(
                KeywordTable(
                    major=tuple(config.major_keywords),
                    minor=tuple(config.minor_keywords),
                    patch=tuple(config.patch_keywords),
                )
            )
        )
        lifecycle = PreReleaseLifecycle()
        first_release = FirstReleaseResolver(
            aggregator, lifecycle, policy=config.first_release_policy
        )
        return cls(
            policy,
            aggregator,
            lifecycle,
            first_release,
            tag_prefix=config.tag_prefix,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        source: VersionSource,
        declared_version: str,
        *,
        branch_name: Optional[str] = None,
        target_branch: Optional[str] = None,
        force_first_release: bool = False,
        force_mismatch: bool = False,
    ) -> VersionDecision:
        """Collect repository facts from ``source`` and decide.

        The release branch is gated before any tag or commit is read.
        """
        inputs = DecisionInputs(
            declared_version=declared_version,
            branch_name=branch_name,
            target_branch=target_branch,
            force_first_release=force_first_release,
            force_mismatch=force_mismatch,
        )
        try:
            if inputs.release_branch is None:
                default = source.default_branch()
                logger.info("No branch given, using default branch %s", default)
                inputs = replace(inputs, branch_name=default)

            self.policy.pre_release_tier_for(inputs.release_branch)
            snapshot = RepositorySnapshot.capture(source, inputs.release_branch)
        except VersionKeeperError as exc:
            return self._failure(inputs, exc)

        inputs = replace(
            inputs,
            tags=snapshot.tags,
            commits=snapshot.commits,
            warnings=snapshot.warnings,
        )
        return self.decide(inputs)

    def decide(self, inputs: DecisionInputs) -> VersionDecision:
        """Decide the next version from already-collected facts.

        Pure: identical inputs always produce an identical decision.
        """
        try:
            decision = self._decide(inputs)
        except VersionKeeperError as exc:
            return self._failure(inputs, exc)
        if decision.success and decision.new_version:
            decision.new_tag = f"{self.tag_prefix}{decision.new_version}"
        return decision

    # ------------------------------------------------------------------
    # Decision steps
    # ------------------------------------------------------------------

    def _decide(self, inputs: DecisionInputs) -> VersionDecision:
        tier = self.policy.pre_release_tier_for(inputs.release_branch or "")
        latest = latest_release_tag(inputs.tags)

        if latest is None:
            logger.info("No release tags found: first release")
            decision = self.first_release.resolve(
                inputs.declared_version,
                inputs.commits,
                inputs.force_first_release,
                tier=tier,
                existing_tags=inputs.tags,
            )
            decision.branch_name = inputs.branch_name
            decision.target_branch = inputs.release_branch
            decision.warnings = list(inputs.warnings) + decision.warnings
            self._note_hint(decision, tier, inputs.release_branch)
            return decision

        declared_release = ReleaseVersion.parse(inputs.declared_version)
        declared = declared_release.base
        last = ReleaseVersion.parse(latest)
        warnings = list(inputs.warnings)

        check = self.consistency.check(
            declared, last.base, inputs.force_mismatch, tag_name=latest
        )
        if check.requires_action:
            mismatch = VersionTagMismatchError(
                check.error or "Manifest version does not match the latest tag",
                declared_version=str(declared),
                tag_version=str(last.base),
                instructions=check.instructions,
            )
            return self._blocked(inputs, mismatch, last_tag=latest)
        if check.warning:
            warnings.append(check.warning)

        summary = self.aggregator.aggregate(inputs.commits)

        step = self.lifecycle.next_state(last.tag, tier, last.base)
        if not step.valid:
            backwards = InvalidLifecycleTransitionError(
                step.error or "Invalid pre-release transition",
                current=last.tag.value,
                target=tier.value,
                base_version=str(last.base),
                instructions=step.instructions,
            )
            return self._blocked(inputs, backwards, last_tag=latest, bump=summary.bump)

        base = self.lifecycle.base_version(step.action, last.base, summary, tier)
        build = self.lifecycle.build_number(step.action, base, tier, inputs.tags)
        new_version = self.lifecycle.stepper.with_suffix(base, tier, build)

        logger.info(
            "%s -> %s (%s, %s bump, %s)",
            latest,
            new_version,
            step.action,
            summary.bump,
            inputs.release_branch,
        )

        decision = VersionDecision(
            success=True,
            bump_category=summary.bump,
            current_version=str(declared_release),
            new_version=str(new_version),
            pre_release_tag=tier,
            build_number=build,
            is_first_release=False,
            last_tag=latest,
            branch_name=inputs.branch_name,
            target_branch=inputs.release_branch,
            warnings=warnings,
            commit_prerelease_hint=summary.prerelease,
        )
        self._note_hint(decision, tier, inputs.release_branch)
        return decision

    @staticmethod
    def _note_hint(
        decision: VersionDecision,
        tier: PreReleaseTag,
        branch: Optional[str],
    ) -> None:
        """Warn when commit markers ask for a tier the branch does not publish."""
        hint = decision.commit_prerelease_hint
        if hint.is_prerelease and hint is not tier:
            decision.warnings.append(
                f"Commits request a {hint.value} pre-release but branch '{branch}' "
                f"publishes {tier.value} releases; the branch tier was used"
            )

    # ------------------------------------------------------------------
    # Failure records
    # ------------------------------------------------------------------

    def _blocked(
        self,
        inputs: DecisionInputs,
        exc: VersionKeeperError,
        **extra: Any,
    ) -> VersionDecision:
        """Record a stop that a person has to resolve, keeping release context."""
        logger.warning("%s: %s", exc.kind, exc)
        return self._record(
            inputs,
            error_kind=exc.kind,
            error_message=exc.message,
            action_required=True,
            action_instructions=exc.instructions,
            **extra,
        )

    def _failure(self, inputs: DecisionInputs, exc: VersionKeeperError) -> VersionDecision:
        logger.warning("%s: %s", exc.kind, exc)
        return self._record(
            inputs,
            error_kind=exc.kind,
            error_message=str(exc),
            action_required=exc.action_required,
            action_instructions=exc.instructions,
            is_first_release=isinstance(exc, UnusualFirstReleaseVersionError),
        )

    @staticmethod
    def _record(
        inputs: DecisionInputs,
        *,
        bump: Optional[BumpCategory] = None,
        **fields: Any,
    ) -> VersionDecision:
        record = VersionDecision(
            success=False,
            current_version=inputs.declared_version or None,
            branch_name=inputs.branch_name,
            target_branch=inputs.release_branch,
            warnings=list(inputs.warnings),
            **fields,
        )
        if bump is not None:
            record.bump_category = bump
        return record
