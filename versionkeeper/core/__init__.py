"""
Core functionality exports for versionkeeper.

This module provides convenient access to the decision components and
the repository collaborators. Importing from here keeps user-facing
imports clean and stable:

    from versionkeeper.core import VersionDecisionEngine, GitRepository
"""

from __future__ import annotations

from versionkeeper.core.branch_policy import ReleaseBranchPolicy
from versionkeeper.core.classifier import CommitClassifier, HistoryAggregator, KeywordTable
from versionkeeper.core.consistency import ConsistencyChecker
from versionkeeper.core.engine import (
    DecisionInputs,
    RepositorySnapshot,
    VersionDecisionEngine,
    VersionSource,
)
from versionkeeper.core.first_release import FirstReleaseResolver
from versionkeeper.core.git import GitRepository
from versionkeeper.core.lifecycle import PreReleaseLifecycle
from versionkeeper.core.manifest import read_declared_version, write_declared_version
from versionkeeper.core.stepper import VersionStepper

__all__ = [
    "CommitClassifier",
    "HistoryAggregator",
    "KeywordTable",
    "ReleaseBranchPolicy",
    "PreReleaseLifecycle",
    "FirstReleaseResolver",
    "ConsistencyChecker",
    "VersionStepper",
    "VersionDecisionEngine",
    "DecisionInputs",
    "RepositorySnapshot",
    "VersionSource",
    "GitRepository",
    "read_declared_version",
    "write_declared_version",
]
