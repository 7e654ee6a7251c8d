"""
Unified data model exports for versionkeeper.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``versionkeeper.models`` instead of individual submodules.

Example:
    >>> from versionkeeper.models import SemanticVersion, VersionDecision
"""

from __future__ import annotations

from versionkeeper.models.version import (
    BumpCategory,
    PreReleaseTag,
    ReleaseVersion,
    SemanticVersion,
)
from versionkeeper.models.commit import Classification, HistorySummary
from versionkeeper.models.decision import (
    ConsistencyRelation,
    ConsistencyResult,
    LifecycleAction,
    LifecycleStep,
    VersionDecision,
)

__all__ = [
    "BumpCategory",
    "PreReleaseTag",
    "ReleaseVersion",
    "SemanticVersion",
    "Classification",
    "HistorySummary",
    "ConsistencyRelation",
    "ConsistencyResult",
    "LifecycleAction",
    "LifecycleStep",
    "VersionDecision",
]
