"""
versionkeeper: next semantic version decisions for CI pipelines

versionkeeper reads a repository's branch, release tags and merge-commit
subjects together with the version declared in the project manifest, and
decides the next ``major.minor.patch[-alpha.N|-beta.N]`` version.

It only decides: it never tags, commits, or publishes. When a human has
to choose (an unusual first release, a manifest/tag mismatch, a backwards
pre-release step) the decision says so and explains the options.

Typical usage::

    from versionkeeper import VersionDecisionEngine, GitRepository

    decision = VersionDecisionEngine().run(
        GitRepository("."),
        declared_version="1.4.0",
        branch_name="main",
    )
    decision.new_version   # "1.4.1-beta.1" when v1.4.0 is the latest tag
"""

from __future__ import annotations

from versionkeeper.__version__ import __version__
from versionkeeper.core import GitRepository, VersionDecisionEngine
from versionkeeper.models import VersionDecision

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "versionkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Decide the next semantic version from git history and a manifest."

__all__ = [
    "__version__",
    "GitRepository",
    "VersionDecision",
    "VersionDecisionEngine",
]
