"""Release branch policy for versionkeeper.

A fixed table maps branch names to the pre-release tier they publish:

=============  ==========
branch         tier
=============  ==========
release        stable
main, master   beta
staging        beta
dev            alpha
development    alpha
=============  ==========

Any branch absent from the table cannot release. The table is injected
at construction so alternative policies never touch global state.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from versionkeeper.constants import (
    BRANCH_REF_PREFIX,
    DEFAULT_CASE_SENSITIVE_BRANCHES,
    DEFAULT_RELEASE_BRANCHES,
)
from versionkeeper.exceptions import NotReleaseBranchError
from versionkeeper.models.version import PreReleaseTag
from versionkeeper.utils.logger import get_logger

logger = get_logger("branch_policy")


class ReleaseBranchPolicy:
    """Decide which branches may release, and at which tier.

    Args:
        branches: Mapping of branch name to tier. Values may be
            :class:`PreReleaseTag` members or tier names (``"stable"``,
            ``"alpha"``, ``"beta"``). Defaults to the built-in table.
        case_sensitive: Match branch names exactly instead of
            case-insensitively.

    Raises:
        ValueError: If a tier name is unknown.
    """

    def __init__(
        self,
        branches: Optional[Mapping[str, object]] = None,
        *,
        case_sensitive: bool = DEFAULT_CASE_SENSITIVE_BRANCHES,
    ) -> None:
        source = DEFAULT_RELEASE_BRANCHES if branches is None else branches
        self.case_sensitive = case_sensitive

        table: Dict[str, PreReleaseTag] = {}
        for name, tier in source.items():
            tag = tier if isinstance(tier, PreReleaseTag) else PreReleaseTag.from_string(str(tier))
            table[self._key(name)] = tag
        self._table: Mapping[str, PreReleaseTag] = MappingProxyType(table)

    def _key(self, name: str) -> str:
        name = name.strip()
        if name.startswith(BRANCH_REF_PREFIX):
            name = name[len(BRANCH_REF_PREFIX):]
        return name if self.case_sensitive else name.lower()

    @property
    def branches(self) -> Mapping[str, PreReleaseTag]:
        """Read-only view of the normalized branch table."""
        return self._table

    def is_release_branch(self, name: Optional[str]) -> bool:
        """Return True if ``name`` may cut a release."""
        if not name:
            return False
        return self._key(name) in self._table

    def pre_release_tier_for(self, name: str) -> PreReleaseTag:
        """Return the tier published by ``name``.

        Raises:
            NotReleaseBranchError: If ``name`` is not a release branch.
        """
        if not self.is_release_branch(name):
            raise NotReleaseBranchError(name or "<none>", allowed=list(self._table))
        tier = self._table[self._key(name)]
        logger.debug("Branch %s releases at tier %s", name, tier)
        return tier
