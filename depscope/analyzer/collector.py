"""Reference collection: raw index hits -> one usage site per referencing file."""
from typing import List, Optional, Set

from .cancellation import CancellationToken
from .declaration import TargetClass
from .errors import StaleReferenceError
from .reference_index import FileScope, ReferenceIndex, UsageSite


class ReferenceCollector:
    """Collects the usage sites of a target class.

    Queries the project scope first and falls back to the target's own file
    when there is no project scope or the project query finds nothing.
    """

    def __init__(self, index: ReferenceIndex, project_scope=None):
        """Initialize collector.

        Args:
            index: Reference index to query
            project_scope: Scope searched first (a ProjectScope), or None
        """
        self.index = index
        self.project_scope = project_scope

    def collect(self, target: TargetClass, token: Optional[CancellationToken] = None) -> List[UsageSite]:
        """Collect deduplicated, non-import usage sites of `target`.

        Args:
            target: Class resolved by the declaration detector
            token: Cancellation token polled before, during and after the query

        Returns:
            At most one UsageSite per referencing file, in index order

        Raises:
            StaleReferenceError: If the target's file changed before or during the query
            QueryCancelledError: If the token was cancelled
        """
        token = token or CancellationToken()
        self._ensure_valid(target)
        token.check()

        sites: List[UsageSite] = []
        if self.project_scope is not None:
            sites = self._query(target, self.project_scope, token)
        if not sites:
            sites = self._query(target, FileScope(target.unit), token)

        token.check()
        self._ensure_valid(target)
        return sites

    def _query(self, target: TargetClass, scope, token: CancellationToken) -> List[UsageSite]:
        """Run one index query, dropping import references and repeated files."""
        seen: Set[str] = set()
        sites: List[UsageSite] = []
        for site in self.index.search(target, scope, token):
            # Filtered before dedup: a file keeps its first non-import reference
            if site.context.is_import:
                continue
            if site.unit.key in seen:
                continue
            seen.add(site.unit.key)
            sites.append(site)
        return sites

    def _ensure_valid(self, target: TargetClass):
        if not target.is_valid():
            raise StaleReferenceError(target)
