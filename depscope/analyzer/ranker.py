"""Scope classification, filtering, ordering and grouping of usage sites."""
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Set

from .declaration import TargetClass
from .elements import NavigableLocation
from .errors import UnclassifiableUsageError
from .reference_index import UsageSite
from .scope import DependencyScope, scope_of


# Scopes that say nothing about who depends on the class
HIDDEN_SCOPES = frozenset({DependencyScope.UNKNOWN, DependencyScope.PRIVATE})


@dataclass(frozen=True)
class Item:
    """One row of the usage survey."""
    scope: DependencyScope
    location: NavigableLocation
    package_name: str
    separator: Optional[str] = None  # set on the first item of each package group


def package_name_of(site: UsageSite) -> str:
    """Package of the file containing a usage site.

    Raises:
        UnclassifiableUsageError: If the containing unit has no package name
    """
    package_name = site.unit.package_name if site.unit is not None else None
    if package_name is None:
        raise UnclassifiableUsageError(f"No package for usage in {site.location.file_name}")
    return package_name


def annotate_separators(items: Iterable[Item]) -> List[Item]:
    """Label the first item of every package with that package name.

    Args:
        items: Items already in final order

    Returns:
        Same items, in the same order, with `separator` set on group starts
    """
    announced: Set[str] = set()
    annotated: List[Item] = []
    for item in items:
        if item.package_name in announced:
            annotated.append(replace(item, separator=None))
        else:
            announced.add(item.package_name)
            annotated.append(replace(item, separator=item.package_name))
    return annotated


def classify_and_rank(target: TargetClass, sites: Iterable[UsageSite]) -> List[Item]:
    """Turn collected usage sites into the ordered, grouped survey.

    Sites without a package are dropped, as are PRIVATE (same file) and
    UNKNOWN items. Items are sorted by scope, then stably by package name,
    so the result is grouped by package with scope order inside each group.

    Args:
        target: Class the sites refer to
        sites: Output of ReferenceCollector.collect()

    Returns:
        Ordered items with separators on the first item of each package
    """
    items: List[Item] = []
    for site in sites:
        try:
            package_name = package_name_of(site)
        except UnclassifiableUsageError:
            continue

        scope = scope_of(target, site)
        if scope in HIDDEN_SCOPES:
            continue
        items.append(Item(scope=scope, location=site.location, package_name=package_name))

    items.sort(key=lambda item: item.scope.value)
    items.sort(key=lambda item: item.package_name)
    return annotate_separators(items)
