"""Dependency scope classification."""
from enum import Enum, auto
from typing import Optional

from .source_unit import SourceUnit


class DependencyScope(Enum):
    """Visibility relationship of a usage to the target class.

    Declaration order is the severity order used for sorting.
    """

    PRIVATE = auto()
    PACKAGE_PRIVATE = auto()
    PROTECTED = auto()
    PUBLIC = auto()
    UNKNOWN = auto()


def _structured_unit(element) -> Optional[SourceUnit]:
    unit = getattr(element, 'unit', None)
    if unit is None or not unit.is_structured:
        return None
    return unit


def scope_of(from_, to) -> DependencyScope:
    """Classify the relationship between two elements by their containing files.

    Args:
        from_: Element (TargetClass, UsageSite, ...) whose `unit` is the origin file
        to: Element whose `unit` is the referencing file

    Returns:
        UNKNOWN if either side is not a Java file, PRIVATE for the same file,
        PACKAGE_PRIVATE for the same package, PUBLIC otherwise. PROTECTED is
        never returned.
    """
    current_file = _structured_unit(from_)
    other_file = _structured_unit(to)
    if current_file is None or other_file is None:
        return DependencyScope.UNKNOWN

    if current_file == other_file:
        return DependencyScope.PRIVATE

    if current_file.package_name == other_file.package_name:
        return DependencyScope.PACKAGE_PRIVATE

    return DependencyScope.PUBLIC
