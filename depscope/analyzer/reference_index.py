"""Reference index: finds every source location that refers to a target class.

The index scans a search scope unit by unit and reports identifiers that
resolve to the target. Resolution follows Java's name lookup closely enough
for a usage survey: qualified names must spell out the target, simple names
must be visible through the unit's package, imports or own declarations.
"""
import os
import re
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set, Tuple
from tree_sitter import Node

from .cancellation import CancellationToken
from .declaration import TargetClass
from .elements import NavigableLocation
from .source_unit import (
    IDENTIFIER_TYPES,
    TYPE_DECLARATIONS,
    SourceUnit,
    SourceUnitLoader,
    declaration_of,
    find_ancestor,
    same_node,
)


class UsageContext(Enum):
    """Syntactic context a reference was found in."""

    IMPORT_LIST = auto()
    IMPORT_STATEMENT = auto()
    IMPORT_STATIC_STATEMENT = auto()
    IMPORT_STATIC_REFERENCE = auto()
    TYPE_REFERENCE = auto()
    EXPRESSION = auto()
    TEXT = auto()

    @property
    def is_import(self) -> bool:
        return self in IMPORT_CONTEXTS


IMPORT_CONTEXTS = frozenset({
    UsageContext.IMPORT_LIST,
    UsageContext.IMPORT_STATEMENT,
    UsageContext.IMPORT_STATIC_STATEMENT,
    UsageContext.IMPORT_STATIC_REFERENCE,
})


@dataclass(frozen=True)
class UsageSite:
    """A single reference to the target class."""
    unit: SourceUnit
    location: NavigableLocation
    context: UsageContext


# ----------------------------------------------------------------------
# Search scopes
# ----------------------------------------------------------------------

class FileScope:
    """A scope made of a single, already loaded unit."""

    def __init__(self, unit: SourceUnit):
        self.unit = unit

    def units(self) -> Iterator[SourceUnit]:
        yield self.unit


class ProjectScope:
    """Every supported file below a project root.

    Units are loaded lazily, one per step of the iteration, directory by
    directory in name order.
    """

    def __init__(self, project_root: str | Path, loader: SourceUnitLoader,
                 excluded_dirs: Optional[Iterable[str]] = None):
        """Initialize project scope.

        Args:
            project_root: Root directory to scan
            loader: Loader used to read each file
            excluded_dirs: Directory names never descended into
        """
        self.project_root = Path(project_root).resolve()
        self.loader = loader
        self.excluded_dirs: Set[str] = set(excluded_dirs or [])

    def files(self) -> Iterator[Path]:
        """Yield supported files below the root, skipping excluded directories."""
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            # Pruned in place so excluded trees are never entered
            dirnames[:] = sorted(name for name in dirnames if name not in self.excluded_dirs)
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if self.loader.accepts(file_path):
                    yield file_path

    def units(self) -> Iterator[SourceUnit]:
        for file_path in self.files():
            unit = self.loader.load(file_path)
            if unit is not None:
                yield unit


# ----------------------------------------------------------------------
# Java name helpers
# ----------------------------------------------------------------------

_GENERIC_ARGS = re.compile(r'<[^<>]*>')


def _normalize_qualifier(text: str) -> str:
    """Drop whitespace and type arguments: 'Outer<String> ' -> 'Outer'."""
    text = ''.join(text.split())
    previous = None
    while previous != text:
        previous = text
        text = _GENERIC_ARGS.sub('', text)
    return text


def qualifier_of(node: Node, unit: SourceUnit) -> Optional[str]:
    """Return the qualifier written before `node` ('a.b' for 'a.b.Foo'), if any."""
    parent = node.parent
    if parent is None:
        return None

    if parent.type == 'scoped_identifier' and same_node(parent.child_by_field_name('name'), node):
        return _normalize_qualifier(unit.text_of(parent.child_by_field_name('scope')))

    if parent.type == 'field_access' and same_node(parent.child_by_field_name('field'), node):
        return _normalize_qualifier(unit.text_of(parent.child_by_field_name('object')))

    if parent.type == 'scoped_type_identifier':
        parts = [child for child in parent.named_children
                 if child.type not in ('annotation', 'marker_annotation')]
        if len(parts) >= 2 and same_node(parts[-1], node):
            return _normalize_qualifier(unit.text_of(parts[0]))

    return None


def is_reference_position(node: Node) -> bool:
    """False for identifiers that cannot name a referenced type at their position."""
    if declaration_of(node) is not None:
        return False
    parent = node.parent
    if parent is not None and parent.type == 'method_invocation':
        if same_node(parent.child_by_field_name('name'), node):
            return False
    if find_ancestor(node, ['package_declaration']) is not None:
        return False
    if node.type == 'identifier':
        return is_type_name_position(node)
    return True


def is_type_name_position(node: Node) -> bool:
    """Whether a bare `identifier` can name a type where it stands.

    type_identifier nodes always name types. An `identifier` only does as the
    receiver in 'Foo.bar()', 'Foo.FIELD' or 'Foo::new', as a segment of a
    dotted name, or as an annotation name. Anywhere else it is a variable.
    """
    parent = node.parent
    if parent is None:
        return False

    if parent.type in ('method_invocation', 'field_access'):
        return (same_node(parent.child_by_field_name('object'), node)
                or same_node(parent.child_by_field_name('field'), node))
    if parent.type == 'scoped_identifier':
        return True
    if parent.type == 'method_reference':
        return bool(parent.named_children) and same_node(parent.named_children[0], node)
    if parent.type in ('annotation', 'marker_annotation'):
        return same_node(parent.child_by_field_name('name'), node)
    return False


# Declarations that may introduce type variables
GENERIC_DECLARATIONS = set(TYPE_DECLARATIONS) | {'method_declaration', 'constructor_declaration'}


def type_parameter_names(node: Node, unit: SourceUnit) -> Set[str]:
    """Names of the type variables in scope at `node` ('T' inside 'class Box<T>')."""
    names: Set[str] = set()
    current = node.parent
    while current is not None:
        if current.type in GENERIC_DECLARATIONS:
            parameters = current.child_by_field_name('type_parameters')
            if parameters is not None:
                for parameter in parameters.named_children:
                    if parameter.type != 'type_parameter':
                        continue
                    name_node = next((c for c in parameter.named_children if c.type == 'type_identifier'), None)
                    if name_node is not None:
                        names.add(unit.text_of(name_node))
        current = current.parent
    return names


# ----------------------------------------------------------------------
# Index
# ----------------------------------------------------------------------

class ReferenceIndex:
    """Finds references to a target class across a search scope."""

    def search(self, target: TargetClass, scope, token: Optional[CancellationToken] = None) -> Iterator[UsageSite]:
        """Lazily yield every reference to `target` in `scope`.

        Args:
            target: Class whose references are wanted
            scope: FileScope or ProjectScope
            token: Polled once per unit; cancellation raises QueryCancelledError

        Yields:
            UsageSite per reference, in unit order then document order
        """
        for unit in scope.units():
            if token is not None:
                token.check()
            if unit.is_structured:
                yield from self._java_references(target, unit)
            else:
                yield from self._text_references(target, unit)

    def _java_references(self, target: TargetClass, unit: SourceUnit) -> Iterator[UsageSite]:
        if target.is_local and unit != target.unit:
            return
        # Fast path: most files never mention the name
        if target.name.encode('utf-8') not in unit.source:
            return

        for node in unit.walk():
            if node.type not in IDENTIFIER_TYPES or unit.text_of(node) != target.name:
                continue
            if not is_reference_position(node):
                continue

            qualifier = qualifier_of(node, unit)
            if qualifier is not None:
                resolved = self._qualified_resolves(target, unit, qualifier)
            elif target.name in type_parameter_names(node, unit):
                resolved = False
            else:
                resolved = self._simple_name_visible(
                    unit, target.unit, target.package_name, target.enclosing + (target.name,),
                    allow_own_file_only=target.is_local,
                )
            if resolved:
                yield UsageSite(unit, unit.location_of(node), self._context_of(node, unit))

    def _text_references(self, target: TargetClass, unit: SourceUnit) -> Iterator[UsageSite]:
        qualified_name = target.qualified_name
        if not qualified_name:
            return
        pattern = re.compile(rb'(?<![\w.$])' + re.escape(qualified_name.encode('utf-8')) + rb'(?![\w$])')
        for match in pattern.finditer(unit.source):
            yield UsageSite(unit, unit.location_at_offset(match.start()), UsageContext.TEXT)

    def _qualified_resolves(self, target: TargetClass, unit: SourceUnit, qualifier: str) -> bool:
        qualified_name = target.qualified_name
        if qualified_name is None:
            return False
        if f"{qualifier}.{target.name}" == qualified_name:
            return True
        # Outer.Inner written through a visible outer class
        if target.enclosing and qualifier == '.'.join(target.enclosing):
            return self._simple_name_visible(unit, target.unit, target.package_name, target.enclosing[:1])
        return False

    def _simple_name_visible(self, unit: SourceUnit, target_unit: SourceUnit, package: str,
                             chain: Tuple[str, ...], allow_own_file_only: bool = False) -> bool:
        """Decide whether a simple type name in `unit` denotes package + chain.

        Args:
            unit: Unit containing the simple name
            target_unit: Unit declaring the type
            package: Package of the declaring unit
            chain: Enclosing type names plus the type's own name
            allow_own_file_only: True for local classes

        Returns:
            True if the name resolves to the type
        """
        if unit == target_unit:
            return True
        if allow_own_file_only:
            return False

        name = chain[-1]
        if name in unit.declared_type_names:
            return False

        qualified_name = '.'.join(([package] if package else []) + list(chain))
        container = qualified_name.rpartition('.')[0]

        # A single-type import of the same simple name decides on its own
        for import_info in unit.imports:
            if not import_info.is_on_demand and import_info.name.rpartition('.')[2] == name:
                return import_info.name == qualified_name

        if len(chain) == 1 and unit.package_name == package:
            return True

        return any(
            import_info.is_on_demand and import_info.name == container
            for import_info in unit.imports
        )

    def _context_of(self, node: Node, unit: SourceUnit) -> UsageContext:
        import_node = find_ancestor(node, ['import_declaration'])
        if import_node is None:
            return UsageContext.TYPE_REFERENCE if node.type == 'type_identifier' else UsageContext.EXPRESSION

        child_types = {child.type for child in import_node.children}
        if 'static' not in child_types:
            return UsageContext.IMPORT_STATEMENT

        imported = unit.name_child(import_node)
        if imported is not None and imported.end_byte == node.end_byte:
            return UsageContext.IMPORT_STATIC_STATEMENT
        return UsageContext.IMPORT_STATIC_REFERENCE
