"""Source units: one file with its package, imports and declared types."""
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple
from tree_sitter import Node, Tree

from .elements import ElementKind, NavigableLocation, SourceElement, SourcePosition
from .errors import InvalidPositionError
from .parser import LanguageParser


# Java type declarations and the keyword each one is declared with
TYPE_DECLARATIONS = {
    'class_declaration': 'class',
    'interface_declaration': 'interface',
    'enum_declaration': 'enum',
    'record_declaration': 'record',
    'annotation_type_declaration': '@interface',
}

# Containers a member type may sit in without becoming a local class
MEMBER_CONTAINERS = {
    'program',
    'class_body',
    'interface_body',
    'enum_body',
    'enum_body_declarations',
    'annotation_type_body',
}

# Non-type declarations whose `name` field holds the declared identifier
NAMED_DECLARATIONS = {
    'method_declaration',
    'constructor_declaration',
    'compact_constructor_declaration',
    'variable_declarator',
    'formal_parameter',
    'catch_formal_parameter',
    'enum_constant',
    'annotation_type_element_declaration',
    'enhanced_for_statement',
    'resource',
}

IDENTIFIER_TYPES = {'identifier', 'type_identifier'}


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    """Compare two nodes of the same tree by span and type."""
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def find_ancestor(node: Node, types: Iterable[str]) -> Optional[Node]:
    """Return the closest ancestor whose type is in `types`."""
    types = set(types)
    current = node.parent
    while current is not None:
        if current.type in types:
            return current
        current = current.parent
    return None


def declaration_of(node: Node) -> Optional[Node]:
    """Return the declaration node that `node` is the name of, if any."""
    parent = node.parent
    if parent is None:
        return None

    if parent.type in TYPE_DECLARATIONS or parent.type in NAMED_DECLARATIONS:
        if same_node(parent.child_by_field_name('name'), node):
            return parent
        return None

    # <T> declares a type variable: the bare type_identifier child is its name
    if parent.type == 'type_parameter' and node.type == 'type_identifier':
        return parent

    # x -> ... and (a, b) -> ...
    if parent.type == 'lambda_expression' and same_node(parent.child_by_field_name('parameters'), node):
        return parent
    if parent.type == 'inferred_parameters':
        return parent

    return None


@dataclass(frozen=True)
class ImportInfo:
    """A Java import declaration."""
    name: str  # e.g. 'com.acme.Foo' or 'com.acme' for 'com.acme.*'
    is_static: bool
    is_on_demand: bool
    line: int


@dataclass(frozen=True)
class ClassDeclaration:
    """A type declared in a source unit."""
    name: str
    kind: str  # 'class', 'interface', 'enum', 'record', '@interface'
    enclosing: Tuple[str, ...]  # simple names of enclosing types, outermost first
    is_local: bool  # declared inside a method body, initializer or anonymous class
    location: NavigableLocation  # start of the declaration
    name_location: NavigableLocation


def fingerprint_of(path: Path) -> Tuple[int, int]:
    """File fingerprint used to detect edits: (mtime_ns, size)."""
    stat = path.stat()
    return (stat.st_mtime_ns, stat.st_size)


class SourceUnit:
    """One source file, parsed once for the duration of a query.

    Units compare equal when they denote the same file, so a unit re-read by
    a project scan equals the unit the target class was resolved from.
    """

    def __init__(self, name: str, source: bytes, language: str,
                 path: Optional[Path] = None, tree: Optional[Tree] = None,
                 fingerprint: Optional[Tuple[int, int]] = None):
        """Initialize a source unit.

        Args:
            name: Display name of the file (e.g. 'Foo.java')
            source: Raw file contents
            language: 'java' for structured Java sources, 'text' otherwise
            path: Resolved file path, or None for in-memory sources
            tree: tree-sitter Tree for Java sources
            fingerprint: (mtime_ns, size) captured when the file was read
        """
        self.name = name
        self.source = source
        self.language = language
        self.path = path
        self.tree = tree
        self.fingerprint = fingerprint
        self.key = str(path) if path is not None else f"<memory>/{name}"

        self.package_name: Optional[str] = None
        self.imports: List[ImportInfo] = []
        self.class_declarations: List[ClassDeclaration] = []

        if self.is_structured:
            self._extract()

    def __eq__(self, other) -> bool:
        return isinstance(other, SourceUnit) and other.key == self.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"SourceUnit({self.key!r}, package={self.package_name!r})"

    @property
    def is_structured(self) -> bool:
        """True for Java sources with a syntax tree."""
        return self.language == 'java' and self.tree is not None

    @property
    def declared_type_names(self) -> Set[str]:
        return {declaration.name for declaration in self.class_declarations}

    def is_valid(self) -> bool:
        """Check that the file on disk is still the one this unit was read from."""
        if self.path is None:
            return True
        try:
            return fingerprint_of(self.path) == self.fingerprint
        except OSError:
            return False

    def text_of(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode('utf-8', errors='ignore')

    def _column_at(self, offset: int) -> int:
        """1-based character column of a byte offset."""
        line_start = self.source.rfind(b'\n', 0, offset) + 1
        return len(self.source[line_start:offset].decode('utf-8', errors='replace')) + 1

    def location_of(self, node: Node) -> NavigableLocation:
        """Navigable location of the first character of `node`."""
        return NavigableLocation(
            file_name=self.name,
            line=node.start_point[0] + 1,
            column=self._column_at(node.start_byte),
            offset=node.start_byte,
            file=self.path,
        )

    def location_at_offset(self, offset: int) -> NavigableLocation:
        """Navigable location of a byte offset (used for non-Java units)."""
        return NavigableLocation(
            file_name=self.name,
            line=self.source.count(b'\n', 0, offset) + 1,
            column=self._column_at(offset),
            offset=offset,
            file=self.path,
        )

    def walk(self) -> Iterator[Node]:
        """Yield every node of the syntax tree in document order."""
        if not self.is_structured:
            return
        stack = [self.tree.root_node]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_identifiers(self) -> Iterator[SourceElement]:
        """Yield an IDENTIFIER element for every identifier token in the unit."""
        for node in self.walk():
            if node.type in IDENTIFIER_TYPES:
                yield self._identifier_element(node)

    def element_at(self, line: int, column: int) -> SourceElement:
        """Return the innermost element at a 1-based line/column.

        Args:
            line: 1-based line number
            column: 1-based column number

        Returns:
            SourceElement tagged with the kind of syntax found there

        Raises:
            ValueError: If the unit has no syntax tree or the position is out of range
        """
        if not self.is_structured:
            raise ValueError(f"{self.name} is not a Java source file")

        lines = self.source.split(b'\n')
        if line < 1 or line > len(lines):
            raise ValueError(f"line {line} is outside {self.name} ({len(lines)} lines)")
        text = lines[line - 1].decode('utf-8', errors='replace')
        if column < 1 or column > len(text) + 1:
            raise ValueError(f"column {column} is outside line {line} of {self.name}")

        # tree-sitter points count bytes, columns count characters
        point = (line - 1, len(text[:column - 1].encode('utf-8')))
        node = self.tree.root_node.descendant_for_point_range(point, point)

        if node.type in IDENTIFIER_TYPES:
            return self._identifier_element(node)
        if node.type in TYPE_DECLARATIONS:
            return self._declaration_element(node, ElementKind.CLASS_DECLARATION)
        if node.type == 'import_declaration' or find_ancestor(node, ['import_declaration']):
            import_node = node if node.type == 'import_declaration' else find_ancestor(node, ['import_declaration'])
            return SourceElement(ElementKind.IMPORT_DECLARATION, self.text_of(import_node),
                                 self.location_of(import_node), node=import_node)
        return SourceElement(ElementKind.OTHER, self.text_of(node), self.location_of(node), node=node)

    def _identifier_element(self, node: Node) -> SourceElement:
        declaration = declaration_of(node)
        declares = None
        if declaration is not None:
            kind = ElementKind.CLASS_DECLARATION if declaration.type in TYPE_DECLARATIONS else ElementKind.OTHER
            declares = self._declaration_element(declaration, kind)
        return SourceElement(ElementKind.IDENTIFIER, self.text_of(node), self.location_of(node),
                             node=node, declares=declares)

    def _declaration_element(self, node: Node, kind: ElementKind) -> SourceElement:
        name_node = node.child_by_field_name('name')
        text = self.text_of(name_node) if name_node is not None else self.text_of(node)
        return SourceElement(kind, text, self.location_of(node), node=node)

    def declaration_for(self, node: Node) -> Optional[ClassDeclaration]:
        """Return the ClassDeclaration record for a type declaration node."""
        for declaration in self.class_declarations:
            if declaration.location.offset == node.start_byte:
                return declaration
        return None

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def _extract(self):
        """Extract package name, imports and type declarations from the tree."""
        self.package_name = ''  # default package unless declared

        for node in self.walk():
            if node.type == 'package_declaration':
                name_node = self.name_child(node)
                if name_node is not None:
                    self.package_name = self.text_of(name_node)

            elif node.type == 'import_declaration':
                import_info = self._extract_import(node)
                if import_info is not None:
                    self.imports.append(import_info)

            elif node.type in TYPE_DECLARATIONS:
                declaration = self._extract_declaration(node)
                if declaration is not None:
                    self.class_declarations.append(declaration)

    def name_child(self, node: Node) -> Optional[Node]:
        for child in node.named_children:
            if child.type in ('identifier', 'scoped_identifier'):
                return child
        return None

    def _extract_import(self, node: Node) -> Optional[ImportInfo]:
        name_node = self.name_child(node)
        if name_node is None:
            return None
        child_types = {child.type for child in node.children}
        return ImportInfo(
            name=self.text_of(name_node),
            is_static='static' in child_types,
            is_on_demand='asterisk' in child_types,
            line=node.start_point[0] + 1,
        )

    def _extract_declaration(self, node: Node) -> Optional[ClassDeclaration]:
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return None

        enclosing: List[str] = []
        is_local = False
        current = node.parent
        while current is not None:
            if current.type in TYPE_DECLARATIONS:
                outer_name = current.child_by_field_name('name')
                if outer_name is not None:
                    enclosing.insert(0, self.text_of(outer_name))
            elif current.type not in MEMBER_CONTAINERS:
                is_local = True
            current = current.parent

        return ClassDeclaration(
            name=self.text_of(name_node),
            kind=TYPE_DECLARATIONS[node.type],
            enclosing=tuple(enclosing),
            is_local=is_local,
            location=self.location_of(node),
            name_location=self.location_of(name_node),
        )


class SourceUnitLoader:
    """Reads files from disk into SourceUnits.

    Java files get a syntax tree; files with one of `text_extensions` are
    loaded as plain text so they can be searched for qualified names.
    """

    def __init__(self, text_extensions: Optional[Iterable[str]] = None):
        self.parser = LanguageParser('java')
        self.text_extensions = {ext.lower() for ext in (text_extensions or [])}

    def accepts(self, path: Path) -> bool:
        return self._language_for(path) is not None

    def _language_for(self, path: Path) -> Optional[str]:
        language = LanguageParser.language_for(path)
        if language:
            return language
        if path.suffix.lower() in self.text_extensions:
            return 'text'
        return None

    def load(self, path: str | Path) -> Optional[SourceUnit]:
        """Load a file into a SourceUnit.

        Args:
            path: File to load

        Returns:
            SourceUnit, or None if the file type is not supported or the file is unreadable
        """
        path = Path(path).resolve()
        language = self._language_for(path)
        if language is None:
            return None

        try:
            fingerprint = fingerprint_of(path)
            with open(path, 'rb') as f:
                source = f.read()
        except (IOError, OSError):
            return None

        tree = self.parser.parse_source(source) if language == 'java' else None
        return SourceUnit(path.name, source, language, path=path, tree=tree, fingerprint=fingerprint)

    def from_source(self, source: str | bytes, name: str = 'Main.java') -> SourceUnit:
        """Build an in-memory unit, e.g. for an unsaved editor buffer."""
        if isinstance(source, str):
            source = source.encode('utf-8')
        language = self._language_for(Path(name)) or 'text'
        tree = self.parser.parse_source(source) if language == 'java' else None
        return SourceUnit(name, source, language, tree=tree)

    def load_position(self, position: SourcePosition) -> Tuple[SourceUnit, SourceElement]:
        """Load the unit a position points into and the element found there.

        Raises:
            InvalidPositionError: If the file is gone, not Java, or the position is out of range
        """
        unit = self.load(position.file)
        if unit is None:
            raise InvalidPositionError(position, "file is missing or unreadable")
        try:
            element = unit.element_at(position.line, position.column)
        except ValueError as e:
            raise InvalidPositionError(position, str(e))
        return unit, element
