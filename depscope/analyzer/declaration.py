"""Detection of class declarations under a source position."""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .elements import ElementKind, NavigableLocation, SourcePosition
from .errors import InvalidPositionError, NotAClassDeclarationError
from .source_unit import ClassDeclaration, SourceUnit, SourceUnitLoader


@dataclass(frozen=True)
class TargetClass:
    """The class whose usages are being surveyed."""
    name: str
    package_name: str
    enclosing: Tuple[str, ...]
    kind: str
    is_local: bool
    location: NavigableLocation  # the name identifier
    unit: SourceUnit = field(compare=False, repr=False)

    @property
    def qualified_name(self) -> Optional[str]:
        """Canonical name (e.g. 'com.acme.Outer.Foo'), None for local classes."""
        if self.is_local:
            return None
        parts = [self.package_name] if self.package_name else []
        parts.extend(self.enclosing)
        parts.append(self.name)
        return '.'.join(parts)

    @property
    def display_name(self) -> str:
        return self.qualified_name or self.name

    @classmethod
    def from_declaration(cls, unit: SourceUnit, declaration: ClassDeclaration) -> 'TargetClass':
        return cls(
            name=declaration.name,
            package_name=unit.package_name,
            enclosing=declaration.enclosing,
            kind=declaration.kind,
            is_local=declaration.is_local,
            location=declaration.name_location,
            unit=unit,
        )

    def is_valid(self) -> bool:
        """True while the declaring file is unchanged on disk."""
        return self.unit.is_valid()


class DeclarationDetector:
    """Decides whether a source position names a class declaration."""

    def __init__(self, loader: SourceUnitLoader):
        self.loader = loader

    def resolve(self, position: SourcePosition) -> TargetClass:
        """Resolve the class declared by the identifier at `position`.

        Args:
            position: Position of the candidate identifier

        Returns:
            TargetClass for the declaration

        Raises:
            InvalidPositionError: If the position no longer points into a Java file
            NotAClassDeclarationError: If the token is not a class declaration name
        """
        unit, element = self.loader.load_position(position)

        if element.kind is not ElementKind.IDENTIFIER:
            raise NotAClassDeclarationError(position)
        if element.declares is None or element.declares.kind is not ElementKind.CLASS_DECLARATION:
            raise NotAClassDeclarationError(position)

        declaration = unit.declaration_for(element.declares.node)
        if declaration is None:
            raise NotAClassDeclarationError(position)

        return TargetClass.from_declaration(unit, declaration)

    def detect(self, position: SourcePosition) -> Optional[TargetClass]:
        """Like resolve(), but returns None instead of raising."""
        try:
            return self.resolve(position)
        except (InvalidPositionError, NotAClassDeclarationError):
            return None
