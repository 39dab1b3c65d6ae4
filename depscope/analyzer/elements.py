"""Positions, locations and tagged source elements."""
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SourcePosition:
    """A 1-based line/column position inside a file on disk (columns count characters)."""
    file: Path
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class NavigableLocation:
    """A location the host can navigate to. The core never interprets it."""
    file_name: str  # display name, e.g. 'Foo.java'
    line: int  # 1-based
    column: int  # 1-based, in characters
    offset: int  # byte offset into the file
    file: Optional[Path] = None  # None for in-memory sources

    def __str__(self) -> str:
        target = self.file if self.file is not None else self.file_name
        return f"{target}:{self.line}:{self.column}"


class ElementKind(Enum):
    """Tag of a SourceElement."""

    IDENTIFIER = auto()
    CLASS_DECLARATION = auto()
    IMPORT_DECLARATION = auto()
    OTHER = auto()


@dataclass(frozen=True)
class SourceElement:
    """A syntax element of a source unit, tagged by kind.

    For IDENTIFIER elements, `declares` is the element the identifier names
    when it is a declaration name (a CLASS_DECLARATION for class names, OTHER
    for methods, fields and the like), and None for plain references.
    """
    kind: ElementKind
    text: str
    location: NavigableLocation
    node: object = field(default=None, compare=False, repr=False)  # tree-sitter Node
    declares: Optional['SourceElement'] = None
