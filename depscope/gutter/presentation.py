"""Projection of ranked items into popup rows."""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..analyzer.ranker import Item
from ..analyzer.scope import DependencyScope
from ..config import DEFAULT_POPUP_TITLE


JAVA_SUFFIX = '.java'
UNKNOWN_REFERENCE_TEXT = "Unknown reference"

# Icon token per scope. PROTECTED is never produced by the classifier but keeps its icon.
SCOPE_ICONS = {
    DependencyScope.UNKNOWN: 'nodes/unknown',
    DependencyScope.PRIVATE: 'nodes/private',
    DependencyScope.PROTECTED: 'nodes/protected',
    DependencyScope.PACKAGE_PRIVATE: 'nodes/packageLocal',
    DependencyScope.PUBLIC: 'nodes/public',
}


@dataclass(frozen=True)
class PopupRow:
    """Display record for one item."""
    text: str
    icon: str
    separator: Optional[str]
    item: Item


@dataclass(frozen=True)
class PopupModel:
    """Everything a renderer needs to show the usage list."""
    title: str
    rows: List[PopupRow]

    @property
    def is_empty(self) -> bool:
        return not self.rows


def text_for(item: Item) -> str:
    """Class name shown for an item: its file name without the .java suffix."""
    file_name = item.location.file_name
    if not file_name.endswith(JAVA_SUFFIX):
        return UNKNOWN_REFERENCE_TEXT
    return file_name[:-len(JAVA_SUFFIX)]


def icon_for(scope: DependencyScope) -> str:
    return SCOPE_ICONS[scope]


def project_item(item: Item) -> PopupRow:
    return PopupRow(text=text_for(item), icon=icon_for(item.scope), separator=item.separator, item=item)


def build_popup(items: Iterable[Item], title: str = DEFAULT_POPUP_TITLE) -> PopupModel:
    """Project ranked items into a popup model.

    Args:
        items: Output of classify_and_rank(), already ordered and annotated
        title: Popup title

    Returns:
        PopupModel with one row per item, in the same order
    """
    return PopupModel(title=title, rows=[project_item(item) for item in items])
