"""Console renderer for the usage popup and console navigation."""
from typing import Callable, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape

from ..analyzer.elements import NavigableLocation
from .presentation import PopupModel, PopupRow


# Glyph and style per icon token
ICON_GLYPHS = {
    'nodes/public': ('◆', 'green'),
    'nodes/packageLocal': ('◇', 'cyan'),
    'nodes/protected': ('◈', 'yellow'),
    'nodes/private': ('●', 'red'),
    'nodes/unknown': ('¿', 'dim'),
    'nodes/artifact': ('⌘', 'magenta'),
}

DEFAULT_PACKAGE_LABEL = '<default package>'


def glyph_for(icon: str) -> Tuple[str, str]:
    return ICON_GLYPHS.get(icon, ICON_GLYPHS['nodes/unknown'])


class ConsoleNavigator:
    """Navigates to a location by printing it, optionally opening the file."""

    def __init__(self, console: Console, open_files: bool = False):
        self.console = console
        self.open_files = open_files

    def navigate(self, location: NavigableLocation):
        self.console.print(f"[bold]→[/bold] {escape(str(location))}")
        if self.open_files and location.file is not None:
            typer.launch(str(location.file))


class ConsolePopup:
    """Renders a PopupModel as a grouped list on the console.

    When constructed with a 1-based `selection`, the matching row is chosen
    right after rendering, the way a click on a popup entry would.
    """

    def __init__(self, console: Console, selection: Optional[int] = None):
        self.console = console
        self.selection = selection

    def show(self, model: PopupModel, on_chosen: Callable[[PopupRow], None]) -> Optional[PopupRow]:
        """Render the popup and apply the configured selection.

        Args:
            model: Rows to render, already ordered with separators
            on_chosen: Called with the selected row

        Returns:
            The chosen row, or None if nothing was selected
        """
        self.console.print(f"[bold]{escape(model.title)}[/bold]")
        if model.is_empty:
            self.console.print("  [dim]No usages found[/dim]")
            return None

        for index, row in enumerate(model.rows, start=1):
            if row.separator is not None:
                label = row.separator or DEFAULT_PACKAGE_LABEL
                self.console.print(f"[bold blue]── {escape(label)}[/bold blue]")
            glyph, style = glyph_for(row.icon)
            location = f"{row.item.location.file_name}:{row.item.location.line}"
            self.console.print(
                f"  [{style}]{glyph}[/{style}] {index:>2}. {escape(row.text)}  [dim]{escape(location)}[/dim]"
            )

        if self.selection is None:
            return None
        if not 1 <= self.selection <= len(model.rows):
            self.console.print(
                f"[bold red]Error:[/bold red] Selection {self.selection} is out of range (1-{len(model.rows)})"
            )
            return None

        row = model.rows[self.selection - 1]
        on_chosen(row)
        return row

    def notify_nothing_found(self, message: str):
        """Host-style 'nothing found' notification, shown instead of a popup."""
        self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]")
