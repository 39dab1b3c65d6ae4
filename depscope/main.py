"""depscope CLI - survey which classes depend on a Java class."""
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from .analyzer.cancellation import CancellationToken
from .analyzer.collector import ReferenceCollector
from .analyzer.declaration import DeclarationDetector
from .analyzer.elements import ElementKind, SourcePosition
from .analyzer.errors import DepscopeError
from .analyzer.reference_index import ProjectScope, ReferenceIndex
from .analyzer.source_unit import SourceUnitLoader
from .config import __version__, get_config
from .gutter.popup import ConsoleNavigator, ConsolePopup, glyph_for
from .gutter.provider import DependencyMarkerProvider
from .utils.logger import sanitize_for_terminal
from .utils.safe_console import SafeConsole

app = typer.Typer(
    name="depscope",
    help="Show which classes depend on a Java class, grouped by package and scope",
    add_completion=False
)
console = SafeConsole()


def build_provider(project_path: Path, selection: Optional[int] = None,
                   open_files: bool = False) -> DependencyMarkerProvider:
    """Wire the marker provider with console rendering for a project.

    Args:
        project_path: Root of the project searched for references
        selection: 1-based popup row to choose after rendering
        open_files: Launch the chosen file after navigating

    Returns:
        Configured DependencyMarkerProvider
    """
    config = get_config()
    loader = SourceUnitLoader(text_extensions=config.text_extensions)
    project_scope = ProjectScope(project_path, loader, excluded_dirs=config.excluded_dirs)
    collector = ReferenceCollector(ReferenceIndex(), project_scope=project_scope)
    return DependencyMarkerProvider(
        DeclarationDetector(loader),
        collector,
        ConsolePopup(console, selection=selection),
        ConsoleNavigator(console, open_files=open_files),
        title=config.popup_title,
    )


@contextmanager
def cancel_on_interrupt(token: CancellationToken):
    """Turn Ctrl-C into a cancellation request for the running query."""
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    previous = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def _require_file(file_path: Path):
    if not file_path.is_file():
        console.print(f"[bold red]Error:[/bold red] File does not exist: {escape(str(file_path))}")
        raise typer.Exit(1)


@app.command()
def markers(
    file_path: str = typer.Argument(..., help="Java source file to scan for class declarations"),
):
    """List the gutter markers of a Java file (one per class declaration name)."""
    file_path = Path(file_path).resolve()
    _require_file(file_path)

    provider = build_provider(file_path.parent)
    unit = provider.detector.loader.load(file_path)
    if unit is None or not unit.is_structured:
        console.print(f"[bold red]Error:[/bold red] Not a Java source file: {escape(str(file_path))}")
        raise typer.Exit(1)

    found = []
    for element in unit.iter_identifiers():
        # Only class declaration names can carry a marker
        if element.declares is None or element.declares.kind is not ElementKind.CLASS_DECLARATION:
            continue
        position = SourcePosition(file_path, element.location.line, element.location.column)
        marker = provider.provide_marker(position)
        if marker is not None:
            found.append((element, marker))

    if not found:
        console.print(f"[yellow]No class declarations in {escape(file_path.name)}[/yellow]")
        return

    table = Table(title=f"Gutter markers: {file_path.name}")
    table.add_column("Line", style="green", justify="right")
    table.add_column("Column", style="green", justify="right")
    table.add_column("Class", style="cyan")
    table.add_column("Marker", style="magenta")

    for _, marker in found:
        glyph, _ = glyph_for(marker.icon)
        table.add_row(
            str(marker.location.line),
            str(marker.location.column),
            marker.on_click.target.display_name,
            sanitize_for_terminal(f"{glyph} {marker.tooltip}"),
        )

    console.print(table)


@app.command()
def show(
    file_path: str = typer.Argument(..., help="Java source file declaring the class"),
    line: int = typer.Argument(..., help="1-based line of the class name"),
    column: int = typer.Argument(..., help="1-based column of the class name"),
    project_path: str = typer.Option(".", "--project", "-p", help="Project root searched for usages"),
    select: Optional[int] = typer.Option(None, "--select", "-s", help="Choose row N (1-based) and navigate to it"),
    open_file: bool = typer.Option(False, "--open", help="Open the chosen file after navigating"),
):
    """Show the classes that depend on the class declared at FILE:LINE:COLUMN."""
    file_path = Path(file_path).resolve()
    project_path = Path(project_path).resolve()
    _require_file(file_path)

    if not project_path.is_dir():
        console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(project_path))}")
        raise typer.Exit(1)

    provider = build_provider(project_path, selection=select, open_files=open_file)
    position = SourcePosition(file_path, line, column)

    marker = provider.provide_marker(position)
    if marker is None:
        try:
            provider.detector.resolve(position)
        except DepscopeError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    target = marker.on_click.target
    console.print(f"[bold blue]Usages of[/bold blue] {escape(target.display_name)} "
                  f"[dim]in {escape(str(project_path))}[/dim]\n")

    token = CancellationToken()
    with cancel_on_interrupt(token), console.status("Searching references..."):
        model = marker.on_click.navigate(token)

    if model is None:
        if token.is_cancelled():
            console.print("[yellow]Search cancelled[/yellow]")
        raise typer.Exit(1)

    packages = {row.item.package_name for row in model.rows}
    console.print(f"\n[dim]{len(model.rows)} dependent file(s) in {len(packages)} package(s)[/dim]")


def _version_callback(value: bool):
    if value:
        console.print(f"depscope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", help="Show the version and exit",
                                 callback=_version_callback, is_eager=True),
):
    """depscope - who depends on this class?"""
    pass


if __name__ == "__main__":
    app()
