"""Gutter marker provider: the entry point the host calls per identifier."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ..analyzer.cancellation import CancellationToken
from ..analyzer.collector import ReferenceCollector
from ..analyzer.declaration import DeclarationDetector, TargetClass
from ..analyzer.elements import NavigableLocation, SourcePosition
from ..analyzer.errors import QueryCancelledError, StaleReferenceError
from ..analyzer.ranker import classify_and_rank
from ..config import DEFAULT_POPUP_TITLE
from .presentation import PopupModel, PopupRow, build_popup


class GutterAlignment(Enum):
    """Where the marker icon sits in the gutter."""

    LEFT = auto()
    CENTER = auto()
    RIGHT = auto()


class ClickHandler:
    """Runs the usage survey for one target class when its marker is clicked."""

    def __init__(self, target: TargetClass, collector: ReferenceCollector, renderer, navigator,
                 title: str = DEFAULT_POPUP_TITLE):
        """Initialize click handler.

        Args:
            target: Class the marker was created for
            collector: Collector used for each click
            renderer: Popup renderer (show(model, on_chosen), notify_nothing_found(message))
            navigator: Object with navigate(location)
            title: Popup title
        """
        self.target = target
        self.collector = collector
        self.renderer = renderer
        self.navigator = navigator
        self.title = title

    def navigate(self, token: Optional[CancellationToken] = None) -> Optional[PopupModel]:
        """Collect, rank and show the usages of the target class.

        Returns:
            The rendered model, or None when the target went stale or the query was cancelled
        """
        try:
            sites = self.collector.collect(self.target, token)
        except StaleReferenceError:
            self.renderer.notify_nothing_found(f"{self.target.display_name} is no longer valid; nothing found")
            return None
        except QueryCancelledError:
            return None

        model = build_popup(classify_and_rank(self.target, sites), title=self.title)
        self.renderer.show(model, self.on_chosen)
        return model

    def on_chosen(self, row: PopupRow):
        self.navigator.navigate(row.item.location)


@dataclass(frozen=True)
class MarkerDescriptor:
    """Gutter marker shown next to a class declaration name."""
    location: NavigableLocation
    icon: str
    tooltip: str
    accessible_name: str
    alignment: GutterAlignment
    on_click: ClickHandler


class DependencyMarkerProvider:
    """Provides 'Show dependencies' markers for class declaration names."""

    NAME = "Dependency line marker"
    ICON = 'nodes/artifact'
    TOOLTIP = "Show dependencies"
    ACCESSIBLE_NAME = "Dependency"

    def __init__(self, detector: DeclarationDetector, collector: ReferenceCollector, renderer, navigator,
                 title: str = DEFAULT_POPUP_TITLE):
        self.detector = detector
        self.collector = collector
        self.renderer = renderer
        self.navigator = navigator
        self.title = title

    def provide_marker(self, position: SourcePosition) -> Optional[MarkerDescriptor]:
        """Return a marker if `position` names a class declaration, else None."""
        target = self.detector.detect(position)
        if target is None:
            return None

        return MarkerDescriptor(
            location=target.location,
            icon=self.ICON,
            tooltip=self.TOOLTIP,
            accessible_name=self.ACCESSIBLE_NAME,
            alignment=GutterAlignment.RIGHT,
            on_click=ClickHandler(target, self.collector, self.renderer, self.navigator, title=self.title),
        )
