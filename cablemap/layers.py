"""Route layers: one drawn polyline per cable route."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Iterator, List, Optional

import folium
from shapely.geometry import LineString

from cablemap import config
from cablemap.config import Style
from cablemap.geometry import Bounds, color_for, line_bounds
from cablemap.models import Connection, Route
from cablemap.surface import MapSurface

if TYPE_CHECKING:
    from cablemap.selection import SelectionTracker

logger = logging.getLogger(__name__)


@dataclass
class ClickEvent:
    """A click as it travels from a layer up to the map.

    ``original`` is the user-input event behind the click. Synthetic clicks
    (``RouteLayer.fire_click`` from a "view" action) have none.
    """

    original: Optional[object] = None
    propagation_stopped: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


ClickHandler = Callable[["RouteLayer", ClickEvent], None]


def route_popup_html(route: Route, connection: Optional[Connection]) -> str:
    title = (connection.description if connection else "") or "Connection"
    return f"<b>{title}</b><br>Distance: {route.distance_m / 1000:.2f} km"


@dataclass(eq=False)
class RouteLayer:
    route: Route
    base_style: Style
    popup_html: str
    style: Style = field(default_factory=dict)
    popup_open: bool = False
    handlers: List[ClickHandler] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Own copy; restoring must never pick up another layer's colour.
        self.base_style = dict(self.base_style)
        if not self.style:
            self.style = dict(self.base_style)

    @property
    def connection_id(self) -> int:
        return self.route.connection_id

    @property
    def geometry(self) -> LineString:
        return self.route.geometry

    def set_style(self, style: Style) -> None:
        self.style = {**self.style, **style}

    def reset_style(self) -> None:
        self.style = dict(self.base_style)

    @property
    def is_base_style(self) -> bool:
        return self.style == self.base_style

    def bounds(self) -> Bounds:
        return line_bounds(self.geometry)

    def on_click(self, handler: ClickHandler) -> None:
        self.handlers.append(handler)

    def fire_click(self, event: Optional[ClickEvent] = None) -> ClickEvent:
        event = event or ClickEvent()
        for handler in list(self.handlers):
            handler(self, event)
        return event

    def open_popup(self) -> None:
        self.popup_open = True

    def close_popup(self) -> None:
        self.popup_open = False

    def to_folium(self) -> folium.PolyLine:
        return folium.PolyLine(
            locations=[(lat, lng) for (lng, lat, *_rest) in self.geometry.coords],
            color=self.style.get("color"),
            weight=self.style.get("weight"),
            opacity=self.style.get("opacity"),
            popup=folium.Popup(self.popup_html, show=self.popup_open),
        )


class RouteLayerManager:
    """Builds route layers, wires their clicks and indexes them by connection."""

    def __init__(self, surface: MapSurface, tracker: "SelectionTracker") -> None:
        self.surface = surface
        self.tracker = tracker
        self._by_connection: Dict[int, RouteLayer] = {}

    def build(self, routes: Iterable[Route], connections: Iterable[Connection]) -> List[RouteLayer]:
        conn_by_id = {c.id: c for c in connections}
        built: List[RouteLayer] = []
        for route in routes:
            if route is None or route.geometry is None:
                logger.warning(
                    "Skipping route for connection %s: no geometry",
                    getattr(route, "connection_id", None),
                )
                continue
            layer = self._make_layer(route, conn_by_id.get(route.connection_id))
            self.surface.add_layer(layer)
            self._by_connection[route.connection_id] = layer
            built.append(layer)
        logger.info("Rendered %d route layers", len(built))
        return built

    def _make_layer(self, route: Route, connection: Optional[Connection]) -> RouteLayer:
        layer = RouteLayer(
            route=route,
            base_style={
                "color": color_for(route.connection_id),
                "weight": config.ROUTE_WEIGHT,
                "opacity": config.ROUTE_OPACITY,
            },
            popup_html=route_popup_html(route, connection),
        )
        layer.on_click(self._handle_click)
        return layer

    def _handle_click(self, layer: RouteLayer, event: ClickEvent) -> None:
        self.tracker.select(layer)
        # Synthetic clicks carry no origin event and never reach the map anyway.
        if event.original is not None:
            event.stop_propagation()

    def get(self, connection_id: int) -> Optional[RouteLayer]:
        return self._by_connection.get(connection_id)

    def __iter__(self) -> Iterator[RouteLayer]:
        return iter(self._by_connection.values())

    def __len__(self) -> int:
        return len(self._by_connection)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._by_connection
