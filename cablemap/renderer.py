"""Map surface lifecycle: base layers, node markers, route layers, viewport."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import folium

from cablemap import config
from cablemap.geometry import pad_bounds
from cablemap.layers import ClickEvent, RouteLayer, RouteLayerManager
from cablemap.models import MapData, Node
from cablemap.selection import SelectionTracker
from cablemap.surface import LatLng, MapSurface

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class BaseLayer:
    """Tile layer. With no ``url`` it only contributes attribution text."""

    attribution: str
    url: Optional[str] = None
    name: Optional[str] = None

    def to_folium(self) -> Optional[folium.TileLayer]:
        if not self.url:
            return None
        return folium.TileLayer(tiles=self.url, attr=self.attribution, name=self.name or "Base map")


@dataclass(eq=False)
class NodeMarker:
    node: Node

    @property
    def location(self) -> LatLng:
        return self.node.location

    @property
    def icon_url(self) -> str:
        return self.node.status.icon_url

    @property
    def popup_html(self) -> str:
        return f"<b>{self.node.name}</b><br>Status: {self.node.status.label}"

    def to_folium(self) -> folium.Marker:
        icon = folium.CustomIcon(
            icon_image=self.icon_url,
            icon_size=config.ICON_SIZE,
            icon_anchor=config.ICON_ANCHOR,
            shadow_image=config.ICON_SHADOW_URL,
            shadow_size=config.SHADOW_SIZE,
            popup_anchor=config.POPUP_ANCHOR,
        )
        return folium.Marker(
            location=list(self.location),
            icon=icon,
            popup=folium.Popup(self.popup_html),
            tooltip=self.node.name,
        )


class MapRenderer:
    def __init__(
        self,
        surface: MapSurface,
        tracker: SelectionTracker,
        owner_attribution: Optional[str] = None,
    ) -> None:
        self.surface = surface
        self.tracker = tracker
        self.routes = RouteLayerManager(surface, tracker)
        self.base_layers: List[BaseLayer] = [
            BaseLayer(attribution=config.TILE_ATTRIBUTION, url=config.TILE_URL, name="OpenStreetMap"),
        ]
        owner = config.OWNER_ATTRIBUTION if owner_attribution is None else owner_attribution
        if owner:
            self.base_layers.append(BaseLayer(attribution=owner))
        self.markers: List[NodeMarker] = []
        self._map_click_handlers: List[Callable[[ClickEvent], None]] = [lambda _e: self.tracker.clear()]

    def render(self, data: MapData) -> None:
        self.surface.set_view(config.DEFAULT_CENTER, config.DEFAULT_ZOOM)
        located = [n for n in data.nodes_with_location if n.has_location]
        if located:
            self.surface.set_view(located[0].location, config.LOCATED_NODE_ZOOM)

        for base in self.base_layers:
            self.surface.add_layer(base)

        for node in located:
            marker = NodeMarker(node)
            self.surface.add_layer(marker)
            self.markers.append(marker)

        self.routes.build(data.routes, data.connections)
        logger.info("Rendered %d node markers", len(self.markers))

    # ----------------------------
    # Clicks
    # ----------------------------

    def on_map_click(self, handler: Callable[[ClickEvent], None]) -> None:
        self._map_click_handlers.append(handler)

    def click_map(self, event: Optional[ClickEvent] = None) -> None:
        event = event or ClickEvent(original="map")
        for handler in list(self._map_click_handlers):
            handler(event)

    def click_route(self, connection_id: int, original: object = "click") -> bool:
        """User click on a route; bubbles to the map unless a handler stops it."""
        layer = self.routes.get(connection_id)
        if layer is None:
            return False
        event = layer.fire_click(ClickEvent(original=original))
        if not event.propagation_stopped:
            self.click_map(event)
        return True

    # ----------------------------
    # Viewport
    # ----------------------------

    def fit_to_route(self, connection_id: int) -> Optional[RouteLayer]:
        layer = self.routes.get(connection_id)
        if layer is None:
            return None
        self.surface.fit_bounds(pad_bounds(layer.bounds(), config.FIT_PADDING_RATIO))
        return layer

    def fly_to(self, coordinate: Sequence[float], zoom: int) -> None:
        self.surface.fly_to((float(coordinate[0]), float(coordinate[1])), zoom)

    @property
    def attributions(self) -> List[str]:
        return [b.attribution for b in self.base_layers if not b.url]
