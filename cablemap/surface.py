"""Map surfaces the renderer draws onto.

``MemorySurface`` only records layers and viewport changes; it is what the
tests drive. ``FoliumSurface`` records the same state and turns it into a
folium map when the page is exported.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import folium

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]


@runtime_checkable
class MapLayer(Protocol):
    def to_folium(self): ...


@runtime_checkable
class MapSurface(Protocol):
    """Minimal capability set the core needs from a map."""

    def add_layer(self, layer: MapLayer) -> None: ...
    def remove_layer(self, layer: MapLayer) -> None: ...
    def bring_to_front(self, layer: MapLayer) -> None: ...
    def set_view(self, center: LatLng, zoom: int) -> None: ...
    def fit_bounds(self, bounds: Sequence[Sequence[float]]) -> None: ...
    def fly_to(self, center: LatLng, zoom: int) -> None: ...


class MemorySurface:
    """Layer registry + viewport, in draw order (last is on top)."""

    def __init__(self) -> None:
        self.layers: List[MapLayer] = []
        self.center: Optional[LatLng] = None
        self.zoom: Optional[int] = None
        self.bounds: Optional[List[List[float]]] = None
        self.flights: List[Tuple[LatLng, int]] = []

    def add_layer(self, layer: MapLayer) -> None:
        if layer not in self.layers:
            self.layers.append(layer)

    def remove_layer(self, layer: MapLayer) -> None:
        if layer in self.layers:
            self.layers.remove(layer)

    def bring_to_front(self, layer: MapLayer) -> None:
        if layer in self.layers:
            self.layers.remove(layer)
            self.layers.append(layer)

    def set_view(self, center: LatLng, zoom: int) -> None:
        self.center = (float(center[0]), float(center[1]))
        self.zoom = int(zoom)
        self.bounds = None

    def fit_bounds(self, bounds: Sequence[Sequence[float]]) -> None:
        self.bounds = [[float(v) for v in corner] for corner in bounds]

    def fly_to(self, center: LatLng, zoom: int) -> None:
        self.set_view(center, zoom)
        self.flights.append((self.center, self.zoom))

    def has_layer(self, layer: MapLayer) -> bool:
        return layer in self.layers


class FoliumSurface(MemorySurface):
    """Surface that can be rendered to a standalone Leaflet page.

    Layers are materialised in draw order when ``build`` is called, so style
    and z-order changes made before export all show up in the HTML.
    """

    def __init__(self, control_scale: bool = True) -> None:
        super().__init__()
        self.control_scale = control_scale

    def build(self) -> Tuple[folium.Map, Dict[int, str]]:
        """Return the folium map and ``id(layer) -> JS variable name``."""
        center = self.center or (0.0, 0.0)
        m = folium.Map(
            location=list(center),
            zoom_start=self.zoom if self.zoom is not None else 2,
            control_scale=self.control_scale,
            tiles=None,
        )

        refs: Dict[int, str] = {}
        for layer in self.layers:
            element = layer.to_folium()
            if element is None:
                continue
            element.add_to(m)
            refs[id(layer)] = element.get_name()

        if self.bounds is not None:
            m.fit_bounds(self.bounds)

        logger.debug("Built folium map with %d layers", len(refs))
        return m, refs
