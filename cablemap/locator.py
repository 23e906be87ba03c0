"""Find the spot on a cable run at a measured distance from one end."""

from __future__ import annotations

import html
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import folium
import numpy as np

from cablemap import config
from cablemap.errors import ConnectionNotFound, DistanceExceedsRoute, InvalidDistance, RouteNotFound
from cablemap.geometry import js_number, maps_link, point_at_distance, reverse
from cablemap.models import Connection, Node, Route
from cablemap.renderer import MapRenderer
from cablemap.surface import MapSurface

logger = logging.getLogger(__name__)


def parse_distance(value: object) -> float:
    """Accept numbers and numeric strings (form input); reject everything else."""
    if isinstance(value, (bool, np.bool_)):
        raise InvalidDistance(value)
    if isinstance(value, numbers.Real):
        d = float(value)
    elif isinstance(value, str):
        try:
            d = float(value.strip())
        except ValueError:
            raise InvalidDistance(value) from None
    else:
        raise InvalidDistance(value)
    if math.isnan(d) or d < 0:
        raise InvalidDistance(value)
    return d


@dataclass(frozen=True)
class LocatedPoint:
    lat: float
    lng: float
    distance_m: float
    connection_id: int
    start_endpoint_id: int
    start_name: str = ""

    @property
    def link(self) -> str:
        return maps_link(self.lat, self.lng)

    @property
    def location(self) -> Tuple[float, float]:
        return self.lat, self.lng


@dataclass(eq=False)
class LocatedPointMarker:
    point: LocatedPoint
    popup_open: bool = True

    @property
    def popup_html(self) -> str:
        p = self.point
        return (
            f"Point at {js_number(p.distance_m)}m from {html.escape(p.start_name or str(p.start_endpoint_id))}"
            "<br><br>"
            f'<button class="btn btn-sm btn-primary copy-gmaps-link-btn" data-link="{html.escape(p.link)}">'
            "Copy Google Maps Link</button>"
        )

    def to_folium(self) -> folium.Marker:
        return folium.Marker(
            location=[self.point.lat, self.point.lng],
            popup=folium.Popup(self.popup_html, show=self.popup_open),
        )


class PointLocator:
    """Owns the single located-point marker on the map."""

    def __init__(
        self,
        surface: MapSurface,
        renderer: MapRenderer,
        routes: Iterable[Route],
        connections: Iterable[Connection],
        nodes: Iterable[Node] = (),
    ) -> None:
        self.surface = surface
        self.renderer = renderer
        self.routes: Dict[int, Route] = {r.connection_id: r for r in routes}
        self.connections: Dict[int, Connection] = {c.id: c for c in connections}
        self.nodes: Dict[int, Node] = {n.id: n for n in nodes}
        self.current: Optional[LocatedPoint] = None
        self.marker: Optional[LocatedPointMarker] = None

    def locate(self, connection_id: int, start_endpoint_id: int, distance_m: object) -> LocatedPoint:
        route = self.routes.get(connection_id)
        if route is None or route.geometry is None:
            raise RouteNotFound(connection_id)

        d = parse_distance(distance_m)
        if d > route.distance_m:
            raise DistanceExceedsRoute(route.distance_m)

        conn = self.connections.get(connection_id)
        if conn is None:
            raise ConnectionNotFound(connection_id)

        line = route.geometry
        if start_endpoint_id == conn.device_b_id:
            line = reverse(line)

        lng, lat = point_at_distance(line, d)
        start = self.nodes.get(start_endpoint_id)
        point = LocatedPoint(
            lat=lat,
            lng=lng,
            distance_m=d,
            connection_id=connection_id,
            start_endpoint_id=start_endpoint_id,
            start_name=start.name if start else "",
        )

        self.clear()
        self.marker = LocatedPointMarker(point)
        self.surface.add_layer(self.marker)
        self.current = point

        self.renderer.fly_to(point.location, config.FLY_TO_ZOOM)
        logger.info(
            "Located point %.1fm along connection %s from node %s: %s",
            d, connection_id, start_endpoint_id, point.link,
        )
        return point

    def clear(self) -> None:
        if self.marker is not None:
            self.surface.remove_layer(self.marker)
        self.marker = None
        self.current = None
