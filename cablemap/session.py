"""One map page view: the objects the UI actions operate on."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from cablemap.errors import ClipboardWriteFailed, MapActionError
from cablemap.layers import RouteLayer
from cablemap.locator import LocatedPoint, PointLocator
from cablemap.models import Connection, MapData, Node
from cablemap.renderer import MapRenderer
from cablemap.selection import SelectionTracker
from cablemap.surface import MapSurface

logger = logging.getLogger(__name__)

Notify = Callable[[str], None]

COPY_OK_MESSAGE = "Google Maps link copied to clipboard!"


def _log_notify(message: str) -> None:
    logger.info("%s", message)


class MapSession:
    """Owns map surface, selection, layer index and located point.

    Actions never raise ``MapActionError``; failures are handed to ``notify``
    as the message the operator should see.
    """

    def __init__(
        self,
        data: MapData,
        surface: MapSurface,
        notify: Optional[Notify] = None,
        owner_attribution: Optional[str] = None,
    ) -> None:
        self.data = data
        self.surface = surface
        self.notify: Notify = notify or _log_notify
        self.selection = SelectionTracker(surface)
        self.renderer = MapRenderer(surface, self.selection, owner_attribution=owner_attribution)
        self.renderer.render(data)
        self.locator = PointLocator(
            surface,
            self.renderer,
            routes=data.routes,
            connections=data.connections,
            nodes=data.nodes,
        )
        self.nodes: Dict[int, Node] = {n.id: n for n in data.nodes}
        self.connections: Dict[int, Connection] = {c.id: c for c in data.connections}

    @property
    def layers(self):
        return self.renderer.routes

    @property
    def selected(self) -> Optional[RouteLayer]:
        return self.selection.selected

    @property
    def located_point(self) -> Optional[LocatedPoint]:
        return self.locator.current

    # ----------------------------
    # Actions
    # ----------------------------

    def view_route(self, connection_id: int) -> bool:
        """Fit to the route, highlight it and open its popup."""
        layer = self.renderer.fit_to_route(connection_id)
        if layer is None:
            logger.debug("No route layer for connection %s", connection_id)
            return False
        layer.fire_click()
        layer.open_popup()
        return True

    def click_route(self, connection_id: int) -> bool:
        return self.renderer.click_route(connection_id)

    def on_map_background_click(self) -> None:
        self.renderer.click_map()

    def locate_point(self, connection_id: int, start_endpoint_id: int, distance_m: object) -> Optional[LocatedPoint]:
        try:
            return self.locator.locate(connection_id, start_endpoint_id, distance_m)
        except MapActionError as e:
            logger.warning("Locate on connection %s failed: %s", connection_id, e)
            self.notify(e.user_message)
            return None

    def copy_link(self, clipboard: Callable[[str], None]) -> bool:
        """Single best-effort write of the located point's link."""
        point = self.located_point
        if point is None:
            return False
        try:
            clipboard(point.link)
        except Exception as e:
            logger.error("Failed to copy text: %s", e)
            self.notify(ClipboardWriteFailed().user_message)
            return False
        self.notify(COPY_OK_MESSAGE)
        return True

    def start_options(self, connection_id: int) -> List[Tuple[int, str]]:
        """Endpoints a locate can start from: A device, then B device."""
        conn = self.connections.get(connection_id)
        if conn is None:
            return []
        out: List[Tuple[int, str]] = []
        for node_id in (conn.device_a_id, conn.device_b_id):
            node = self.nodes.get(node_id)
            if node is not None:
                out.append((node.id, node.name))
        return out
