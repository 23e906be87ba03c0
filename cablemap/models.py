"""Read-only topology records supplied by the data source."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from shapely.geometry import LineString

from cablemap import config


class NodeStatus(Enum):
    UP = "up"
    DOWN = "down"

    @classmethod
    def from_flag(cls, up: bool) -> "NodeStatus":
        return cls.UP if up else cls.DOWN

    @property
    def label(self) -> str:
        return "Up" if self is NodeStatus.UP else "Down"

    @property
    def icon_url(self) -> str:
        return config.ICON_URL_UP if self is NodeStatus.UP else config.ICON_URL_DOWN


@dataclass(frozen=True)
class Interface:
    id: int
    node_id: int
    if_index: int = 0
    if_name: str = ""
    if_descr: str = ""
    if_type: str = ""
    oper_status: int = 0

    @property
    def label(self) -> str:
        return f"{self.if_name} ({self.if_descr})"


@dataclass(frozen=True)
class Node:
    id: int
    name: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    status: NodeStatus = NodeStatus.DOWN
    interfaces: Tuple[Interface, ...] = ()

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def location(self) -> Tuple[float, float]:
        """(lat, lng); only meaningful when ``has_location``."""
        return float(self.lat), float(self.lng)


@dataclass(frozen=True)
class Connection:
    id: int
    device_a_id: int
    port_a_id: Optional[int]
    device_b_id: int
    port_b_id: Optional[int]
    description: str = ""
    odp_path: Tuple[int, ...] = ()
    custom_route: Optional[LineString] = None


@dataclass(frozen=True)
class Route:
    """Pre-computed cable path for one connection.

    ``geometry`` may be ``None`` when the source had nothing usable; such
    routes are kept so lookups still find them but they are never drawn.
    """

    connection_id: int
    geometry: Optional[LineString]
    distance_m: float


@dataclass
class MapData:
    nodes: List[Node] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    nodes_with_location: List[Node] = field(default_factory=list)
    routes: List[Route] = field(default_factory=list)
    api_base_url: str = ""
