"""Network topology map: cable route layers, route selection and point location."""

from cablemap.errors import (
    ClipboardWriteFailed,
    ConnectionNotFound,
    DistanceExceedsRoute,
    InvalidDistance,
    MapActionError,
    RouteNotFound,
)
from cablemap.io import build_map_data, load_payload
from cablemap.locator import LocatedPoint
from cablemap.models import Connection, Interface, MapData, Node, NodeStatus, Route
from cablemap.session import MapSession
from cablemap.surface import FoliumSurface, MemorySurface

__version__ = "0.1.0"

__all__ = [
    "ClipboardWriteFailed",
    "Connection",
    "ConnectionNotFound",
    "DistanceExceedsRoute",
    "FoliumSurface",
    "Interface",
    "InvalidDistance",
    "LocatedPoint",
    "MapActionError",
    "MapData",
    "MapSession",
    "MemorySurface",
    "Node",
    "NodeStatus",
    "Route",
    "RouteNotFound",
    "build_map_data",
    "load_payload",
]
