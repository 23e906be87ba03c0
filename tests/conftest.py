"""
Shared fixtures for cablemap tests.

The main topology is laid out on the equator so segment lengths are easy to
reason about: 0.001 degrees of latitude is about 111.2 m.
"""

import pytest

from cablemap.io import build_map_data
from cablemap.models import MapData
from cablemap.session import MapSession
from cablemap.surface import FoliumSurface, MemorySurface


# ============== Payload Fixtures ==============

@pytest.fixture
def payload() -> dict:
    """Payload in the shape the data source produces (camelCase, string coords)."""
    return {
        "nodes": [
            {
                "id": 1,
                "name": "POP Banyuwangi",
                "lat": "0",
                "lng": "0",
                "status": True,
                "interfaces": [
                    {"id": 100, "nodeId": 1, "ifIndex": 1, "ifName": "xe-0/0/1", "ifDescr": "uplink"},
                ],
            },
            {"id": 2, "name": "ODC Genteng", "lat": "0.002", "lng": "0", "status": False},
            {"id": 3, "name": "Spare OLT", "lat": None, "lng": "", "status": True},
        ],
        "connections": [
            {
                "id": 10,
                "deviceAId": 1,
                "portAId": 100,
                "deviceBId": 2,
                "portBId": 200,
                "description": "Backbone POP-ODC",
                "odpPath": [5, 6],
            },
            {"id": 11, "deviceAId": 2, "portAId": None, "deviceBId": 1, "portBId": None, "description": ""},
            {
                "id": 12,
                "deviceAId": 1,
                "deviceBId": 3,
                "description": "Custom drop",
                "customRoute": {"type": "LineString", "coordinates": [[0, 0], [0.001, 0]]},
            },
        ],
        "routes": [
            {
                "geometry": {"type": "LineString", "coordinates": [[0, 0], [0, 0.001], [0, 0.002]]},
                "distance": 222,
                "connectionId": 10,
            },
            {
                "geometry": {"type": "LineString", "coordinates": [[0, 0.002], [0.001, 0.002]]},
                "distance": 111.19,
                "connectionId": 11,
            },
            {"geometry": None, "distance": 50, "connectionId": 13},
            {
                "geometry": {"type": "LineString", "coordinates": [[0.01, 0.01], [0.01, 0.011]]},
                "distance": 111.19,
                "connectionId": 14,
            },
            None,
        ],
        "apiBaseUrl": "http://localhost:3000",
    }


@pytest.fixture
def map_data(payload) -> MapData:
    return build_map_data(payload)


# ============== Session Fixtures ==============

@pytest.fixture
def surface() -> MemorySurface:
    return MemorySurface()


@pytest.fixture
def messages() -> list:
    """Collects what the session shows the operator."""
    return []


@pytest.fixture
def session(map_data, surface, messages) -> MapSession:
    return MapSession(map_data, surface, notify=messages.append, owner_attribution="Test Net")


@pytest.fixture
def folium_session(map_data, messages) -> MapSession:
    return MapSession(map_data, FoliumSurface(), notify=messages.append, owner_attribution="Test Net")
