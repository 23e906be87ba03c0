"""Map defaults shared by the renderer, layers and locator.

Everything here can be overridden from ``main.py`` flags; the attribution text
can also come from the ``CABLEMAP_ATTRIBUTION`` environment variable.
"""

from __future__ import annotations

import os
from typing import Dict, Tuple, Union

Style = Dict[str, Union[str, float]]

# ----------------------------
# Viewport
# ----------------------------

# Indonesia
DEFAULT_CENTER: Tuple[float, float] = (-2.5, 118.0)
DEFAULT_ZOOM = 5
LOCATED_NODE_ZOOM = 8
FLY_TO_ZOOM = 15
FIT_PADDING_RATIO = 0.1

# ----------------------------
# Base layers
# ----------------------------

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = "&copy; OpenStreetMap"
OWNER_ATTRIBUTION = os.environ.get("CABLEMAP_ATTRIBUTION", "PT. Lare Osing Ndo.")

# ----------------------------
# Node markers
# ----------------------------

_MARKER_BASE = "https://raw.githubusercontent.com/pointhi/leaflet-color-markers/master/img"
ICON_URL_UP = f"{_MARKER_BASE}/marker-icon-2x-green.png"
ICON_URL_DOWN = f"{_MARKER_BASE}/marker-icon-2x-red.png"
ICON_SHADOW_URL = "https://cdnjs.cloudflare.com/ajax/libs/leaflet/0.7.7/images/marker-shadow.png"
ICON_SIZE = (25, 41)
ICON_ANCHOR = (12, 41)
POPUP_ANCHOR = (1, -34)
SHADOW_SIZE = (41, 41)

# ----------------------------
# Route styles
# ----------------------------

ROUTE_WEIGHT = 3
ROUTE_OPACITY = 0.8
HIGHLIGHT_STYLE: Style = {"color": "#FFFF00", "weight": 5, "opacity": 1}

# ----------------------------
# External link
# ----------------------------

MAPS_LINK_TEMPLATE = "https://www.google.com/maps?q={lat},{lng}"
