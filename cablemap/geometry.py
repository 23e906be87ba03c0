"""Geometry helpers for cable routes.

Route coordinates are GeoJSON order ``(lng, lat)``. Lengths are great-circle
metres on a sphere of radius 6371008.8 m, which is what the browser-side
script uses too, so a point located in Python lands on the same spot as one
located in the exported map.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
from pyproj import Geod
from shapely.geometry import LineString

from cablemap import config

EARTH_RADIUS_M = 6371008.8

_SPHERE = Geod(a=EARTH_RADIUS_M, b=EARTH_RADIUS_M)

LngLat = Tuple[float, float]
Bounds = List[List[float]]  # [[south, west], [north, east]]


# ----------------------------
# Colour
# ----------------------------

def _to_int32(v: int) -> int:
    v &= 0xFFFFFFFF
    return v - 0x100000000 if v & 0x80000000 else v


def color_for(ident: object) -> str:
    """Deterministic ``#rrggbb`` colour for an identifier.

    Rolling 32-bit string hash over UTF-16 code units, folded into three byte
    channels. Matches the colouring the browser script would produce for the
    same id.
    """
    s = str(ident)
    units = s.encode("utf-16-le")
    h = 0
    for i in range(0, len(units), 2):
        code = units[i] | (units[i + 1] << 8)
        h = code + (_to_int32(h << 5) - h)
    h = _to_int32(h)
    return "#" + "".join(f"{(h >> (i * 8)) & 0xFF:02x}" for i in range(3))


# ----------------------------
# Lengths / interpolation
# ----------------------------

def _coords(line: LineString) -> np.ndarray:
    return np.asarray(line.coords, dtype=np.float64)[:, :2]


def segment_lengths(line: LineString) -> np.ndarray:
    """Great-circle length in metres of each segment of ``line``."""
    xy = _coords(line)
    if len(xy) < 2:
        return np.zeros(0, dtype=np.float64)
    return np.asarray(_SPHERE.line_lengths(xy[:, 0], xy[:, 1]), dtype=np.float64)


def line_length(line: LineString) -> float:
    return float(segment_lengths(line).sum())


def reverse(line: LineString) -> LineString:
    """Same path, walked from the other end."""
    return LineString(list(line.coords)[::-1])


def point_at_distance(line: LineString, distance_m: float) -> LngLat:
    """Point ``distance_m`` metres along ``line`` from its first coordinate.

    Walks the segments accumulating great-circle length and interpolates
    linearly inside the segment where the running total reaches the target.
    Callers check ``0 <= distance_m <= length``; anything past the end clamps
    to the last coordinate.
    """
    xy = _coords(line)
    if distance_m <= 0 or len(xy) < 2:
        return float(xy[0, 0]), float(xy[0, 1])

    seg = segment_lengths(line)
    cum = np.cumsum(seg)
    i = int(np.searchsorted(cum, distance_m, side="left"))
    if i >= len(seg):
        return float(xy[-1, 0]), float(xy[-1, 1])

    seg_len = float(seg[i])
    t = (distance_m - (float(cum[i]) - seg_len)) / seg_len if seg_len > 0 else 1.0
    if t >= 1.0:
        return float(xy[i + 1, 0]), float(xy[i + 1, 1])

    a, b = xy[i], xy[i + 1]
    p = a + (b - a) * t
    return float(p[0]), float(p[1])


# ----------------------------
# Bounds / links
# ----------------------------

def line_bounds(line: LineString) -> Bounds:
    min_lng, min_lat, max_lng, max_lat = line.bounds
    return [[min_lat, min_lng], [max_lat, max_lng]]


def pad_bounds(bounds: Sequence[Sequence[float]], ratio: float) -> Bounds:
    """Grow bounds by ``ratio`` of their span on every side (Leaflet ``pad``)."""
    (s, w), (n, e) = bounds
    dlat = abs(n - s) * ratio
    dlng = abs(e - w) * ratio
    return [[s - dlat, w - dlng], [n + dlat, e + dlng]]


def js_number(v: float) -> str:
    """Number as the browser prints it: shortest repr, no trailing ".0"."""
    s = repr(float(v))
    return s[:-2] if s.endswith(".0") else s


def maps_link(lat: float, lng: float) -> str:
    return config.MAPS_LINK_TEMPLATE.format(lat=js_number(lat), lng=js_number(lng))
