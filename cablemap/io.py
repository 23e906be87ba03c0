"""Load the page payload (nodes, connections, routes) from JSON.

Keys follow the data source's camelCase (``deviceAId``, ``connectionId`` ...).
Node coordinates often arrive as strings; anything that does not parse as a
number leaves the node unlocated.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd
from shapely.geometry import LineString, shape
from shapely.ops import linemerge

from cablemap.geometry import line_length
from cablemap.models import Connection, Interface, MapData, Node, NodeStatus, Route

logger = logging.getLogger(__name__)


# ----------------------------
# Small coercions
# ----------------------------

def _opt_float(v: Any) -> Optional[float]:
    if v is None:
        return None
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        return None
    return float(v)


def _opt_int(v: Any) -> Optional[int]:
    f = _opt_float(pd.to_numeric(v, errors="coerce")) if v is not None else None
    return int(f) if f is not None else None


def _opt_str(v: Any) -> str:
    if v is None or (isinstance(v, float) and np.isnan(v)):
        return ""
    return str(v).strip()


def _as_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "up", "yes"}
    if v is None:
        return False
    try:
        if pd.isna(v):
            return False
    except (TypeError, ValueError):
        pass
    return bool(v)


def _id_list(v: Any) -> Tuple[int, ...]:
    """Waypoint ids from a list or a comma-separated string; junk is dropped."""
    if v is None:
        return ()
    parts = v.split(",") if isinstance(v, str) else list(v)
    out = []
    for p in parts:
        i = _opt_int(p.strip() if isinstance(p, str) else p)
        if i is not None:
            out.append(i)
    return tuple(out)


def parse_line(geom: Any) -> Optional[LineString]:
    """GeoJSON LineString / Feature / bare coordinate list -> LineString."""
    if geom is None or isinstance(geom, float):
        return None
    if isinstance(geom, LineString):
        return geom if len(geom.coords) >= 2 else None
    if isinstance(geom, dict) and geom.get("type") == "Feature":
        geom = geom.get("geometry")
        if geom is None:
            return None
    try:
        sh = shape(geom) if isinstance(geom, dict) else LineString(geom)
    except Exception as e:
        logger.warning("Unreadable route geometry: %s", e)
        return None

    if sh.geom_type == "MultiLineString":
        sh = linemerge(sh)
    if sh.geom_type != "LineString":
        logger.warning("Route geometry is %s, expected LineString", sh.geom_type)
        return None
    if len(sh.coords) < 2:
        return None
    return sh


# ----------------------------
# Records
# ----------------------------

def parse_nodes(records: Iterable[dict]) -> List[Node]:
    records = [r for r in records or [] if isinstance(r, dict)]
    if not records:
        return []
    df = pd.DataFrame(records)
    for col in ("lat", "lng"):
        df[col] = pd.to_numeric(df[col], errors="coerce") if col in df.columns else np.nan

    nodes: List[Node] = []
    for _, r in df.iterrows():
        node_id = _opt_int(r.get("id"))
        if node_id is None:
            logger.warning("Skipping node without id: %r", r.get("name"))
            continue
        ifaces = r.get("interfaces")
        nodes.append(
            Node(
                id=node_id,
                name=_opt_str(r.get("name")) or f"node {node_id}",
                lat=_opt_float(r["lat"]),
                lng=_opt_float(r["lng"]),
                status=NodeStatus.from_flag(_as_bool(r.get("status"))),
                interfaces=tuple(parse_interfaces(ifaces if isinstance(ifaces, list) else [])),
            )
        )
    return nodes


def parse_interfaces(records: Iterable[dict]) -> List[Interface]:
    out: List[Interface] = []
    for r in records:
        if not isinstance(r, dict) or _opt_int(r.get("id")) is None:
            continue
        out.append(
            Interface(
                id=_opt_int(r.get("id")),
                node_id=_opt_int(r.get("nodeId")) or 0,
                if_index=_opt_int(r.get("ifIndex")) or 0,
                if_name=str(r.get("ifName") or ""),
                if_descr=str(r.get("ifDescr") or ""),
                if_type=str(r.get("ifType") or ""),
                oper_status=_opt_int(r.get("ifOperStatus")) or 0,
            )
        )
    return out


def parse_connections(records: Iterable[dict]) -> List[Connection]:
    out: List[Connection] = []
    for r in records or []:
        if not isinstance(r, dict):
            continue
        conn_id = _opt_int(r.get("id"))
        dev_a = _opt_int(r.get("deviceAId"))
        dev_b = _opt_int(r.get("deviceBId"))
        if conn_id is None or dev_a is None or dev_b is None:
            logger.warning("Skipping connection with missing id/endpoints: %r", r)
            continue
        out.append(
            Connection(
                id=conn_id,
                device_a_id=dev_a,
                port_a_id=_opt_int(r.get("portAId")),
                device_b_id=dev_b,
                port_b_id=_opt_int(r.get("portBId")),
                description=str(r.get("description") or ""),
                odp_path=_id_list(r.get("odpPath")),
                custom_route=parse_line(r.get("customRoute")),
            )
        )
    return out


def parse_routes(records: Iterable[Optional[dict]], connections: Iterable[Connection] = ()) -> List[Route]:
    """Routes from the payload, plus custom routes for connections that lack one.

    A supplied route always wins over the connection's custom geometry. A
    missing or non-numeric ``distance`` is measured from the geometry.
    """
    records = list(records or [])
    rows = [r for r in records if isinstance(r, dict)]
    dropped = len(records) - len(rows)
    if dropped:
        logger.warning("Ignoring %d empty route entries", dropped)

    routes: List[Route] = []
    seen = set()
    if rows:
        df = pd.DataFrame(rows)
        if "distance" not in df.columns:
            df["distance"] = np.nan
        df["distance"] = pd.to_numeric(df["distance"], errors="coerce")

        for _, r in df.iterrows():
            conn_id = _opt_int(r.get("connectionId"))
            if conn_id is None:
                logger.warning("Skipping route without connectionId")
                continue
            if conn_id in seen:
                logger.warning("Duplicate route for connection %s ignored", conn_id)
                continue
            geom = parse_line(r.get("geometry"))
            dist = _opt_float(r["distance"])
            if dist is None:
                dist = line_length(geom) if geom is not None else 0.0
            routes.append(Route(connection_id=conn_id, geometry=geom, distance_m=float(dist)))
            seen.add(conn_id)

    for conn in connections:
        if conn.custom_route is not None and conn.id not in seen:
            routes.append(
                Route(connection_id=conn.id, geometry=conn.custom_route, distance_m=line_length(conn.custom_route))
            )
            seen.add(conn.id)
    return routes


# ----------------------------
# Payload
# ----------------------------

def build_map_data(payload: Dict[str, Any]) -> MapData:
    if not isinstance(payload, dict):
        raise ValueError("Payload must be a JSON object")
    missing = [k for k in ("nodes", "connections", "routes") if k not in payload]
    if missing:
        raise ValueError(f"Payload missing required keys: {', '.join(missing)}")

    nodes = parse_nodes(payload["nodes"])
    connections = parse_connections(payload["connections"])
    routes = parse_routes(payload["routes"], connections)

    if payload.get("nodesWithLocation") is not None:
        wanted = {_opt_int(n.get("id")) for n in payload["nodesWithLocation"] if isinstance(n, dict)}
        nodes_with_location = [n for n in nodes if n.id in wanted and n.has_location]
    else:
        nodes_with_location = [n for n in nodes if n.has_location]

    logger.info(
        "Loaded %d nodes (%d located), %d connections, %d routes",
        len(nodes), len(nodes_with_location), len(connections), len(routes),
    )
    return MapData(
        nodes=nodes,
        connections=connections,
        nodes_with_location=nodes_with_location,
        routes=routes,
        api_base_url=str(payload.get("apiBaseUrl") or ""),
    )


def load_payload(path: str) -> MapData:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing payload file: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path} is not valid JSON: {e}") from e
    return build_map_data(data)
