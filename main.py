#!/usr/bin/env python3
"""main.py

Build a standalone HTML map of a network topology:
- Nodes (markers, green = up, red = down) from the payload's located nodes
- Connections drawn along their pre-computed cable routes, coloured per connection

In the page:
- Click a route to highlight it; click empty map to clear.
- "Find point on route" drops a marker at a distance from either end of a route
  and offers a copyable Google Maps link.

Optionally apply the same actions before saving:
- --view CONN       fit to a route and open it highlighted
- --locate CONN --start NODE --distance M
                    place the located-point marker (and fly to it)

Dependencies:
  pip install folium shapely pyproj numpy pandas

Usage example:
  python3 main.py --data topology.json --out map.html --locate 12 --start 3 --distance 450
"""

from __future__ import annotations

import argparse
import logging

from cablemap import config
from cablemap.client import save_html
from cablemap.io import load_payload
from cablemap.session import MapSession
from cablemap.surface import FoliumSurface


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Render a network topology with cable routes to HTML.")
    ap.add_argument("--data", default="topology.json", help="Payload JSON with nodes, connections, routes")
    ap.add_argument("--out", default="map.html", help="Output HTML filename")
    ap.add_argument("--view", type=int, default=None, help="Connection id to fit, highlight and open")
    ap.add_argument("--locate", type=int, default=None, help="Connection id to locate a point on")
    ap.add_argument("--start", type=int, default=None, help="Node id the distance is measured from (A end by default)")
    ap.add_argument("--distance", default=None, help="Distance in metres along the route")
    ap.add_argument(
        "--attribution",
        default=config.OWNER_ATTRIBUTION,
        help="Owner attribution shown on the map (empty to omit)",
    )
    ap.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return ap


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        data = load_payload(args.data)
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(str(e))

    messages = []
    session = MapSession(data, FoliumSurface(), notify=messages.append, owner_attribution=args.attribution)

    if args.view is not None and not session.view_route(args.view):
        messages.append(f"No route to view for connection {args.view}.")

    if args.locate is not None:
        if args.distance is None:
            raise SystemExit("--locate needs --distance")
        start = args.start
        if start is None:
            conn = session.connections.get(args.locate)
            start = conn.device_a_id if conn else -1
        point = session.locate_point(args.locate, start, args.distance)
        if point is not None:
            print(f"Point: {point.lat:.6f}, {point.lng:.6f}")
            print(f"Link: {point.link}")

    for msg in messages:
        print(msg)

    save_html(session, args.out)
    print(f"Wrote: {args.out}")
    print(
        f"Nodes: {len(data.nodes):,} (located {len(data.nodes_with_location):,}) | "
        f"Connections: {len(data.connections):,} | Route layers: {len(session.layers):,}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
