"""Standalone HTML export with the browser-side interaction script.

The script repeats the session's rules against the rendered Leaflet objects:
route click highlights (restoring the previous route's own colour), a click
on empty map clears, "view" fits and opens a route, and "find point" walks the
route from the chosen end and drops a marker with a copyable maps link.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

import folium
from folium import Element

from cablemap import config
from cablemap.surface import FoliumSurface

logger = logging.getLogger(__name__)


def _script_json(obj: Any) -> str:
    # Keep descriptions from closing the surrounding <script> tag.
    return json.dumps(obj).replace("</", "<\\/")


def build_client_config(m: folium.Map, session, refs: Dict[int, str]) -> Dict[str, Any]:
    routes: Dict[str, dict] = {}
    for layer in session.layers:
        ref = refs.get(id(layer))
        if ref is None:
            continue
        cid = layer.connection_id
        conn = session.connections.get(cid)
        routes[str(cid)] = {
            "ref": ref,
            "baseStyle": layer.base_style,
            "coords": [[float(x), float(y)] for (x, y, *_rest) in layer.geometry.coords],
            "distance": float(layer.route.distance_m),
            "label": (conn.description if conn else "") or f"Connection {cid}",
            "deviceBId": conn.device_b_id if conn else None,
            "starts": [[nid, name] for nid, name in session.start_options(cid)],
        }

    marker = session.locator.marker
    selected = session.selected
    return {
        "mapName": m.get_name(),
        "routes": routes,
        "nodeNames": {str(n.id): n.name for n in session.data.nodes},
        "highlightStyle": config.HIGHLIGHT_STYLE,
        "fitPadding": config.FIT_PADDING_RATIO,
        "flyToZoom": config.FLY_TO_ZOOM,
        "linkTemplate": config.MAPS_LINK_TEMPLATE,
        "attributions": session.renderer.attributions,
        "selectedConnectionId": str(selected.connection_id) if selected is not None else None,
        "locatedPointRef": refs.get(id(marker)) if marker is not None else None,
    }


def add_interaction_js(m: folium.Map, client_config: Dict[str, Any]) -> None:
    m.get_root().html.add_child(
        Element(f"<script>window.__cablemapConfig = {_script_json(client_config)};</script>")
    )
    m.get_root().html.add_child(Element(_INTERACTION_JS))


def save_html(session, out_path: str) -> folium.Map:
    """Render ``session`` (which must sit on a ``FoliumSurface``) to ``out_path``."""
    if not isinstance(session.surface, FoliumSurface):
        raise TypeError("HTML export needs a FoliumSurface-backed session")
    m, refs = session.surface.build()
    add_interaction_js(m, build_client_config(m, session, refs))
    m.save(out_path)
    logger.info("Saved map to %s", out_path)
    return m


_INTERACTION_JS = r"""
<script>
(function() {
  const EARTH_R = 6371008.8;

  function getByName(name) {
    try { return window[name]; } catch (e) { return null; }
  }

  function escapeHtml(s) {
    return String(s).replace(/[&<>"']/g, (c) => ({'&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#x27;'}[c]));
  }

  // Great-circle metres, same sphere as the Python side.
  function haversineM(lat1, lon1, lat2, lon2) {
    const toRad = (d) => d * Math.PI / 180.0;
    const dphi = toRad(lat2 - lat1);
    const dl = toRad(lon2 - lon1);
    const a = Math.sin(dphi/2)**2 + Math.cos(toRad(lat1))*Math.cos(toRad(lat2))*Math.sin(dl/2)**2;
    return 2 * EARTH_R * Math.asin(Math.sqrt(a));
  }

  // coords are [lng, lat]
  function pointAtDistance(coords, distM) {
    if (distM <= 0 || coords.length < 2) return coords[0];
    let travelled = 0;
    for (let i = 1; i < coords.length; i++) {
      const a = coords[i - 1];
      const b = coords[i];
      const seg = haversineM(a[1], a[0], b[1], b[0]);
      if (travelled + seg >= distM) {
        if (seg <= 0) return b;
        const t = (distM - travelled) / seg;
        if (t >= 1) return b;
        return [a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t];
      }
      travelled += seg;
    }
    return coords[coords.length - 1];
  }

  function installCopyButtons() {
    document.addEventListener('click', function(ev) {
      const btn = (ev.target && ev.target.closest) ? ev.target.closest('.copy-gmaps-link-btn') : null;
      if (!btn) return;
      const link = btn.getAttribute('data-link');
      const fail = (err) => {
        console.error('Failed to copy text: ', err);
        alert('Failed to copy link.');
      };
      try {
        navigator.clipboard.writeText(link)
          .then(() => alert('Google Maps link copied to clipboard!'))
          .catch(fail);
      } catch (err) {
        fail(err);
      }
    });
  }

  function install(cfg) {
    const map = getByName(cfg.mapName);
    if (!map) return;

    if (map.attributionControl) {
      for (const a of (cfg.attributions || [])) map.attributionControl.addAttribution(a);
    }

    const entries = {};
    let selected = null;
    let findPointMarker = cfg.locatedPointRef ? getByName(cfg.locatedPointRef) : null;

    function select(entry) {
      if (selected && selected !== entry) selected.layer.setStyle(selected.baseStyle);
      entry.layer.setStyle(cfg.highlightStyle);
      entry.layer.bringToFront();
      selected = entry;
    }

    function clearSelection() {
      if (!selected) return;
      selected.layer.setStyle(selected.baseStyle);
      selected = null;
    }

    for (const cid of Object.keys(cfg.routes)) {
      const r = cfg.routes[cid];
      const layer = getByName(r.ref);
      if (!layer) continue;
      const entry = { id: cid, layer: layer, baseStyle: r.baseStyle };
      entries[cid] = entry;
      layer.on('click', function(e) {
        select(entry);
        // "view" fires a synthetic click with no originalEvent
        if (e && e.originalEvent) L.DomEvent.stopPropagation(e);
      });
      if (cfg.selectedConnectionId === cid) selected = entry;
    }
    map.on('click', clearSelection);

    function viewRoute(cid) {
      const entry = entries[String(cid)];
      if (!entry) return false;
      map.fitBounds(entry.layer.getBounds().pad(cfg.fitPadding));
      entry.layer.fire('click');
      entry.layer.openPopup();
      return true;
    }

    function locatePoint(cid, startId, distance) {
      const r = cfg.routes[String(cid)];
      if (!r) { alert('Route not found for this connection.'); return null; }
      const d = parseFloat(distance);
      if (isNaN(d) || d < 0) { alert('Invalid distance.'); return null; }
      if (d > r.distance) {
        alert(`Distance is greater than route distance (${r.distance.toFixed(2)}m)`);
        return null;
      }
      if (r.deviceBId === null) { alert('Connection not found.'); return null; }
      let coords = r.coords;
      if (Number(startId) === r.deviceBId) coords = coords.slice().reverse();
      const p = pointAtDistance(coords, d);
      const lat = p[1];
      const lng = p[0];
      const link = cfg.linkTemplate.replace('{lat}', lat).replace('{lng}', lng);
      const startName = cfg.nodeNames[String(startId)] || String(startId);

      if (findPointMarker) map.removeLayer(findPointMarker);
      findPointMarker = L.marker([lat, lng])
        .addTo(map)
        .bindPopup(
          `Point at ${d}m from ${escapeHtml(startName)}<br><br>` +
          `<button class="btn btn-sm btn-primary copy-gmaps-link-btn" data-link="${escapeHtml(link)}">Copy Google Maps Link</button>`
        )
        .openPopup();
      map.flyTo([lat, lng], cfg.flyToZoom);
      return { lat: lat, lng: lng, link: link };
    }

    const FindPointControl = L.Control.extend({
      options: { position: 'topright' },
      onAdd: function() {
        const wrap = L.DomUtil.create('div', 'leaflet-bar');
        wrap.style.background = 'rgba(255,255,255,0.95)';
        wrap.style.padding = '8px';
        wrap.style.width = '240px';
        wrap.style.fontFamily = 'system-ui, -apple-system, Segoe UI, Roboto, sans-serif';
        wrap.style.fontSize = '12px';
        wrap.innerHTML = `
          <div style="font-weight:600; margin-bottom:4px;">Find point on route</div>
          <select id="__cmRoute" style="width:100%; margin-bottom:4px;"></select>
          <select id="__cmStart" style="width:100%; margin-bottom:4px;"></select>
          <input id="__cmDistance" type="number" min="0" step="any" placeholder="Distance (m)" style="width:100%; margin-bottom:4px;" />
          <div style="display:flex; gap:4px;">
            <button id="__cmView" type="button" style="flex:1;">View</button>
            <button id="__cmFind" type="button" style="flex:1;">Find</button>
          </div>
        `;
        L.DomEvent.disableClickPropagation(wrap);
        L.DomEvent.disableScrollPropagation(wrap);
        return wrap;
      }
    });
    map.addControl(new FindPointControl());

    const routeSel = document.getElementById('__cmRoute');
    const startSel = document.getElementById('__cmStart');
    const distInput = document.getElementById('__cmDistance');

    function populateStarts() {
      startSel.innerHTML = '';
      const r = cfg.routes[routeSel.value];
      for (const s of (r ? r.starts : [])) {
        const opt = document.createElement('option');
        opt.value = String(s[0]);
        opt.textContent = s[1];
        startSel.appendChild(opt);
      }
    }

    for (const cid of Object.keys(cfg.routes)) {
      const opt = document.createElement('option');
      opt.value = cid;
      opt.textContent = cfg.routes[cid].label;
      routeSel.appendChild(opt);
    }
    routeSel.addEventListener('change', populateStarts);
    populateStarts();

    document.getElementById('__cmView').addEventListener('click', () => viewRoute(routeSel.value));
    document.getElementById('__cmFind').addEventListener('click', function() {
      if (locatePoint(routeSel.value, startSel.value, distInput.value)) distInput.value = '';
    });

    window.cablemap = { viewRoute: viewRoute, locatePoint: locatePoint, clearSelection: clearSelection };
  }

  document.addEventListener('DOMContentLoaded', function() {
    try {
      installCopyButtons();
      if (window.__cablemapConfig) install(window.__cablemapConfig);
    } catch (e) {
      console.error(e);
    }
  });
})();
</script>
"""
