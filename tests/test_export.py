"""
Tests for the HTML export and the command line entry point.
"""

import json

import pytest

import main
from cablemap.client import build_client_config, save_html
from cablemap.io import build_map_data
from cablemap.session import MapSession
from cablemap.surface import FoliumSurface


class TestSaveHtml:
    def test_writes_interactive_page(self, folium_session, tmp_path):
        out = tmp_path / "map.html"
        save_html(folium_session, str(out))
        page = out.read_text(encoding="utf-8")

        assert "window.__cablemapConfig" in page
        assert "#FFFF00" in page
        assert "copy-gmaps-link-btn" in page
        assert "Backbone POP-ODC" in page
        assert "Test Net" in page

    def test_located_point_is_exported(self, folium_session, tmp_path):
        point = folium_session.locate_point(10, 1, 111)
        out = tmp_path / "map.html"
        save_html(folium_session, str(out))
        assert point.link in out.read_text(encoding="utf-8")

    def test_route_with_altitude(self, payload, messages, tmp_path):
        payload["routes"] = [
            {
                "geometry": {"type": "LineString", "coordinates": [[0, 0, 5], [0, 0.001, 6]]},
                "distance": 111.19,
                "connectionId": 10,
            }
        ]
        session = MapSession(build_map_data(payload), FoliumSurface(), notify=messages.append)
        point = session.locate_point(10, 1, 50)
        assert point is not None

        out = tmp_path / "map.html"
        save_html(session, str(out))
        assert point.link in out.read_text(encoding="utf-8")
        assert messages == []

    def test_needs_folium_surface(self, session, tmp_path):
        with pytest.raises(TypeError):
            save_html(session, str(tmp_path / "map.html"))


class TestClientConfig:
    def test_routes_and_state(self, folium_session):
        folium_session.view_route(11)
        m, refs = folium_session.surface.build()
        cfg = build_client_config(m, folium_session, refs)

        assert sorted(cfg["routes"]) == ["10", "11", "12", "14"]
        route = cfg["routes"]["10"]
        assert route["distance"] == 222.0
        assert route["deviceBId"] == 2
        assert route["starts"] == [[1, "POP Banyuwangi"], [2, "ODC Genteng"]]
        assert route["label"] == "Backbone POP-ODC"
        assert cfg["routes"]["14"]["label"] == "Connection 14"
        assert cfg["routes"]["14"]["deviceBId"] is None

    def test_page_refuses_route_without_connection(self, folium_session, tmp_path):
        assert folium_session.locate_point(14, 1, 10) is None
        out = tmp_path / "map.html"
        save_html(folium_session, str(out))
        page = out.read_text(encoding="utf-8")
        assert "if (r.deviceBId === null) { alert('Connection not found.'); return null; }" in page
        assert cfg["selectedConnectionId"] == "11"
        assert cfg["locatedPointRef"] is None
        assert cfg["attributions"] == ["Test Net"]
        assert cfg["mapName"] == m.get_name()
        json.dumps(cfg)


class TestCli:
    def test_main_writes_map_and_link(self, payload, tmp_path, capsys):
        data = tmp_path / "topology.json"
        data.write_text(json.dumps(payload), encoding="utf-8")
        out = tmp_path / "map.html"

        rc = main.main(["--data", str(data), "--out", str(out), "--view", "10", "--locate", "10", "--distance", "111"])

        printed = capsys.readouterr().out
        assert rc == 0
        assert out.exists()
        assert "Link: https://www.google.com/maps?q=" in printed
        assert f"Wrote: {out}" in printed
        assert "Route layers: 4" in printed

    def test_main_reports_locate_failure(self, payload, tmp_path, capsys):
        data = tmp_path / "topology.json"
        data.write_text(json.dumps(payload), encoding="utf-8")

        main.main(["--data", str(data), "--out", str(tmp_path / "m.html"), "--locate", "10", "--distance", "300"])
        assert "Distance is greater than route distance (222.00m)" in capsys.readouterr().out

    def test_main_missing_payload(self, tmp_path):
        with pytest.raises(SystemExit):
            main.main(["--data", str(tmp_path / "missing.json"), "--out", str(tmp_path / "m.html")])
