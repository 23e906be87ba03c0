"""
Unit tests for PointLocator.

Tests:
- Distance parsing
- Failure order and messages
- Direction depends on the chosen start endpoint
- Single located-point marker and fly-to
"""

import math

import numpy as np
import pytest

from cablemap import config
from cablemap.errors import ConnectionNotFound, DistanceExceedsRoute, InvalidDistance, RouteNotFound
from cablemap.locator import LocatedPointMarker, parse_distance


class TestParseDistance:
    @pytest.mark.parametrize("value, expected", [(0, 0.0), (111, 111.0), ("111", 111.0), (" 12.5 ", 12.5)])
    def test_accepts_numbers(self, value, expected):
        assert parse_distance(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, math.nan, -1, [1]])
    def test_rejects(self, value):
        with pytest.raises(InvalidDistance):
            parse_distance(value)

    def test_accepts_numpy_scalars(self):
        assert parse_distance(np.int64(50)) == 50.0
        assert parse_distance(np.float32(12.5)) == 12.5

    def test_rejects_numpy_bool(self):
        with pytest.raises(InvalidDistance):
            parse_distance(np.bool_(True))


class TestFailures:
    def test_unknown_connection(self, session):
        with pytest.raises(RouteNotFound) as exc:
            session.locator.locate(999, 1, 10)
        assert exc.value.user_message == "Route not found for this connection."

    def test_route_without_geometry(self, session):
        with pytest.raises(RouteNotFound):
            session.locator.locate(13, 1, 10)

    def test_route_checked_before_distance(self, session):
        with pytest.raises(RouteNotFound):
            session.locator.locate(999, 1, "abc")

    def test_invalid_distance(self, session):
        with pytest.raises(InvalidDistance) as exc:
            session.locator.locate(10, 1, "abc")
        assert exc.value.user_message == "Invalid distance."

    def test_distance_beyond_route(self, session):
        with pytest.raises(DistanceExceedsRoute) as exc:
            session.locator.locate(10, 1, 300)
        assert exc.value.route_length == 222
        assert exc.value.user_message == "Distance is greater than route distance (222.00m)"

    def test_route_without_connection(self, session):
        with pytest.raises(ConnectionNotFound):
            session.locator.locate(14, 1, 10)

    def test_failure_leaves_no_marker(self, session, surface):
        with pytest.raises(InvalidDistance):
            session.locator.locate(10, 1, -5)
        assert session.locator.marker is None
        assert surface.flights == []


class TestDirection:
    def test_from_a_end(self, session):
        point = session.locator.locate(10, 1, 111)
        assert point.lng == pytest.approx(0.0)
        assert point.lat == pytest.approx(0.001, abs=5e-6)
        assert point.lat < 0.001

    def test_from_b_end(self, session):
        point = session.locator.locate(10, 2, 111)
        assert point.lat == pytest.approx(0.001, abs=5e-6)
        assert point.lat > 0.001

    def test_both_ends_mirror(self, session):
        a = session.locator.locate(10, 1, 50)
        b = session.locator.locate(10, 2, 222.39 - 50)
        assert a.lat == pytest.approx(b.lat, abs=1e-6)

    def test_any_other_start_walks_forward(self, session):
        point = session.locator.locate(10, 77, 0)
        assert (point.lat, point.lng) == (0.0, 0.0)

    def test_zero_and_full_length(self, session):
        assert session.locator.locate(10, 1, 0).location == (0.0, 0.0)
        end = session.locator.locate(10, 1, 222)
        assert end.lat == pytest.approx(0.002, abs=1e-5)

    def test_string_distance(self, session):
        assert session.locator.locate(10, 1, "111").distance_m == 111.0


class TestMarker:
    def test_marker_added_and_flown_to(self, session, surface):
        point = session.locator.locate(10, 1, 111)
        marker = session.locator.marker
        assert isinstance(marker, LocatedPointMarker)
        assert surface.has_layer(marker)
        assert marker.popup_open
        assert surface.flights == [(point.location, config.FLY_TO_ZOOM)]

    def test_second_locate_replaces_marker(self, session, surface):
        session.locator.locate(10, 1, 10)
        first = session.locator.marker
        session.locator.locate(11, 2, 20)
        second = session.locator.marker

        assert not surface.has_layer(first)
        assert surface.has_layer(second)
        assert sum(isinstance(layer, LocatedPointMarker) for layer in surface.layers) == 1
        assert len(surface.flights) == 2

    def test_popup_content(self, session):
        point = session.locator.locate(10, 1, 0)
        html = session.locator.marker.popup_html
        assert html.startswith("Point at 0m from POP Banyuwangi<br><br>")
        assert 'class="btn btn-sm btn-primary copy-gmaps-link-btn"' in html
        assert f'data-link="{point.link}"' in html
        assert point.link == "https://www.google.com/maps?q=0,0"

    def test_clear(self, session, surface):
        session.locator.locate(10, 1, 10)
        marker = session.locator.marker
        session.locator.clear()
        assert session.locator.current is None
        assert not surface.has_layer(marker)
