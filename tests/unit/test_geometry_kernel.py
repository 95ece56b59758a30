"""
Unit tests for the geometry kernel: containment, distance and area.

shapely and pyproj serve as independent references.
"""

import math

import pytest
from pyproj import Geod
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon

from biodensity.core.geometry import (
    distance_point_to_segment,
    haversine_km,
    nearest_point_on_polyline,
    point_in_polygon,
    polygon_area,
    ring_area_km2,
)
from biodensity.core.models import Polygon, Polyline
from biodensity.utils.constants import EARTH_RADIUS_KM
from biodensity.utils.error_handling import InvalidGeometry

from geo_helpers import km_to_lat_deg, km_to_lon_deg

ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180.0

L_SHAPE = [(0, 0), (4, 0), (4, 1), (1, 1), (1, 4), (0, 4), (0, 0)]
HOLE = [(2, 0.25), (3, 0.25), (3, 0.75), (2, 0.75), (2, 0.25)]


@pytest.fixture
def donut():
    return Polygon.from_rings(
        [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)],
        [(4, 4), (6, 4), (6, 6), (4, 6), (4, 4)],
    )


class TestPointInPolygon:
    """Ray-casting containment."""

    def test_inside_and_outside(self, square):
        poly = square(-71.5, 43.0)
        assert point_in_polygon((-71.0, 43.5), poly) is True
        assert point_in_polygon((-72.0, 43.5), poly) is False
        assert point_in_polygon((-71.0, 44.5), poly) is False

    def test_boundary_counts_as_inside(self, square):
        """Edges and vertices belong to the polygon."""
        poly = square(0.0, 0.0)
        assert point_in_polygon((0.5, 0.0), poly) is True
        assert point_in_polygon((1.0, 0.5), poly) is True
        assert point_in_polygon((0.0, 0.0), poly) is True
        assert point_in_polygon((1.0, 1.0), poly) is True

    def test_hole_excluded(self, donut):
        assert point_in_polygon((5, 5), donut) is False
        assert point_in_polygon((2, 2), donut) is True

    def test_hole_edge_is_inside(self, donut):
        assert point_in_polygon((4, 5), donut) is True
        assert point_in_polygon((6, 6), donut) is True

    def test_concave_notch(self):
        poly = Polygon.from_rings(L_SHAPE)
        assert point_in_polygon((0.5, 3.0), poly) is True
        assert point_in_polygon((3.0, 0.5), poly) is True
        assert point_in_polygon((3.0, 3.0), poly) is False

    def test_deterministic(self, donut):
        results = {point_in_polygon((2.5, 7.25), donut) for _ in range(20)}
        assert results == {True}

    def test_matches_shapely_covers(self):
        """Grid comparison against shapely on a concave polygon with a hole."""
        poly = Polygon.from_rings(L_SHAPE, HOLE)
        reference = ShapelyPolygon(L_SHAPE, [HOLE])
        for i in range(-2, 46):
            for j in range(-2, 46):
                x, y = 0.05 + 0.1 * i, 0.05 + 0.1 * j
                expected = reference.covers(ShapelyPoint(x, y))
                assert point_in_polygon((x, y), poly) is expected, (x, y)

    def test_repeated_vertices(self):
        poly = Polygon.from_rings([(0, 0), (0, 0), (2, 0), (2, 0), (2, 2), (0, 2), (0, 0)])
        assert point_in_polygon((1, 1), poly) is True
        assert point_in_polygon((3, 1), poly) is False

    def test_self_intersecting_ring_returns_bool(self):
        bowtie = Polygon.from_rings([(0, 0), (2, 2), (2, 0), (0, 2), (0, 0)])
        assert point_in_polygon((0.2, 1.0), bowtie) in (True, False)
        assert point_in_polygon((5, 5), bowtie) is False

    def test_unclosed_ring_raises(self):
        poly = Polygon.from_rings([(0, 0), (1, 0), (1, 1), (0, 1)])
        with pytest.raises(InvalidGeometry, match="not closed"):
            point_in_polygon((0.5, 0.5), poly)

    def test_short_ring_raises(self):
        poly = Polygon.from_rings([(0, 0), (1, 0), (0, 0)])
        with pytest.raises(InvalidGeometry, match="at least 4"):
            point_in_polygon((0.5, 0.5), poly)

    def test_empty_polygon_raises(self):
        with pytest.raises(InvalidGeometry):
            point_in_polygon((0.5, 0.5), Polygon(()))

    def test_non_finite_point_raises(self, square):
        with pytest.raises(InvalidGeometry):
            point_in_polygon((float("nan"), 0.5), square(0, 0))


class TestDistance:
    """Great-circle distances in kilometers."""

    def test_haversine_one_degree_latitude(self):
        assert haversine_km((-71.0, 43.0), (-71.0, 44.0)) == pytest.approx(ONE_DEGREE_KM)

    def test_haversine_close_to_ellipsoid(self):
        geod = Geod(ellps="WGS84")
        _, _, meters = geod.inv(-71.5, 43.2, -71.1, 44.0)
        assert haversine_km((-71.5, 43.2), (-71.1, 44.0)) == pytest.approx(meters / 1000.0, rel=0.01)

    def test_perpendicular_distance_on_equator(self):
        d = distance_point_to_segment((0.5, 0.01), (0.0, 0.0), (1.0, 0.0))
        assert d == pytest.approx(0.01 * ONE_DEGREE_KM, rel=1e-6)

    def test_point_on_segment_is_zero(self):
        assert distance_point_to_segment((0.5, 0.0), (0.0, 0.0), (1.0, 0.0)) == pytest.approx(0.0, abs=1e-9)

    def test_beyond_end_uses_endpoint(self):
        d = distance_point_to_segment((2.0, 0.0), (0.0, 0.0), (1.0, 0.0))
        assert d == pytest.approx(ONE_DEGREE_KM)

    def test_before_start_uses_endpoint(self):
        d = distance_point_to_segment((-1.0, 0.0), (0.0, 0.0), (1.0, 0.0))
        assert d == pytest.approx(ONE_DEGREE_KM)

    def test_degenerate_segment(self):
        a = (-71.0, 43.0)
        d = distance_point_to_segment((-71.0, 44.0), a, a)
        assert d == pytest.approx(ONE_DEGREE_KM)
        assert math.isfinite(d)

    def test_short_segment_in_new_hampshire(self):
        lat = 43.0
        a = (-71.0, lat)
        b = (-71.0 + km_to_lon_deg(1.0, lat), lat)
        mid_lon = (a[0] + b[0]) / 2
        p = (mid_lon, lat + km_to_lat_deg(0.05))
        assert distance_point_to_segment(p, a, b) == pytest.approx(0.05, abs=1e-3)

    def test_non_finite_raises(self):
        with pytest.raises(InvalidGeometry):
            distance_point_to_segment((0.0, 0.0), (float("inf"), 0.0), (1.0, 0.0))


class TestNearestPointOnPolyline:
    """Minimum over segments."""

    def test_picks_closest_segment(self):
        line = Polyline.from_coords([(0, 0), (1, 0), (1, 1), (2, 1)])
        result = nearest_point_on_polyline((1.01, 0.5), line)
        assert result.segment_index == 1
        assert result.distance_km == pytest.approx(0.01 * ONE_DEGREE_KM, rel=1e-3)

    def test_tie_goes_to_lowest_index(self):
        """A point on a shared vertex is at distance 0 from both segments."""
        line = Polyline.from_coords([(0, 0), (1, 0), (2, 0)])
        result = nearest_point_on_polyline((1.0, 0.0), line)
        assert result.segment_index == 0
        assert result.distance_km == 0.0

    def test_accepts_plain_sequence(self):
        result = nearest_point_on_polyline((0.5, 0.0), [(0, 0), (1, 0)])
        assert result.segment_index == 0
        assert result.distance_km == pytest.approx(0.0, abs=1e-9)

    def test_too_few_vertices_raises(self):
        with pytest.raises(InvalidGeometry, match="at least 2"):
            nearest_point_on_polyline((0, 0), Polyline.from_coords([(1, 1)]))
        with pytest.raises(InvalidGeometry):
            nearest_point_on_polyline((0, 0), [])


class TestPolygonArea:
    """Spherical areas in km²."""

    def test_one_degree_square(self, square):
        expected = EARTH_RADIUS_KM ** 2 * math.radians(1.0) * (
            math.sin(math.radians(44.0)) - math.sin(math.radians(43.0))
        )
        assert polygon_area(square(-72.0, 43.0)) == pytest.approx(expected, rel=1e-9)

    def test_close_to_ellipsoidal_area(self, square):
        geod = Geod(ellps="WGS84")
        reference = ShapelyPolygon([(-72, 43), (-71, 43), (-71, 44), (-72, 44)])
        area_m2, _ = geod.geometry_area_perimeter(reference)
        assert polygon_area(square(-72.0, 43.0)) == pytest.approx(abs(area_m2) / 1e6, rel=0.01)

    def test_orientation_does_not_matter(self):
        ccw = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]
        assert ring_area_km2(ccw) == pytest.approx(ring_area_km2(list(reversed(ccw))))

    def test_holes_are_subtracted(self, donut):
        outer = ring_area_km2(donut.outer)
        hole = ring_area_km2(donut.holes[0])
        assert polygon_area(donut) == pytest.approx(outer - hole)
        assert polygon_area(donut) < outer

    def test_degenerate_outer_ring_is_zero(self):
        assert polygon_area(Polygon.from_rings([(0, 0), (1, 1), (0, 0), (0, 0)])) == 0.0
        assert polygon_area(Polygon.from_rings([(0, 0), (0, 0), (0, 0), (0, 0)])) == 0.0

    def test_unclosed_ring_raises(self):
        with pytest.raises(InvalidGeometry):
            polygon_area(Polygon.from_rings([(0, 0), (1, 0), (1, 1), (0, 1)]))

    def test_empty_polygon_raises(self):
        with pytest.raises(InvalidGeometry):
            polygon_area(Polygon(()))
