"""Tests for the planar polygon kernel."""

import math

import pytest

from firerisk.geometry.polygon import (
    DEFAULT_CENTER,
    DEFAULT_RADIUS,
    centroid,
    close_ring,
    convex_hull,
    distance_to_polygon,
    fire_radius,
    normalize_polygon,
    point_in_polygon,
    polygon_area,
    polygon_area_ha,
    polygon_centroid,
    polygon_to_geojson,
    sanitize_polygon,
)


def _cross(o, a, b):
    return (a[1] - o[1]) * (b[0] - o[0]) - (a[0] - o[0]) * (b[1] - o[1])


class TestPointInPolygon:
    """Test ray-casting containment."""

    def test_center_of_unit_square_inside(self, unit_square):
        assert point_in_polygon((0.5, 0.5), unit_square)

    def test_far_point_outside(self, unit_square):
        assert not point_in_polygon((2.0, 2.0), unit_square)

    def test_edge_point_is_stable(self, unit_square):
        """Edge points are implementation-defined but repeatable."""
        first = point_in_polygon((0.0, 0.5), unit_square)
        assert all(point_in_polygon((0.0, 0.5), unit_square) == first for _ in range(5))

    def test_degenerate_polygon_contains_nothing(self):
        assert not point_in_polygon((0.0, 0.0), [])
        assert not point_in_polygon((0.0, 0.0), [(0.0, 0.0), (1.0, 1.0)])

    def test_closed_ring_same_as_open(self, unit_square):
        ring = close_ring(unit_square)
        for point in [(0.25, 0.75), (1.5, 0.5), (-0.1, 0.2)]:
            assert point_in_polygon(point, ring) == point_in_polygon(point, unit_square)

    def test_concave_polygon(self):
        """L-shaped polygon: the notch is outside."""
        shape = [(0, 0), (0, 2), (1, 2), (1, 1), (2, 1), (2, 0)]
        assert point_in_polygon((0.5, 0.5), shape)
        assert point_in_polygon((1.5, 0.5), shape)
        assert not point_in_polygon((1.5, 1.5), shape)


class TestDistanceToPolygon:
    """Test point-to-ring distance."""

    def test_outside_point(self, unit_square):
        assert distance_to_polygon((0.5, 2.0), unit_square) == pytest.approx(1.0)

    def test_inside_point_measures_to_nearest_edge(self, unit_square):
        assert distance_to_polygon((0.5, 0.2), unit_square) == pytest.approx(0.2)

    def test_wraps_last_to_first(self):
        """The closing edge (last -> first vertex) counts."""
        triangle = [(0.0, 0.0), (0.0, 1.0), (1.0, 0.0)]
        assert distance_to_polygon((0.5, -0.5), triangle) == pytest.approx(0.5)

    def test_fewer_than_two_vertices_is_infinite(self):
        assert distance_to_polygon((0.0, 0.0), []) == math.inf
        assert distance_to_polygon((0.0, 0.0), [(1.0, 1.0)]) == math.inf

    def test_two_vertices_is_segment_distance(self):
        assert distance_to_polygon((1.0, 0.5), [(0.0, 0.0), (0.0, 1.0)]) == pytest.approx(1.0)


class TestCentroid:
    """Test arithmetic and area-weighted centroids."""

    def test_mean_of_points(self, unit_square):
        assert centroid(unit_square) == pytest.approx((0.5, 0.5))

    def test_empty_returns_default_center(self):
        assert centroid([]) == DEFAULT_CENTER

    def test_area_weighted_centroid_of_square(self, unit_square):
        assert polygon_centroid(close_ring(unit_square)) == pytest.approx((0.5, 0.5))

    def test_area_weighted_ignores_vertex_density(self):
        """Extra vertices along one edge shift the mean but not the area centroid."""
        ring = close_ring([(0, 0), (0, 0.25), (0, 0.5), (0, 0.75), (0, 1), (1, 1), (1, 0)])
        assert polygon_centroid(ring) == pytest.approx((0.5, 0.5))
        assert centroid(ring[:-1])[0] < 0.5

    def test_area_weighted_needs_three_points(self):
        assert polygon_centroid([(0.0, 0.0), (1.0, 1.0)]) is None


class TestFireRadius:
    def test_max_vertex_distance(self, unit_square):
        assert fire_radius(unit_square, (0.5, 0.5)) == pytest.approx(math.sqrt(0.5))

    def test_floored_at_default(self):
        tiny = [(37.0, 30.0), (37.0, 30.00001), (37.00001, 30.0)]
        assert fire_radius(tiny, centroid(tiny)) == DEFAULT_RADIUS

    def test_empty_gives_default(self):
        assert fire_radius([], DEFAULT_CENTER) == DEFAULT_RADIUS


class TestConvexHull:
    """Test monotone-chain hull properties."""

    def test_square_with_interior_points(self, unit_square):
        points = unit_square + [(0.5, 0.5), (0.2, 0.8), (0.9, 0.1)]
        hull = convex_hull(points)
        assert sorted(hull) == sorted(unit_square)

    def test_hull_is_subset_of_input(self, fire_polygon):
        points = fire_polygon + [(37.048, 30.48), (37.05, 30.49)]
        hull = convex_hull(points)
        assert set(hull) <= set(points)

    def test_every_input_inside_or_on_boundary(self):
        points = [
            (math.sin(i * 1.7) * (1 + i % 3), math.cos(i * 2.3) * (2 + i % 5))
            for i in range(40)
        ]
        hull = convex_hull(points)
        n = len(hull)
        for p in points:
            # Counter-clockwise in (lon, lat): p never strictly right of an edge
            for i in range(n):
                assert _cross(hull[i], hull[(i + 1) % n], p) >= -1e-12

    @pytest.mark.parametrize(
        "points",
        [[], [(1.0, 2.0)], [(1.0, 2.0), (3.0, 4.0)]],
    )
    def test_two_or_fewer_points_unchanged(self, points):
        assert convex_hull(points) == points

    def test_collinear_boundary_points_dropped(self):
        points = [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0), (1.0, 1.0)]
        hull = convex_hull(points)
        assert (0.0, 1.0) not in hull
        assert len(hull) == 3

    def test_duplicate_points(self, unit_square):
        hull = convex_hull(unit_square + unit_square)
        assert len(hull) == 4


class TestSanitize:
    def test_drops_malformed_pairs(self):
        coords = sanitize_polygon([[1, 2], [3], "x", None, [float("nan"), 1], ["4", "5"]])
        assert coords == [(1.0, 2.0), (4.0, 5.0)]

    def test_none_is_empty(self):
        assert sanitize_polygon(None) == []

    def test_normalize_closes_ring(self, unit_square):
        ring = normalize_polygon(unit_square)
        assert ring[0] == ring[-1]
        assert len(ring) == 5

    def test_normalize_rejects_degenerate(self):
        assert normalize_polygon([(0, 0), (1, 1)]) == []


class TestArea:
    def test_unit_square(self, unit_square):
        assert polygon_area(unit_square) == pytest.approx(1.0)
        assert polygon_area(close_ring(unit_square)) == pytest.approx(1.0)

    def test_hectares_positive(self, fire_polygon):
        area = polygon_area_ha(fire_polygon)
        # Roughly 1 km x 2 km
        assert 100.0 < area < 300.0

    def test_degenerate_area_zero(self):
        assert polygon_area_ha([(0.0, 0.0), (1.0, 1.0)]) == 0.0


class TestGeoJSON:
    def test_lon_lat_order_and_closed(self, fire_polygon):
        feature = polygon_to_geojson(fire_polygon, {"hour": 3})
        ring = feature["geometry"]["coordinates"][0]
        assert ring[0] == [30.475, 37.042]
        assert ring[0] == ring[-1]
        assert feature["properties"] == {"hour": 3}

    def test_empty(self):
        assert polygon_to_geojson([])["geometry"]["coordinates"] == []
