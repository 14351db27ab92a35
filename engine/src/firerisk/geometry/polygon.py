"""Planar polygon utilities shared by the analyzer and the simulator.

Points are plain 2-tuples. Unless noted, functions take (lat, lon) pairs
and measure distances in degrees; the small extents involved (a few km)
make the planar approximation adequate.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Sequence

Point = tuple[float, float]

# Fallback fire center when no polygon is known (lat, lon)
DEFAULT_CENTER: Point = (37.0485, 30.48375)

# Smallest fire radius used for searches (degrees)
DEFAULT_RADIUS = 0.002

# Meters per degree of latitude (approximate)
M_PER_DEG_LAT = 111320.0


def sanitize_polygon(polygon: Iterable[Any] | None) -> list[Point]:
    """Keep well-formed, finite (lat, lon) pairs, coerced to float."""
    if polygon is None:
        return []
    coords: list[Point] = []
    for pair in polygon:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            continue
        try:
            lat, lon = float(pair[0]), float(pair[1])
        except (TypeError, ValueError):
            continue
        if math.isfinite(lat) and math.isfinite(lon):
            coords.append((lat, lon))
    return coords


def close_ring(points: Sequence[Point]) -> list[Point]:
    """Return points with the first vertex repeated at the end if needed."""
    coords = list(points)
    if coords and coords[0] != coords[-1]:
        coords.append(coords[0])
    return coords


def normalize_polygon(polygon: Iterable[Any] | None) -> list[Point]:
    """Sanitize and close a polygon; fewer than 3 points gives []."""
    coords = sanitize_polygon(polygon)
    if len(coords) < 3:
        return []
    return close_ring(coords)


def centroid(points: Sequence[Point]) -> Point:
    """Arithmetic mean of the points, or DEFAULT_CENTER when empty."""
    if not points:
        return DEFAULT_CENTER
    n = len(points)
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def polygon_centroid(ring: Sequence[Point]) -> Point | None:
    """Area-weighted centroid of a closed ring.

    Returns None for fewer than 3 points; zero-area rings fall back to the
    first vertex.
    """
    if len(ring) < 3:
        return None
    twice_area = 0.0
    cx = 0.0
    cy = 0.0
    for (x0, y0), (x1, y1) in zip(ring, ring[1:]):
        f = x0 * y1 - x1 * y0
        twice_area += f
        cx += (x0 + x1) * f
        cy += (y0 + y1) * f
    if twice_area == 0.0:
        return ring[0]
    area = twice_area * 0.5
    return (cx / (6.0 * area), cy / (6.0 * area))


def euclid(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray-casting containment test.

    Degenerate polygons (fewer than 3 vertices) contain nothing. Points
    exactly on an edge get whatever the ray cast yields, which is stable
    for a given input.
    """
    if len(polygon) < 3:
        return False
    py, px = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        yi, xi = polygon[i]
        yj, xj = polygon[j]
        if (yi > py) != (yj > py) and px < (xj - xi) * (py - yi) / (yj - yi + 1e-12) + xi:
            inside = not inside
        j = i
    return inside


def distance_to_segment(point: Point, a: Point, b: Point) -> float:
    dy = b[0] - a[0]
    dx = b[1] - a[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return euclid(point, a)
    t = ((point[1] - a[1]) * dx + (point[0] - a[0]) * dy) / length_sq
    t = min(max(t, 0.0), 1.0)
    return euclid(point, (a[0] + t * dy, a[1] + t * dx))


def distance_to_polygon(point: Point, polygon: Sequence[Point]) -> float:
    """Minimum distance from point to any edge of the closed ring.

    Returns math.inf for fewer than 2 vertices.
    """
    n = len(polygon)
    if n < 2:
        return math.inf
    return min(
        distance_to_segment(point, polygon[i], polygon[(i + 1) % n]) for i in range(n)
    )


def fire_radius(points: Sequence[Point], center: Point) -> float:
    """Largest center-to-vertex distance, never below DEFAULT_RADIUS."""
    if not points:
        return DEFAULT_RADIUS
    return max(max(euclid(p, center) for p in points), DEFAULT_RADIUS)


def convex_hull(points: Sequence[Point]) -> list[Point]:
    """Andrew's monotone chain hull over (lat, lon) points.

    Points are ordered by longitude then latitude and the hull is returned
    counter-clockwise in (lon, lat) space, without a closing vertex.
    Exactly collinear boundary points are dropped (``cross <= 0`` pops).
    Two or fewer points are returned unchanged.
    """
    if len(points) <= 2:
        return list(points)

    ordered = sorted(points, key=lambda p: (p[1], p[0]))

    def cross(o: Point, a: Point, b: Point) -> float:
        return (a[1] - o[1]) * (b[0] - o[0]) - (a[0] - o[0]) * (b[1] - o[1])

    lower: list[Point] = []
    for p in ordered:
        while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: list[Point] = []
    for p in reversed(ordered):
        while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    return lower[:-1] + upper[:-1]


def polygon_area(points: Sequence[Point]) -> float:
    """Shoelace area in squared input units (ring may be open or closed)."""
    n = len(points)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x0, y0 = points[i]
        x1, y1 = points[(i + 1) % n]
        area += x0 * y1 - x1 * y0
    return abs(area) / 2.0


def polygon_area_ha(points: Sequence[Point]) -> float:
    """Calculate (lat, lon) polygon area in hectares.

    Uses a local meter-based projection from the mean latitude.
    """
    if len(points) < 3:
        return 0.0
    mean_lat = sum(p[0] for p in points) / len(points)
    m_per_deg_lon = M_PER_DEG_LAT * math.cos(math.radians(mean_lat))
    projected = [(lat * M_PER_DEG_LAT, lon * m_per_deg_lon) for lat, lon in points]
    return polygon_area(projected) / 10000.0


def polygon_to_geojson(
    points: Sequence[Point],
    properties: dict | None = None,
) -> dict:
    """Convert a (lat, lon) polygon to a GeoJSON Feature.

    Coordinates are emitted as [lng, lat] as RFC 7946 requires.
    """
    if not points:
        return {
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": []},
            "properties": properties or {},
        }

    coords = [[lon, lat] for lat, lon in close_ring(points)]
    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": [coords]},
        "properties": properties or {},
    }
