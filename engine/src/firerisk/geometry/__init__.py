"""Polygon geometry kernel."""

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
    sanitize_polygon,
)

__all__ = [
    "DEFAULT_CENTER",
    "DEFAULT_RADIUS",
    "centroid",
    "close_ring",
    "convex_hull",
    "distance_to_polygon",
    "fire_radius",
    "normalize_polygon",
    "point_in_polygon",
    "polygon_area",
    "polygon_area_ha",
    "polygon_centroid",
    "sanitize_polygon",
]
