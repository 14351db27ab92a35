"""Hourly forecast polygons from burn snapshots.

Each hour's polygon is the convex hull of everything burned so far (base
polygon vertices plus the corners of every ignited cell), so forecast
polygons never shrink. Output rings use GeoJSON (lon, lat) ordering.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

from firerisk.geometry.polygon import close_ring, convex_hull, polygon_area_ha
from firerisk.types import (
    BurnSnapshot,
    ForecastPolygon,
    ForecastStats,
    GridGeometry,
    LatLon,
    LonLat,
)


def _iso(ts: datetime) -> str:
    return ts.isoformat().replace("+00:00", "Z")


def _to_lonlat(points: Sequence[LatLon]) -> list[LonLat]:
    return [(lon, lat) for lat, lon in points]


def _cell_corners(grid: GridGeometry, row: int, col: int) -> list[LatLon]:
    min_lat, min_lon, max_lat, max_lon = grid.cell_bounds(row, col)
    return [(min_lat, min_lon), (min_lat, max_lon), (max_lat, max_lon), (max_lat, min_lon)]


def _fallback_ring(grid: GridGeometry) -> list[LonLat]:
    lat, lon, size = grid.lat, grid.lon, grid.cell_size
    return [(lon, lat), (lon + size, lat), (lon, lat + size), (lon, lat)]


def build_forecast_polygons(
    snapshots: Sequence[BurnSnapshot],
    grid: GridGeometry,
    base_polygon: Sequence[LatLon] | None = None,
    start_time: datetime | None = None,
) -> tuple[list[ForecastPolygon], list[LatLon]]:
    """Convert burn snapshots into cumulative hourly polygons.

    Args:
        snapshots: Per-hour newly burned cells, hour 0 first
        grid: Placement of the simulation grid
        base_polygon: Closed (lat, lon) ring the fire started from, if any
        start_time: Timestamp of hour 0 (defaults to now, UTC)

    Returns:
        (forecast, burned_centroids). Centroids include base polygon
        vertices and the center of every burned cell that entered the
        forecast, and feed the footprint hull.
    """
    start = start_time or datetime.now(timezone.utc)
    forecast: list[ForecastPolygon] = []
    centroids: list[LatLon] = []
    accumulated: list[LatLon] = []

    base = list(base_polygon or [])
    has_base = len(base) >= 3
    if has_base:
        vertices = base[:-1] if base[0] == base[-1] else base
        accumulated.extend(vertices)
        centroids.extend(vertices)
        forecast.append(
            ForecastPolygon(
                hour=0,
                coordinates=_to_lonlat(close_ring(base)),
                stats=ForecastStats(
                    probability=1.0,
                    cell_count=0,
                    timestamp=_iso(start),
                    area_ha=round(polygon_area_ha(vertices), 2),
                ),
                previous_polygon=None,
                is_ring=False,
            )
        )

    for snap in snapshots:
        if has_base and snap.hour == 0:
            continue

        timestamp = _iso(start + timedelta(hours=snap.hour))
        previous = list(forecast[-1].coordinates) if forecast else None

        if not snap.cells:
            if previous is not None:
                forecast.append(
                    ForecastPolygon(
                        hour=snap.hour,
                        coordinates=previous,
                        stats=ForecastStats(
                            probability=0.0,
                            cell_count=0,
                            timestamp=timestamp,
                            area_ha=forecast[-1].stats.area_ha,
                        ),
                        previous_polygon=previous,
                    )
                )
            continue

        for cell in snap.cells:
            accumulated.extend(_cell_corners(grid, cell.row, cell.col))
            centroids.append(grid.cell_center(cell.row, cell.col))

        hull = convex_hull(accumulated)
        if len(hull) >= 3:
            coordinates = _to_lonlat(close_ring(hull))
            area_ha = polygon_area_ha(hull)
        else:
            coordinates = _fallback_ring(grid)
            area_ha = 0.0

        probability = sum(c.probability for c in snap.cells) / len(snap.cells)
        forecast.append(
            ForecastPolygon(
                hour=snap.hour,
                coordinates=coordinates,
                stats=ForecastStats(
                    probability=round(probability, 2),
                    cell_count=len(snap.cells),
                    timestamp=timestamp,
                    area_ha=round(area_ha, 2),
                ),
                previous_polygon=previous,
            )
        )

    return forecast, centroids


def build_footprint(centroids: Sequence[LatLon]) -> list[LatLon]:
    """Convex hull of burned centroids, closed when it is an area."""
    hull = convex_hull(centroids)
    if len(hull) > 2:
        return close_ring(hull)
    return hull
