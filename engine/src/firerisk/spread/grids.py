"""Fuel, slope and wind inputs for the cellular spread model.

Grids are indexed [row][col] with row 0 at the southern edge of the
simulation area and col 0 at the western edge.
"""

from __future__ import annotations

import math
from typing import Sequence

from firerisk.geometry.polygon import point_in_polygon
from firerisk.rng import RandomSource
from firerisk.types import GridGeometry, LatLon, WeatherHour, WeatherSummary, WindSample

SMOOTHING_PASSES = 3
DRY_POCKET_THRESHOLD = 0.85


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def normalize(vec: tuple[float, float]) -> tuple[float, float]:
    length = math.hypot(vec[0], vec[1])
    if not length:
        return 0.0, 0.0
    return vec[0] / length, vec[1] / length


def dryness_factor(fwi: float) -> float:
    """Scalar fuel-dryness multiplier from the FWI value."""
    return _clamp(fwi / 30.0, 0.4, 1.8)


def build_fuel_grid(size: int, rng: RandomSource, dryness: float) -> list[list[float]]:
    """Random, spatially smoothed fuel availability in [0, 1].

    Raw draws are smoothed with a 3x3 mean (edges use available
    neighbours), sprinkled with dry pockets and finally scaled by dryness.
    """
    grid = [[rng.next() for _ in range(size)] for _ in range(size)]

    for _ in range(SMOOTHING_PASSES):
        previous = [row[:] for row in grid]
        for r in range(size):
            for c in range(size):
                acc = 0.0
                count = 0
                for rr in range(max(0, r - 1), min(size, r + 2)):
                    for cc in range(max(0, c - 1), min(size, c + 2)):
                        acc += previous[rr][cc]
                        count += 1
                grid[r][c] = acc / count

    scale = 0.6 + 0.4 * dryness
    for r in range(size):
        for c in range(size):
            if rng.next() > DRY_POCKET_THRESHOLD:
                grid[r][c] = _clamp(grid[r][c] + 0.3 + rng.next() * 0.2, 0.0, 1.0)
            grid[r][c] = _clamp(grid[r][c] * scale, 0.0, 1.0)

    return grid


def build_slope_grid(
    size: int,
    slope_vector: tuple[float, float] | None,
    strength: float,
) -> list[list[float]]:
    """Slope magnitude per cell, in [0, 1] of full slope strength.

    Cells offset from the grid center along the slope vector get steeper
    terrain, cells on the opposite side flatter.
    """
    if slope_vector is None:
        return [[strength] * size for _ in range(size)]

    center = (size - 1) / 2.0
    span = center or 1.0
    grid = []
    for r in range(size):
        row = []
        for c in range(size):
            dx = (c - center) / span
            dy = (center - r) / span
            projection = dx * slope_vector[0] + dy * slope_vector[1]
            row.append(_clamp(0.5 + projection * 0.8, 0.0, 1.0) * strength)
        grid.append(row)
    return grid


def wind_sample(speed: float | None, direction_from: float | None) -> WindSample:
    """Build a WindSample from a meteorological (FROM) direction."""
    frm = float(direction_from) if direction_from is not None else 0.0
    to = (frm + 180.0) % 360.0
    theta = math.radians(to)
    unit = normalize((math.sin(theta), math.cos(theta)))
    return WindSample(
        speed=float(speed) if speed is not None else 0.0,
        direction_from=frm,
        direction_to=to,
        unit_vector=unit,
    )


def build_wind_series(
    hourly: Sequence[WeatherHour],
    hours: int,
    summary: WeatherSummary | None,
) -> list[WindSample]:
    """One wind sample per hour 0..hours; missing rows fall back to the summary."""
    series = []
    for h in range(max(hours + 1, 1)):
        if h < len(hourly):
            entry = hourly[h]
            series.append(wind_sample(entry.wind_speed_10m, entry.wind_direction_10m))
        elif summary is not None:
            series.append(wind_sample(summary.wind_speed_10m, summary.wind_direction_10m))
        else:
            series.append(wind_sample(None, None))
    return series


def seed_cells_from_polygon(
    polygon: Sequence[LatLon],
    grid: GridGeometry,
) -> list[tuple[int, int]]:
    """Grid cells already burning inside a base polygon.

    A cell is seeded when its center lies inside the polygon, otherwise when
    any of its corners does, otherwise when a polygon vertex falls within it.
    """
    if len(polygon) < 3:
        return []
    seeds = []
    for r in range(grid.grid_size):
        for c in range(grid.grid_size):
            min_lat, min_lon, max_lat, max_lon = grid.cell_bounds(r, c)
            if point_in_polygon(grid.cell_center(r, c), polygon):
                seeds.append((r, c))
                continue
            corners = (
                (min_lat, min_lon),
                (min_lat, max_lon),
                (max_lat, max_lon),
                (max_lat, min_lon),
            )
            if any(point_in_polygon(corner, polygon) for corner in corners):
                seeds.append((r, c))
                continue
            if any(
                min_lat <= lat <= max_lat and min_lon <= lon <= max_lon
                for lat, lon in polygon
            ):
                seeds.append((r, c))
    return seeds
