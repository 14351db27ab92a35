"""Risk-cell analysis around an active fire polygon.

Samples candidate response positions around the fire, attaches a
synthetic local environment to each one and scores them for strategic
value. The generator is seeded from a hash of the polygon, so the same
polygon and options always give identical cells in identical order.

The analyzer always produces an answer: malformed or degenerate polygons
fall back to radial sampling around a default center instead of raising.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from firerisk.geometry.polygon import (
    DEFAULT_RADIUS,
    centroid,
    distance_to_polygon,
    euclid,
    fire_radius,
    point_in_polygon,
    sanitize_polygon,
)
from firerisk.rng import LcgRandom, RandomSource, hash_seed
from firerisk.types import LatLon, RiskAnalysis, RiskCell

logger = logging.getLogger(__name__)

DEFAULT_CELL_COUNT = 12
DEFAULT_SEARCH_RADIUS_FACTOR = 1.5
MIN_CELL_COUNT = 3
MAX_CELL_COUNT = 50
MIN_SEARCH_RADIUS_FACTOR = 0.5
MAX_SEARCH_RADIUS_FACTOR = 5.0

MIN_GRID_POINTS = 6
MAX_GRID_POINTS = 60
FRONT_DISTANCE_SCALE = 111000.0  # degrees -> meters
NEARBY_DISTANCE_THRESHOLD = 0.00045  # degrees
POLYGON_BUFFER = 0.0003  # degrees
MAX_PROJECTION_ATTEMPTS = 3

INTERIOR_WEIGHT = 1.0
BOUNDARY_WEIGHT = 0.6
RADIAL_WEIGHT = 0.9

MAX_CREW_RISK = 0.45
MIN_FRONT_DISTANCE = 25.0


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def direction_alignment(fire_direction: float, wind_direction: float) -> float:
    """1.0 when fire and wind point the same way, 0.0 when opposed."""
    diff = abs(fire_direction - wind_direction)
    if diff > 180.0:
        diff = 360.0 - diff
    return 1.0 - diff / 180.0


def compute_score(cell: dict[str, Any]) -> float:
    """Linear strategic-value score for a cell's attributes."""
    score = 0.0
    score += cell["value_at_risk"] * 1.0
    score += cell["spread_probability"] * 1000.0
    score += cell["area"] * 0.5
    if cell["time_to_impact"] > 0:
        score += max(0.0, 600.0 - cell["time_to_impact"]) * 2.0
    score += cell["danger_multiplier"] * 500.0
    score += cell["temperature"] * 10.0
    score += (100.0 - cell["humidity"]) * 5.0
    score += cell["slope"] * 30.0
    score -= cell["crew_risk"] * 3000.0
    score -= cell["fuel_moisture"] * 2000.0
    if cell["front_distance"] < 50.0:
        score -= 2000.0
    elif cell["front_distance"] < 100.0:
        score -= 1000.0
    if cell["fire_speed"] > 4.0:
        score -= cell["fire_speed"] * 500.0
    else:
        score += cell["fire_speed"] * 50.0
    return score


class _CellSampler:
    """Draws raw cell attributes from a single random stream.

    Draw order is fixed; changing it changes every generated cell.
    """

    def __init__(
        self,
        center: LatLon,
        rng: RandomSource,
        polygon: list[LatLon] | None,
    ):
        self.center = center
        self.rng = rng
        self.polygon = polygon
        self.cells: list[dict[str, Any]] = []

    def project_outside(self, lat: float, lon: float) -> LatLon:
        """Push a point radially away from the center until it leaves the fire."""
        if self.polygon is None or not point_in_polygon((lat, lon), self.polygon):
            return lat, lon

        rng = self.rng
        for _ in range(MAX_PROJECTION_ATTEMPTS):
            dir_lat = lat - self.center[0]
            dir_lon = lon - self.center[1]
            magnitude = math.hypot(dir_lat, dir_lon) or 1.0
            step = NEARBY_DISTANCE_THRESHOLD * 1.6 + rng.next() * NEARBY_DISTANCE_THRESHOLD * 0.8
            lat += (dir_lat / magnitude) * step + (rng.next() - 0.5) * NEARBY_DISTANCE_THRESHOLD * 0.3
            lon += (dir_lon / magnitude) * step + (rng.next() - 0.5) * NEARBY_DISTANCE_THRESHOLD * 0.3
            if not point_in_polygon((lat, lon), self.polygon):
                break
        return lat, lon

    def add_cell(self, raw_lat: float, raw_lon: float, weight: float = 1.0) -> None:
        rng = self.rng
        lat, lon = self.project_outside(raw_lat, raw_lon)

        spread_probability = _clamp(0.35 + rng.next() * 0.5 * weight, 0.05, 0.98)
        fire_power = 1.0 + rng.next() * 2.8 * weight
        base_risk = rng.next() * weight
        crew_risk = _clamp(0.04 + base_risk * 0.35, 0.02, 0.92)
        fire_speed = 0.8 + rng.next() * 4.5
        wind_speed = 2.5 + rng.next() * 11.0
        humidity = _clamp(35.0 + rng.next() * 40.0, 15.0, 85.0)
        fuel_moisture = _clamp(0.07 + rng.next() * 0.18, 0.02, 0.35)
        if self.polygon is not None:
            front_raw = (
                distance_to_polygon((lat, lon), self.polygon)
                + rng.next() * NEARBY_DISTANCE_THRESHOLD
            )
        else:
            front_raw = euclid((lat, lon), self.center)
        time_to_impact = 420.0 - front_raw * 900.0 + rng.next() * 90.0

        self.cells.append({
            "id": f"C{len(self.cells) + 1}",
            "lat": lat,
            "lon": lon,
            "fire_power": round(fire_power, 2),
            "spread_probability": round(spread_probability, 2),
            "area": _round_half_up(450.0 + rng.next() * 260.0),
            "value_at_risk": _round_half_up(850.0 + rng.next() * 2400.0 * weight),
            "crew_risk": round(crew_risk, 2),
            "time_to_impact": max(45, _round_half_up(time_to_impact)),
            "fire_direction": round(rng.next() * 360.0, 1),
            "fire_speed": round(fire_speed, 2),
            "wind_speed": round(wind_speed, 2),
            "wind_direction": round(rng.next() * 360.0, 1),
            "temperature": round(21.0 + rng.next() * 13.0, 1),
            "humidity": round(humidity, 1),
            "fuel_moisture": round(fuel_moisture, 2),
            "slope": round(rng.next() * 26.0, 1),
            "front_distance": round(front_raw * FRONT_DISTANCE_SCALE, 1),
        })

    def sample_grid(self, polygon: list[LatLon], cell_count: int) -> None:
        """Jittered grid over the padded bounding box of the polygon."""
        rng = self.rng
        lats = [p[0] for p in polygon]
        lons = [p[1] for p in polygon]
        min_lat = min(lats) - POLYGON_BUFFER
        max_lat = max(lats) + POLYGON_BUFFER
        min_lon = min(lons) - POLYGON_BUFFER
        max_lon = max(lons) + POLYGON_BUFFER

        grid_points = int(
            _clamp(math.ceil(math.sqrt(cell_count * 1.4)), MIN_GRID_POINTS, MAX_GRID_POINTS)
        )
        step_lat = (max_lat - min_lat) / max(grid_points - 1, 1)
        step_lon = (max_lon - min_lon) / max(grid_points - 1, 1)
        limit = cell_count * 2

        for i in range(grid_points):
            if len(self.cells) >= limit:
                break
            for j in range(grid_points):
                if len(self.cells) >= limit:
                    break
                lat = min_lat + i * step_lat + (rng.next() - 0.5) * step_lat * 0.35
                lon = min_lon + j * step_lon + (rng.next() - 0.5) * step_lon * 0.35
                if not (math.isfinite(lat) and math.isfinite(lon)):
                    continue
                inside = point_in_polygon((lat, lon), polygon)
                near = distance_to_polygon((lat, lon), polygon) < NEARBY_DISTANCE_THRESHOLD
                if inside or near:
                    self.add_cell(lat, lon, INTERIOR_WEIGHT if inside else BOUNDARY_WEIGHT)

    def sample_radial(self, cell_count: int, radius: float) -> None:
        """Ring of cells around the center, used when grid sampling fails."""
        rng = self.rng
        count = max(cell_count, DEFAULT_CELL_COUNT)
        effective_radius = max(radius, DEFAULT_RADIUS)
        for i in range(count):
            angle = 2.0 * math.pi * i / max(1, count) + (rng.next() - 0.5) * 0.45
            distance = effective_radius * (0.55 + rng.next() * 0.75)
            lat = self.center[0] + distance * math.cos(angle)
            lon = self.center[1] + distance * math.sin(angle)
            self.add_cell(lat, lon, RADIAL_WEIGHT)


def build_cells(
    center: LatLon,
    radius: float,
    cell_count: int,
    rng: RandomSource,
    coords: list[LatLon],
) -> list[dict[str, Any]]:
    """Sample raw (unscored) cell attribute records."""
    polygon = coords if len(coords) >= 3 else None
    sampler = _CellSampler(center, rng, polygon)

    if polygon is not None:
        sampler.sample_grid(polygon, cell_count)

    if not sampler.cells:
        if polygon is not None:
            logger.warning("Grid sampling found no cells; using radial fallback")
        sampler.sample_radial(cell_count, radius)

    return sampler.cells[: max(cell_count, MIN_GRID_POINTS)]


def _option(value: float | None, default: float, lo: float, hi: float) -> float:
    if value is None or not math.isfinite(value):
        return default
    return _clamp(value, lo, hi)


def _pick_best(cells: list[RiskCell]) -> RiskCell | None:
    best: RiskCell | None = None
    for cell in cells:
        if best is None or cell.score > best.score:
            best = cell
    return best


def analyze_fire_polygon(
    polygon: Iterable[Any] | None,
    cell_count: float | None = DEFAULT_CELL_COUNT,
    search_radius_factor: float | None = DEFAULT_SEARCH_RADIUS_FACTOR,
    rng: RandomSource | None = None,
) -> RiskAnalysis:
    """Sample, score and filter candidate cells around a fire polygon.

    Args:
        polygon: Fire polygon as (lat, lon) pairs; malformed pairs are dropped
        cell_count: Desired number of cells, clamped to 3-50
        search_radius_factor: Candidate search radius as a multiple of the
            fire radius, clamped to 0.5-5
        rng: Random source override; defaults to an LCG seeded from the
            polygon hash

    Returns:
        RiskAnalysis with all cells, filtered candidates and the best cell
    """
    coords = sanitize_polygon(polygon)
    center = centroid(coords)
    radius = fire_radius(coords, center)
    count = int(
        math.floor(_option(cell_count, DEFAULT_CELL_COUNT, MIN_CELL_COUNT, MAX_CELL_COUNT))
    )
    factor = _option(
        search_radius_factor,
        DEFAULT_SEARCH_RADIUS_FACTOR,
        MIN_SEARCH_RADIUS_FACTOR,
        MAX_SEARCH_RADIUS_FACTOR,
    )

    source = rng if rng is not None else LcgRandom(hash_seed(coords))
    raw_cells = build_cells(center, radius, count, source, coords)

    cells: list[RiskCell] = []
    for raw in raw_cells:
        alignment = direction_alignment(raw["fire_direction"], raw["wind_direction"])
        raw["distance_to_center"] = euclid((raw["lat"], raw["lon"]), center)
        raw["wind_fire_alignment"] = alignment
        raw["danger_multiplier"] = 1.0 + (alignment * raw["wind_speed"]) / 20.0
        raw["inside_fire"] = bool(coords) and point_in_polygon((raw["lat"], raw["lon"]), coords)
        raw["score"] = compute_score(raw)
        cells.append(RiskCell(**raw))

    search_radius = radius * factor
    candidates = [
        cell
        for cell in cells
        if cell.distance_to_center <= search_radius
        and cell.crew_risk < MAX_CREW_RISK
        and cell.front_distance >= MIN_FRONT_DISTANCE
        and not cell.inside_fire
    ]
    outside = [cell for cell in cells if not cell.inside_fire]
    best_cell = _pick_best(candidates or outside or cells)

    if not coords:
        synthetic = build_cells(center, radius, 4, source, coords)
        coords_out = [(c["lat"], c["lon"]) for c in synthetic]
    else:
        coords_out = coords

    logger.info(
        "Analyzed polygon (%d vertices): %d cells, %d candidates, best=%s",
        len(coords),
        len(cells),
        len(candidates),
        best_cell.id if best_cell else None,
    )

    return RiskAnalysis(
        coords=coords_out,
        center=center,
        radius=radius,
        search_radius=search_radius,
        cells=cells,
        candidates=candidates,
        best_cell=best_cell,
    )
