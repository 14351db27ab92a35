"""Shared dataclasses and type definitions for firerisk."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from firerisk.exceptions import InvalidInputError

LatLon = tuple[float, float]
LonLat = tuple[float, float]


class DangerClass(str, Enum):
    """Fire danger classification derived from the FWI value."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"
    EXTREME = "extreme"


@dataclass(frozen=True)
class FWIResult:
    """Complete output from FWI calculation."""

    ffmc: float
    dmc: float
    dc: float
    isi: float
    bui: float
    fwi: float


@dataclass(frozen=True)
class PreviousCodes:
    """Previous day's moisture codes (spring startup defaults)."""

    ffmc: float = 85.0
    dmc: float = 6.0
    dc: float = 15.0


@dataclass(frozen=True)
class FireDangerCodes:
    """Rounded FWI components plus danger class, as served to clients."""

    ffmc: float
    dmc: float
    dc: float
    isi: float
    bui: float
    fwi: float
    classification: DangerClass


@dataclass(frozen=True)
class RiskCell:
    """A scored candidate response position near an active fire."""

    id: str
    lat: float
    lon: float
    fire_power: float
    spread_probability: float
    area: int
    value_at_risk: int
    crew_risk: float
    time_to_impact: int  # minutes
    fire_direction: float  # degrees
    fire_speed: float
    wind_speed: float
    wind_direction: float  # degrees
    temperature: float  # Celsius
    humidity: float  # percent
    fuel_moisture: float  # fraction
    slope: float  # degrees
    front_distance: float  # scaled meters
    distance_to_center: float  # degrees
    wind_fire_alignment: float
    danger_multiplier: float
    inside_fire: bool
    score: float


@dataclass(frozen=True)
class RiskAnalysis:
    """Output of a risk-cell analysis over one fire polygon."""

    coords: list[LatLon]
    center: LatLon
    radius: float
    search_radius: float
    cells: list[RiskCell]
    candidates: list[RiskCell]
    best_cell: RiskCell | None


@dataclass(frozen=True)
class WindSample:
    """Wind for one simulated hour."""

    speed: float  # m/s
    direction_from: float  # degrees, meteorological FROM
    direction_to: float  # degrees
    unit_vector: tuple[float, float]  # (east, north)


@dataclass(frozen=True)
class BurnedCell:
    """A grid cell that ignited during a given hour."""

    row: int
    col: int
    probability: float


@dataclass(frozen=True)
class BurnSnapshot:
    """Cells newly ignited during one hour."""

    hour: int
    cells: list[BurnedCell]
    wind: WindSample


@dataclass(frozen=True)
class ForecastStats:
    probability: float
    cell_count: int
    timestamp: str  # ISO-8601
    area_ha: float = 0.0


@dataclass(frozen=True)
class ForecastPolygon:
    """Cumulative fire extent at one hour.

    Coordinates are a closed ring of (lon, lat) pairs.
    """

    hour: int
    coordinates: list[LonLat]
    stats: ForecastStats
    previous_polygon: list[LonLat] | None = None
    is_ring: bool = True


@dataclass(frozen=True)
class WeatherHour:
    """One hourly weather row."""

    time: str
    temperature_2m: float | None = None
    precipitation: float | None = None
    wind_speed_10m: float | None = None  # m/s
    wind_direction_10m: float | None = None
    relative_humidity_2m: float | None = None
    soil_temperature_0cm: float | None = None
    soil_moisture_1_to_3cm: float | None = None
    surface_pressure: float | None = None
    cloud_cover: float | None = None


@dataclass(frozen=True)
class WeatherSummary:
    """Current conditions distilled from the hourly series."""

    at: str | None
    temperature_2m: float | None
    precipitation_24h: float
    wind_speed_10m: float | None
    wind_direction_10m: float | None
    relative_humidity_2m: float | None
    soil_moisture_1_to_3cm_avg: float | None = None
    cloud_cover_avg: float | None = None


@dataclass(frozen=True)
class WeatherData:
    """Weather provider response."""

    hourly: list[WeatherHour]
    summary: WeatherSummary | None
    latitude: float | None = None
    longitude: float | None = None
    elevation: float | None = None


@dataclass(frozen=True)
class SlopeInfo:
    slope_degrees: float
    aspect_degrees: float
    dzdx: float
    dzdy: float


@dataclass(frozen=True)
class ElevationGrid:
    """3x3 elevation sample around a coordinate plus derived slope."""

    matrix: list[list[float]]
    cell_size_meters: float
    slope: SlopeInfo


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for a fire spread simulation."""

    lat: float = 37.05
    lon: float = 30.49
    hours: int = 8
    grid_size: int = 40
    cell_size: float = 0.0005  # degrees
    seed: int = 1337
    base_polygon: list[LatLon] | None = None
    start_time: datetime | None = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            raise InvalidInputError("Simulation center must be finite")
        if self.hours <= 0:
            raise InvalidInputError(f"hours must be > 0, got {self.hours}")
        if self.grid_size < 3:
            raise InvalidInputError(f"grid_size must be >= 3, got {self.grid_size}")
        if not self.cell_size > 0:
            raise InvalidInputError(f"cell_size must be > 0, got {self.cell_size}")


@dataclass(frozen=True)
class GridGeometry:
    """Geographic placement of the simulation grid."""

    lat: float  # grid center
    lon: float
    grid_size: int
    cell_size: float  # degrees

    @property
    def lat0(self) -> float:
        return self.lat - (self.grid_size / 2) * self.cell_size

    @property
    def lon0(self) -> float:
        return self.lon - (self.grid_size / 2) * self.cell_size

    def cell_bounds(self, row: int, col: int) -> tuple[float, float, float, float]:
        """(min_lat, min_lon, max_lat, max_lon) of a cell."""
        min_lat = self.lat0 + row * self.cell_size
        min_lon = self.lon0 + col * self.cell_size
        return min_lat, min_lon, min_lat + self.cell_size, min_lon + self.cell_size

    def cell_center(self, row: int, col: int) -> LatLon:
        return (
            self.lat0 + (row + 0.5) * self.cell_size,
            self.lon0 + (col + 0.5) * self.cell_size,
        )


@dataclass(frozen=True)
class ModelParameters:
    dryness_factor: float
    slope_vector: tuple[float, float]
    slope_strength: float


@dataclass(frozen=True)
class SimulationResult:
    """Everything produced by one simulation run."""

    config: SimulationConfig
    grid: GridGeometry
    weather: WeatherSummary
    elevation: ElevationGrid
    fwi: FireDangerCodes
    model: ModelParameters
    wind_series: list[WindSample]
    snapshots: list[BurnSnapshot]
    fuel_grid: list[list[float]]
    forecast: list[ForecastPolygon]
    footprint: list[LatLon] = field(default_factory=list)
