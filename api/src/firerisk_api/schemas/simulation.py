"""Pydantic models for simulation endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from firerisk_api.schemas.analysis import FireDangerResponse, RiskCellSchema, check_coordinate_pairs


class SimulationCreate(BaseModel):
    """Request body for running a fire spread forecast."""

    lat: float = Field(default=37.05, ge=-90, le=90, description="Simulation center latitude")
    lon: float = Field(default=30.49, ge=-180, le=180, description="Simulation center longitude")
    hours: int = Field(default=8, gt=0, le=48, description="Simulated hours")
    grid_size: int = Field(default=40, ge=5, le=120, description="Cells per grid side")
    cell_size: float = Field(
        default=0.0005, gt=0, le=0.05, description="Cell edge length (degrees)"
    )
    seed: int = Field(default=1337, description="Random seed")
    base_polygon: list[list[float]] | None = Field(
        default=None, description="Burning area to start from, [[lat, lon], ...]"
    )
    use_fire_area: bool = Field(
        default=False, description="Start from the stored fire area when no base_polygon"
    )
    unit_count: int = Field(
        default=6, ge=0, le=100, description="Response units to build a target pool for"
    )
    cell_count: int = Field(
        default=12, ge=3, le=50, description="Analyzer cells per forecast hour"
    )

    @field_validator("base_polygon")
    @classmethod
    def check_pairs(cls, value: list[list[float]] | None) -> list[list[float]] | None:
        return check_coordinate_pairs(value)


class WindSampleSchema(BaseModel):
    hour: int
    speed: float
    direction_from: float
    direction_to: float


class ForecastStatsSchema(BaseModel):
    probability: float
    cell_count: int
    timestamp: str
    area_ha: float = 0.0


class ForecastPolygonSchema(BaseModel):
    """Cumulative fire extent at one hour; coordinates are [lon, lat]."""

    hour: int
    coordinates: list[list[float]]
    previous_polygon: list[list[float]] | None = None
    stats: ForecastStatsSchema
    is_ring: bool


class ElevationSchema(BaseModel):
    matrix: list[list[float]]
    slope_degrees: float
    aspect_degrees: float


class ModelSchema(BaseModel):
    dryness_factor: float
    slope_vector: list[float]
    slope_strength: float


class SimulationMeta(BaseModel):
    lat: float
    lon: float
    hours: int
    grid_size: int
    cell_size: float
    seed: int


class SimulationResponse(BaseModel):
    """Result of a fire spread forecast."""

    meta: SimulationMeta
    weather: dict[str, float | str | None]
    elevation: ElevationSchema
    fwi: FireDangerResponse
    model: ModelSchema
    wind_series: list[WindSampleSchema]
    forecast: list[ForecastPolygonSchema]
    footprint: list[list[float]]  # [[lat, lng], ...]
    footprint_geojson: dict = {}
    targets: list[RiskCellSchema] = []
