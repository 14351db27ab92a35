"""Pydantic models for fire danger, analysis and unit endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


def check_coordinate_pairs(value: list[list[float]] | None) -> list[list[float]] | None:
    if value is None:
        return value
    for pair in value:
        if len(pair) != 2:
            raise ValueError("each coordinate must be a [lat, lon] pair")
    return value


class PreviousCodesParams(BaseModel):
    """Previous day's moisture codes."""

    ffmc: float = Field(default=85.0, ge=0, le=101, description="Fine Fuel Moisture Code")
    dmc: float = Field(default=6.0, ge=0, description="Duff Moisture Code")
    dc: float = Field(default=15.0, ge=0, description="Drought Code")


class FireDangerRequest(BaseModel):
    """Weather observation for a fire danger calculation."""

    temperature: float = Field(..., ge=-60, le=60, description="Temperature in Celsius")
    relative_humidity: float = Field(..., description="Relative humidity (%), clamped 0-100")
    wind_speed: float = Field(..., ge=0, le=100, description="Wind speed at 10m (m/s)")
    rain_24h: float = Field(default=0.0, ge=0, description="24-hour precipitation (mm)")
    month: int = Field(..., ge=1, le=12, description="Month (1-12)")
    previous: PreviousCodesParams | None = None


class FireDangerResponse(BaseModel):
    ffmc: float
    dmc: float
    dc: float
    isi: float
    bui: float
    fwi: float
    classification: str


class AnalysisRequest(BaseModel):
    """Request body for a risk-cell analysis."""

    polygon: list[list[float]] | None = Field(
        default=None, description="Fire polygon [[lat, lon], ...]; stored fire area if omitted"
    )
    cell_count: int = Field(default=12, ge=3, le=50, description="Desired number of cells")
    search_radius_factor: float = Field(
        default=1.5, ge=0.5, le=5, description="Search radius as a multiple of fire radius"
    )

    @field_validator("polygon")
    @classmethod
    def check_pairs(cls, value: list[list[float]] | None) -> list[list[float]] | None:
        return check_coordinate_pairs(value)


class RiskCellSchema(BaseModel):
    id: str
    lat: float
    lon: float
    fire_power: float
    spread_probability: float
    area: int
    value_at_risk: int
    crew_risk: float
    time_to_impact: int
    fire_direction: float
    fire_speed: float
    wind_speed: float
    wind_direction: float
    temperature: float
    humidity: float
    fuel_moisture: float
    slope: float
    front_distance: float
    distance_to_center: float
    wind_fire_alignment: float
    danger_multiplier: float
    inside_fire: bool
    score: float


class AnalysisResponse(BaseModel):
    coords: list[list[float]]
    center: list[float]
    radius: float
    search_radius: float
    cells: list[RiskCellSchema]
    candidates: list[RiskCellSchema]
    best_cell: RiskCellSchema | None


class FireArea(BaseModel):
    """Current fire polygon, [[lat, lon], ...]."""

    coords: list[list[float]]

    @field_validator("coords")
    @classmethod
    def check_pairs(cls, value: list[list[float]]) -> list[list[float]]:
        check_coordinate_pairs(value)
        return value


class UnitSchema(BaseModel):
    id: str
    name: str
    kind: str
    lat: float
    lon: float
    home_lat: float
    home_lon: float
    status: str
    assigned_cell: str | None = None


class DeploymentResponse(BaseModel):
    tick: int
    units: list[UnitSchema]
