"""Fire danger, fire area and risk-cell analysis endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from firerisk.analysis.analyzer import analyze_fire_polygon
from firerisk.fwi.calculator import compute_fire_danger
from firerisk.types import FireDangerCodes, PreviousCodes, RiskAnalysis, RiskCell

from firerisk_api.schemas.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    FireArea,
    FireDangerRequest,
    FireDangerResponse,
    RiskCellSchema,
)
from firerisk_api.services.world import WorldState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["fire"])

# Shared state, injected from main app
world: WorldState | None = None


def _world() -> WorldState:
    if world is None:
        raise HTTPException(status_code=500, detail="World state not initialized")
    return world


def codes_to_schema(codes: FireDangerCodes) -> FireDangerResponse:
    data = asdict(codes)
    data["classification"] = codes.classification.value
    return FireDangerResponse(**data)


def cell_to_schema(cell: RiskCell) -> RiskCellSchema:
    return RiskCellSchema(**asdict(cell))


def analysis_to_schema(analysis: RiskAnalysis) -> AnalysisResponse:
    return AnalysisResponse(
        coords=[[lat, lon] for lat, lon in analysis.coords],
        center=list(analysis.center),
        radius=analysis.radius,
        search_radius=analysis.search_radius,
        cells=[cell_to_schema(c) for c in analysis.cells],
        candidates=[cell_to_schema(c) for c in analysis.candidates],
        best_cell=cell_to_schema(analysis.best_cell) if analysis.best_cell else None,
    )


@router.post("/fwi", response_model=FireDangerResponse)
async def fire_danger(params: FireDangerRequest) -> FireDangerResponse:
    """Compute FWI codes for a weather observation."""
    previous = PreviousCodes(**params.previous.model_dump()) if params.previous else None
    codes = compute_fire_danger(
        temperature=params.temperature,
        relative_humidity=params.relative_humidity,
        wind_speed=params.wind_speed,
        rain_24h=params.rain_24h,
        month=params.month,
        previous_codes=previous,
    )
    return codes_to_schema(codes)


@router.get("/fire-area", response_model=FireArea)
async def get_fire_area() -> FireArea:
    return FireArea(coords=[[lat, lon] for lat, lon in _world().fire_area])


@router.put("/fire-area", response_model=FireArea)
async def set_fire_area(area: FireArea) -> FireArea:
    """Replace the stored fire polygon."""
    coords = _world().set_fire_area([(p[0], p[1]) for p in area.coords])
    logger.info("Fire area replaced (%d vertices)", len(coords))
    return FireArea(coords=[[lat, lon] for lat, lon in coords])


@router.post("/analysis", response_model=AnalysisResponse)
async def analyze(params: AnalysisRequest) -> AnalysisResponse:
    """Score candidate response cells around a fire polygon."""
    polygon = params.polygon if params.polygon is not None else list(_world().fire_area)
    analysis = analyze_fire_polygon(
        polygon,
        cell_count=params.cell_count,
        search_radius_factor=params.search_radius_factor,
    )
    return analysis_to_schema(analysis)
