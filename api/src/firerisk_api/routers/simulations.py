"""Simulation REST endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool

from firerisk.exceptions import ExternalServiceError, InvalidInputError
from firerisk.geometry.polygon import polygon_area_ha, polygon_to_geojson
from firerisk.providers.base import Provider
from firerisk.spread.simulator import simulate
from firerisk.strategy.selector import analyze_forecast, build_target_pool
from firerisk.types import ForecastPolygon, RiskCell, SimulationConfig, SimulationResult

from firerisk_api.routers.fire import cell_to_schema, codes_to_schema
from firerisk_api.schemas.simulation import (
    ElevationSchema,
    ForecastPolygonSchema,
    ForecastStatsSchema,
    ModelSchema,
    SimulationCreate,
    SimulationMeta,
    SimulationResponse,
    WindSampleSchema,
)
from firerisk_api.services.world import WorldState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/simulations", tags=["simulations"])

# Shared state, injected from main app
provider: Provider | None = None
world: WorldState | None = None


def _polygon_to_schema(entry: ForecastPolygon) -> ForecastPolygonSchema:
    """Convert engine ForecastPolygon to API schema."""
    return ForecastPolygonSchema(
        hour=entry.hour,
        coordinates=[[lon, lat] for lon, lat in entry.coordinates],
        previous_polygon=(
            [[lon, lat] for lon, lat in entry.previous_polygon]
            if entry.previous_polygon is not None
            else None
        ),
        stats=ForecastStatsSchema(**asdict(entry.stats)),
        is_ring=entry.is_ring,
    )


def _footprint_feature(result: SimulationResult) -> dict:
    footprint = result.footprint if len(result.footprint) > 2 else []
    return polygon_to_geojson(
        footprint,
        {"hours": result.config.hours, "area_ha": round(polygon_area_ha(footprint), 2)},
    )


def _select_targets(
    result: SimulationResult, cell_count: int, unit_count: int
) -> list[RiskCell]:
    analyses = analyze_forecast(result.forecast, cell_count=cell_count)
    return build_target_pool(analyses, unit_count)


def _result_to_schema(result: SimulationResult, targets: list[RiskCell]) -> SimulationResponse:
    config = result.config
    return SimulationResponse(
        meta=SimulationMeta(
            lat=result.grid.lat,
            lon=result.grid.lon,
            hours=config.hours,
            grid_size=result.grid.grid_size,
            cell_size=result.grid.cell_size,
            seed=config.seed,
        ),
        weather=asdict(result.weather),
        elevation=ElevationSchema(
            matrix=result.elevation.matrix,
            slope_degrees=round(result.elevation.slope.slope_degrees, 2),
            aspect_degrees=round(result.elevation.slope.aspect_degrees, 1),
        ),
        fwi=codes_to_schema(result.fwi),
        model=ModelSchema(
            dryness_factor=result.model.dryness_factor,
            slope_vector=list(result.model.slope_vector),
            slope_strength=result.model.slope_strength,
        ),
        wind_series=[
            WindSampleSchema(
                hour=hour,
                speed=round(w.speed, 2),
                direction_from=round(w.direction_from, 1),
                direction_to=round(w.direction_to, 1),
            )
            for hour, w in enumerate(result.wind_series)
        ],
        forecast=[_polygon_to_schema(entry) for entry in result.forecast],
        footprint=[[lat, lon] for lat, lon in result.footprint],
        footprint_geojson=_footprint_feature(result),
        targets=[cell_to_schema(cell) for cell in targets],
    )


@router.post("", response_model=SimulationResponse)
async def create_simulation(params: SimulationCreate) -> SimulationResponse:
    """Run a fire spread forecast and refresh the unit target pool."""
    if provider is None or world is None:
        raise HTTPException(status_code=500, detail="Provider not initialized")

    base = params.base_polygon
    if base is None and params.use_fire_area:
        base = list(world.fire_area)

    try:
        config = SimulationConfig(
            lat=params.lat,
            lon=params.lon,
            hours=params.hours,
            grid_size=params.grid_size,
            cell_size=params.cell_size,
            seed=params.seed,
            base_polygon=[(p[0], p[1]) for p in base] if base is not None else None,
        )
        result = await simulate(config, provider)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ExternalServiceError as e:
        logger.warning("Simulation aborted: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e

    targets = await run_in_threadpool(
        _select_targets, result, params.cell_count, params.unit_count
    )
    world.set_targets(targets)

    return _result_to_schema(result, targets)
