"""Response-unit deployment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from firerisk.strategy.deployment import DeploymentState

from firerisk_api.schemas.analysis import DeploymentResponse, UnitSchema
from firerisk_api.services.world import WorldState

router = APIRouter(prefix="/api/v1/units", tags=["units"])

# Shared state, injected from main app
world: WorldState | None = None


def _world() -> WorldState:
    if world is None:
        raise HTTPException(status_code=500, detail="World state not initialized")
    return world


def deployment_to_schema(state: DeploymentState) -> DeploymentResponse:
    return DeploymentResponse(
        tick=state.tick,
        units=[
            UnitSchema(
                id=u.id,
                name=u.name,
                kind=u.kind.value,
                lat=u.position[0],
                lon=u.position[1],
                home_lat=u.home[0],
                home_lon=u.home[1],
                status=u.status,
                assigned_cell=u.assigned_cell,
            )
            for u in state.units
        ],
    )


@router.get("", response_model=DeploymentResponse)
async def get_units() -> DeploymentResponse:
    """Current deployment snapshot."""
    return deployment_to_schema(_world().deployment)


@router.post("/tick", response_model=DeploymentResponse)
async def tick_units() -> DeploymentResponse:
    """Advance all units one step toward the latest target pool."""
    return deployment_to_schema(_world().tick())
