"""Response-unit world state and its per-tick update.

The whole world is one immutable DeploymentState. advance() takes the
current state and returns the next one; readers holding an older state
never see it change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from firerisk.rng import RandomSource
from firerisk.types import LatLon, RiskCell

# Largest move toward a target per tick (degrees)
DEFAULT_MAX_STEP = 0.0015


class UnitKind(str, Enum):
    FIREFIGHTER = "firefighter"
    DRONE = "drone"


# Full width of the random wander applied to idle units (degrees)
JITTER_AMPLITUDE = {
    UnitKind.FIREFIGHTER: 0.0008,
    UnitKind.DRONE: 0.0005,
}


@dataclass(frozen=True)
class ResponseUnit:
    """A firefighter or drone with a fixed home position."""

    id: str
    name: str
    kind: UnitKind
    home: LatLon
    position: LatLon
    status: str = "active"
    assigned_cell: str | None = None


@dataclass(frozen=True)
class DeploymentState:
    tick: int
    units: tuple[ResponseUnit, ...]

    def unit(self, unit_id: str) -> ResponseUnit | None:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None


def default_units() -> DeploymentState:
    """Stock roster of four firefighters and two drones."""
    roster = [
        ("FF01", "Ahmet", UnitKind.FIREFIGHTER, (37.05, 30.48), "active"),
        ("FF02", "Berke", UnitKind.FIREFIGHTER, (37.06, 30.5), "resting"),
        ("FF03", "Merve", UnitKind.FIREFIGHTER, (37.04, 30.49), "in-danger"),
        ("FF04", "Ayse", UnitKind.FIREFIGHTER, (37.055, 30.52), "active"),
        ("D1", "Drone-1", UnitKind.DRONE, (37.053, 30.482), "scanning"),
        ("D2", "Drone-2", UnitKind.DRONE, (37.047, 30.508), "returning"),
    ]
    units = tuple(
        ResponseUnit(id=uid, name=name, kind=kind, home=home, position=home, status=status)
        for uid, name, kind, home, status in roster
    )
    return DeploymentState(tick=0, units=units)


def _distance(a: LatLon, b: LatLon) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def step_toward(position: LatLon, target: LatLon, max_step: float) -> LatLon:
    """Move from position toward target by at most max_step."""
    distance = _distance(position, target)
    if distance <= max_step or distance == 0.0:
        return target
    scale = max_step / distance
    return (
        position[0] + (target[0] - position[0]) * scale,
        position[1] + (target[1] - position[1]) * scale,
    )


def _jitter(unit: ResponseUnit, rng: RandomSource) -> LatLon:
    amplitude = JITTER_AMPLITUDE[unit.kind]
    return (
        unit.position[0] + (rng.next() - 0.5) * amplitude,
        unit.position[1] + (rng.next() - 0.5) * amplitude,
    )


def advance(
    state: DeploymentState,
    targets: Sequence[RiskCell],
    rng: RandomSource,
    max_step: float = DEFAULT_MAX_STEP,
) -> DeploymentState:
    """Compute the next tick.

    Units are matched greedily, in roster order, to the nearest remaining
    target measured from each unit's home. Assigned units move toward
    their target by at most ``max_step``; units left without a target
    wander randomly and are unassigned.
    """
    remaining = list(targets)
    units = []
    for unit in state.units:
        if remaining:
            idx = min(
                range(len(remaining)),
                key=lambda i: _distance(unit.home, (remaining[i].lat, remaining[i].lon)),
            )
            nearest = remaining.pop(idx)
            position = step_toward(unit.position, (nearest.lat, nearest.lon), max_step)
            units.append(replace(unit, position=position, assigned_cell=nearest.id))
        else:
            units.append(replace(unit, position=_jitter(unit, rng), assigned_cell=None))
    return DeploymentState(tick=state.tick + 1, units=tuple(units))
