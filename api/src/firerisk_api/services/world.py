"""Shared fire area and response-unit state.

Writers replace whole immutable values under a lock; readers get the
current snapshot and can hold it as long as they like.
"""

from __future__ import annotations

import logging
import threading

from firerisk.rng import Mulberry32
from firerisk.strategy.deployment import DeploymentState, advance, default_units
from firerisk.types import LatLon, RiskCell

logger = logging.getLogger(__name__)

DEFAULT_FIRE_AREA: tuple[LatLon, ...] = (
    (37.042, 30.475),
    (37.045, 30.495),
    (37.055, 30.495),
    (37.052, 30.47),
)


class WorldState:
    """Current fire polygon, target pool and deployment snapshot."""

    def __init__(self, jitter_seed: int = 2024, max_step: float = 0.0015) -> None:
        self._lock = threading.Lock()
        self._fire_area: tuple[LatLon, ...] = DEFAULT_FIRE_AREA
        self._targets: tuple[RiskCell, ...] = ()
        self._deployment: DeploymentState = default_units()
        self._rng = Mulberry32(jitter_seed)
        self.max_step = max_step

    @property
    def fire_area(self) -> tuple[LatLon, ...]:
        with self._lock:
            return self._fire_area

    def set_fire_area(self, coords: list[LatLon]) -> tuple[LatLon, ...]:
        with self._lock:
            self._fire_area = tuple((float(lat), float(lon)) for lat, lon in coords)
            return self._fire_area

    @property
    def targets(self) -> tuple[RiskCell, ...]:
        with self._lock:
            return self._targets

    def set_targets(self, targets: list[RiskCell]) -> None:
        with self._lock:
            self._targets = tuple(targets)

    @property
    def deployment(self) -> DeploymentState:
        with self._lock:
            return self._deployment

    def tick(self) -> DeploymentState:
        """Advance the deployment one step toward the current targets."""
        with self._lock:
            self._deployment = advance(
                self._deployment, self._targets, self._rng, max_step=self.max_step
            )
            logger.debug(
                "Deployment tick %d (%d targets)", self._deployment.tick, len(self._targets)
            )
            return self._deployment
