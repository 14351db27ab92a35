"""Response-unit targeting from forecast risk analyses."""

from firerisk.strategy.deployment import DeploymentState, ResponseUnit, advance, default_units
from firerisk.strategy.selector import analyze_forecast, build_target_pool

__all__ = [
    "DeploymentState",
    "ResponseUnit",
    "advance",
    "analyze_forecast",
    "build_target_pool",
    "default_units",
]
