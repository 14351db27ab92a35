"""Ranked, deduplicated target cells from per-hour forecast analyses."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from firerisk.analysis.analyzer import DEFAULT_CELL_COUNT, analyze_fire_polygon
from firerisk.types import ForecastPolygon, RiskAnalysis, RiskCell

logger = logging.getLogger(__name__)

MIN_POOL_SIZE = 18
DEDUP_DECIMALS = 5


def pool_cap(unit_count: int) -> int:
    return max(unit_count * 3, MIN_POOL_SIZE)


def analyze_forecast(
    forecast: Sequence[ForecastPolygon],
    cell_count: int = DEFAULT_CELL_COUNT,
) -> list[RiskAnalysis]:
    """Run the risk analyzer on every forecast polygon, hour order preserved."""
    analyses = []
    for entry in forecast:
        polygon = [(lat, lon) for lon, lat in entry.coordinates]
        analyses.append(analyze_fire_polygon(polygon, cell_count=cell_count))
    return analyses


def _hour_targets(analysis: RiskAnalysis, limit: int) -> Iterable[RiskCell]:
    """Best cell first, then candidates by descending score."""
    if analysis.best_cell is not None:
        yield analysis.best_cell
    ranked = sorted(analysis.candidates, key=lambda cell: cell.score, reverse=True)
    yield from ranked[:limit]


def build_target_pool(analyses: Sequence[RiskAnalysis], unit_count: int) -> list[RiskCell]:
    """Collect targets across hours, deduplicated by rounded position.

    Every hour's analysis numbers its cells from C1, so pooled cells are
    re-keyed as ``H{hour}-{id}`` to keep ids unique across the pool.

    Args:
        analyses: Per-hour risk analyses
        unit_count: Number of response units to be assigned

    Returns:
        At most ``max(unit_count * 3, 18)`` cells, highest score first
        (ties keep encounter order)
    """
    cap = pool_cap(unit_count)
    seen: set[tuple[float, float]] = set()
    pool: list[RiskCell] = []

    for hour, analysis in enumerate(analyses):
        for cell in _hour_targets(analysis, cap):
            key = (round(cell.lat, DEDUP_DECIMALS), round(cell.lon, DEDUP_DECIMALS))
            if key in seen:
                continue
            seen.add(key)
            pool.append(replace(cell, id=f"H{hour}-{cell.id}"))
            if len(pool) >= cap:
                break
        if len(pool) >= cap:
            break

    pool.sort(key=lambda cell: cell.score, reverse=True)
    logger.debug("Target pool: %d cells from %d analyses (cap %d)", len(pool), len(analyses), cap)
    return pool
