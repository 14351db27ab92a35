"""Risk-cell analysis around active fire polygons."""

from firerisk.analysis.analyzer import analyze_fire_polygon, compute_score

__all__ = ["analyze_fire_polygon", "compute_score"]
