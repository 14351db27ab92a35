"""Terrain slope from a 3x3 elevation sample.

Implements Horn's (1981) third-order finite difference:
    dz/dx = ((c + 2f + i) - (a + 2d + g)) / (8 * cellsize)
    dz/dy = ((g + 2h + i) - (a + 2b + c)) / (8 * cellsize)

Rows of the matrix run from south (row 0) to north (row 2), columns from
west to east, matching how the elevation provider lays out its samples.
"""

from __future__ import annotations

import math
from typing import Sequence

from firerisk.exceptions import InvalidInputError
from firerisk.types import SlopeInfo

# Slope (degrees) that maps to full slope strength in the simulator
FULL_SLOPE_DEGREES = 35.0


def _as_matrix(elevation: Sequence[Sequence[float]]) -> list[list[float]]:
    if len(elevation) != 3 or any(len(row) != 3 for row in elevation):
        raise InvalidInputError("Elevation matrix must be 3x3")
    try:
        z = [[float(v) for v in row] for row in elevation]
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Elevation matrix has non-numeric values: {e}") from e
    if not all(math.isfinite(v) for row in z for v in row):
        raise InvalidInputError("Elevation matrix has non-finite values")
    return z


def calculate_slope(
    elevation: Sequence[Sequence[float]], cell_size_meters: float
) -> SlopeInfo:
    """Calculate slope, aspect and gradients from a 3x3 elevation grid.

    Args:
        elevation: 3x3 elevations (m), rows south to north
        cell_size_meters: Spacing between samples (m)

    Returns:
        SlopeInfo with slope (degrees), aspect (degrees, 0-360) and
        the raw dz/dx, dz/dy gradients
    """
    if not cell_size_meters > 0:
        raise InvalidInputError(f"cell_size_meters must be > 0, got {cell_size_meters}")
    z = _as_matrix(elevation)

    dzdx = ((z[0][2] + 2 * z[1][2] + z[2][2]) - (z[0][0] + 2 * z[1][0] + z[2][0])) / (
        8.0 * cell_size_meters
    )
    dzdy = ((z[2][0] + 2 * z[2][1] + z[2][2]) - (z[0][0] + 2 * z[0][1] + z[0][2])) / (
        8.0 * cell_size_meters
    )

    slope_degrees = math.degrees(math.atan(math.hypot(dzdx, dzdy)))
    aspect_degrees = (math.degrees(math.atan2(dzdy, -dzdx)) + 360.0) % 360.0

    return SlopeInfo(
        slope_degrees=slope_degrees,
        aspect_degrees=aspect_degrees,
        dzdx=dzdx,
        dzdy=dzdy,
    )


def slope_strength(slope_degrees: float) -> float:
    """Normalized slope strength in [0, 1]."""
    return min(max(slope_degrees / FULL_SLOPE_DEGREES, 0.0), 1.0)
