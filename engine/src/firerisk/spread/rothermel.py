"""Rothermel (1972) surface fire rate of spread.

Single representative fuel bed based on NFFL Fuel Model 3 (tall grass),
with loads and dead fuel moisture scaled by the FWI-derived dryness
factor. Rate of spread is returned in grid cells per hour.

Key equation:
    R = I_R * xi * (1 + phi_w + phi_s) / (rho_b * epsilon * Q_ig)

References:
    Rothermel, R.C. (1972). A mathematical model for predicting fire spread
    in wildland fuels. USDA Forest Service Research Paper INT-115.
    Albini, F.A. (1976). Estimating wildfire behavior and effects.
    USDA Forest Service General Technical Report INT-30.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# 1 ft/min in km/h
FT_MIN_TO_KM_H = 0.018288

# Edge length of a simulation cell (km)
CELL_SIZE_KM = 0.05

MS_TO_MPH = 2.23694


@dataclass(frozen=True)
class FuelModel:
    """Fuel bed parameters (imperial units, as in Rothermel 1972).

    Attributes:
        w0_1h, w0_10h, w0_100h: Fuel load by size class (tons/acre)
        sigma_1h, sigma_10h, sigma_100h: Surface-area-to-volume ratio (1/ft)
        delta: Fuel bed depth (ft)
        mf: Dead fuel moisture (%)
        mx: Dead fuel moisture of extinction (%)
        h: Heat content (BTU/lb)
        rho_p: Oven-dry particle density (lb/ft^3)
        st: Total mineral content
        se: Effective mineral content
    """

    w0_1h: float
    w0_10h: float
    w0_100h: float
    sigma_1h: float = 1500.0
    sigma_10h: float = 109.0
    sigma_100h: float = 30.0
    delta: float = 2.5
    mf: float = 15.0
    mx: float = 25.0
    h: float = 8000.0
    rho_p: float = 32.0
    st: float = 0.0555
    se: float = 0.01

    @property
    def total_load(self) -> float:
        return self.w0_1h + self.w0_10h + self.w0_100h

    @property
    def sigma(self) -> float:
        """Load-weighted surface-area-to-volume ratio (1/ft)."""
        return (
            self.w0_1h * self.sigma_1h
            + self.w0_10h * self.sigma_10h
            + self.w0_100h * self.sigma_100h
        ) / self.total_load

    @property
    def bulk_density(self) -> float:
        """Oven-dry bulk density (lb/ft^3); tons/acre converted to lb/ft^2."""
        return (self.total_load / self.delta) * 2000.0 / 43560.0

    @property
    def packing_ratio(self) -> float:
        return self.bulk_density / self.rho_p

    @property
    def optimal_packing_ratio(self) -> float:
        return 3.348 * self.sigma**-0.8189


def fuel_model_for_dryness(dryness_factor: float) -> FuelModel:
    """Grass fuel bed whose fine loads grow and moisture falls with dryness."""
    load_scale = 0.8 + 0.4 * dryness_factor
    return FuelModel(
        w0_1h=0.3 * load_scale,
        w0_10h=0.1 * load_scale,
        w0_100h=0.05,
        mf=max(5.0, 30.0 - dryness_factor * 15.0),
    )


def reaction_intensity(fuel: FuelModel) -> float:
    """Reaction intensity I_R (BTU/ft^2/min)."""
    sigma = fuel.sigma
    ratio = fuel.packing_ratio / fuel.optimal_packing_ratio

    mf_ratio = fuel.mf / fuel.mx
    eta_m = 1.0 - 2.59 * mf_ratio + 5.11 * mf_ratio**2 - 3.52 * mf_ratio**3
    eta_s = 0.174 * fuel.se**-0.19

    gamma_max = sigma**1.5 / (495.0 + 0.0594 * sigma**1.5)
    a = 133.0 * sigma**-0.7913
    gamma = gamma_max * ratio**a * math.exp(a * (1.0 - ratio))
    return gamma * fuel.total_load * fuel.h * eta_m * eta_s


def propagating_flux_ratio(fuel: FuelModel) -> float:
    sigma = fuel.sigma
    return math.exp((0.792 + 0.681 * sigma**0.5) * (fuel.packing_ratio + 0.1)) / (
        192.0 + 0.2595 * sigma
    )


def wind_coefficient(fuel: FuelModel, effective_wind: float) -> float:
    """phi_w for a wind (mph) already projected onto the spread direction."""
    sigma = fuel.sigma
    c = 7.47 * math.exp(-0.133 * sigma**0.55)
    b = 0.02526 * sigma**0.54
    e = 0.715 * math.exp(-3.59e-4 * sigma)
    ratio = fuel.packing_ratio / fuel.optimal_packing_ratio
    return c * max(0.0, effective_wind) ** b * ratio ** (-e)


def slope_coefficient(fuel: FuelModel, effective_tan_slope: float) -> float:
    """phi_s for a tangent slope already projected onto the spread direction."""
    return 5.275 * fuel.packing_ratio**-0.3 * effective_tan_slope**2


def rate_of_spread(
    fuel: FuelModel,
    wind_speed_mph: float,
    slope_degrees: float,
    wind_alignment: float,
    slope_alignment: float,
) -> float:
    """Directional rate of spread in cells per hour.

    Args:
        fuel: Fuel bed
        wind_speed_mph: Midflame wind speed (mph)
        slope_degrees: Terrain slope (degrees)
        wind_alignment: Projection of spread direction on the downwind
            vector; negative values count as no wind
        slope_alignment: Projection of spread direction on the slope
            vector; negative values count as flat

    Returns:
        Rate of spread (cells/hour, >= 0)
    """
    tan_slope = math.tan(math.radians(slope_degrees))
    effective_wind = wind_speed_mph * max(0.0, wind_alignment)
    effective_slope = tan_slope * max(0.0, slope_alignment)

    ir = reaction_intensity(fuel)
    xi = propagating_flux_ratio(fuel)
    phi_w = wind_coefficient(fuel, effective_wind)
    phi_s = slope_coefficient(fuel, effective_slope)

    ros_ft_min = (ir * xi * (1.0 + phi_w + phi_s)) / (
        fuel.bulk_density * 0.3 * (250.0 + 1116.0 * fuel.mf / 100.0)
    )
    ros_cells_h = ros_ft_min * FT_MIN_TO_KM_H / CELL_SIZE_KM
    return max(0.0, ros_cells_h)
