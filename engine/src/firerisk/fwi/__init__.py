"""Canadian Fire Weather Index (FWI) System."""

from firerisk.fwi.calculator import FWICalculator, classify_fwi, compute_fire_danger

__all__ = ["FWICalculator", "classify_fwi", "compute_fire_danger"]
