"""Tests for the Rothermel surface spread model."""

import pytest

from firerisk.spread.rothermel import (
    FuelModel,
    fuel_model_for_dryness,
    propagating_flux_ratio,
    rate_of_spread,
    reaction_intensity,
    slope_coefficient,
    wind_coefficient,
)


@pytest.fixture
def grass():
    """Moderately dry grass bed."""
    return fuel_model_for_dryness(1.0)


class TestFuelModel:
    """Test derived fuel bed properties."""

    def test_sigma_weighted_by_load(self, grass):
        assert grass.sigma_100h < grass.sigma < grass.sigma_1h

    def test_packing_ratio_positive(self, grass):
        assert 0.0 < grass.packing_ratio < 1.0
        assert grass.optimal_packing_ratio > 0.0

    def test_dryness_lowers_moisture(self):
        assert fuel_model_for_dryness(1.5).mf < fuel_model_for_dryness(0.5).mf

    def test_dryness_raises_fine_load(self):
        assert fuel_model_for_dryness(1.5).w0_1h > fuel_model_for_dryness(0.5).w0_1h

    def test_moisture_floor(self):
        assert fuel_model_for_dryness(1.8).mf == 5.0


class TestComponents:
    def test_reaction_intensity_positive(self, grass):
        assert reaction_intensity(grass) > 0.0

    def test_reaction_intensity_drops_with_moisture(self):
        dry = FuelModel(w0_1h=0.3, w0_10h=0.1, w0_100h=0.05, mf=8.0)
        wet = FuelModel(w0_1h=0.3, w0_10h=0.1, w0_100h=0.05, mf=20.0)
        assert reaction_intensity(wet) < reaction_intensity(dry)

    def test_no_reaction_at_extinction_moisture(self):
        fuel = FuelModel(w0_1h=0.3, w0_10h=0.1, w0_100h=0.05, mf=25.0, mx=25.0)
        assert reaction_intensity(fuel) == pytest.approx(0.0, abs=1e-9)

    def test_flux_ratio_fraction(self, grass):
        assert 0.0 < propagating_flux_ratio(grass) < 1.0

    def test_wind_coefficient(self, grass):
        assert wind_coefficient(grass, 0.0) == 0.0
        assert wind_coefficient(grass, 20.0) > wind_coefficient(grass, 5.0)

    def test_slope_coefficient_quadratic(self, grass):
        assert slope_coefficient(grass, 0.0) == 0.0
        assert slope_coefficient(grass, 0.4) == pytest.approx(4.0 * slope_coefficient(grass, 0.2))


class TestRateOfSpread:
    """Test directional rate of spread (cells/hour)."""

    def test_no_wind_no_slope_positive(self, grass):
        assert rate_of_spread(grass, 0.0, 0.0, 0.0, 0.0) > 0.0

    def test_wind_alignment_increases_spread(self, grass):
        across = rate_of_spread(grass, 15.0, 0.0, 0.0, 0.0)
        partial = rate_of_spread(grass, 15.0, 0.0, 0.5, 0.0)
        downwind = rate_of_spread(grass, 15.0, 0.0, 1.0, 0.0)
        assert across < partial < downwind

    def test_slope_alignment_increases_spread(self, grass):
        flat = rate_of_spread(grass, 0.0, 20.0, 0.0, 0.0)
        aligned = rate_of_spread(grass, 0.0, 20.0, 0.0, 1.0)
        assert aligned > flat

    def test_negative_alignment_counts_as_none(self, grass):
        base = rate_of_spread(grass, 10.0, 15.0, 0.0, 0.0)
        assert rate_of_spread(grass, 10.0, 15.0, -1.0, -1.0) == base

    def test_wetter_fuel_spreads_slower(self):
        dry = rate_of_spread(fuel_model_for_dryness(1.6), 10.0, 0.0, 1.0, 0.0)
        wet = rate_of_spread(fuel_model_for_dryness(0.4), 10.0, 0.0, 1.0, 0.0)
        assert wet < dry
