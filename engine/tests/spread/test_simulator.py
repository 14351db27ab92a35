"""Tests for the fire spread simulator.

Integration tests covering the full simulation pipeline:
weather + elevation -> fuel/slope/wind grids -> hourly automaton -> forecast.
"""

import threading
from datetime import datetime, timezone

import pytest

from firerisk.exceptions import ExternalServiceError, InvalidInputError
from firerisk.geometry.polygon import polygon_area
from firerisk.rng import Mulberry32
from firerisk.spread import simulator as simulator_module
from firerisk.spread.grids import wind_sample
from firerisk.spread.simulator import (
    FUEL_CONSUMPTION,
    SpreadSimulator,
    resolve_grid,
    run_forecast,
    simulate,
    summarize_weather,
)
from firerisk.types import SimulationConfig, WeatherData, WeatherHour

START = datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)


def _simulator(size=9, fuel=1.0, hours=4, seeds=None, wind_speed=4.0):
    return SpreadSimulator(
        fuel=[[fuel] * size for _ in range(size)],
        slope_grid=[[0.0] * size for _ in range(size)],
        slope_vector=None,
        wind_series=[wind_sample(wind_speed, 270.0)] * (hours + 1),
        dryness=1.0,
        rng=Mulberry32(1337),
        seeds=seeds,
    )


def _adjacent(a, b):
    return max(abs(a[0] - b[0]), abs(a[1] - b[1])) == 1


class TestSpreadSimulator:
    """Test the cellular automaton in isolation."""

    def test_hour_zero_is_center_seed(self):
        snapshots = list(_simulator(size=9).run(2))
        assert snapshots[0].hour == 0
        assert [(c.row, c.col) for c in snapshots[0].cells] == [(4, 4)]
        assert snapshots[0].cells[0].probability == 1.0

    def test_one_snapshot_per_hour(self):
        snapshots = list(_simulator().run(4))
        assert [s.hour for s in snapshots] == [0, 1, 2, 3, 4]

    def test_first_hour_only_neighbours(self):
        snapshots = list(_simulator().run(1))
        assert snapshots[1].cells
        for cell in snapshots[1].cells:
            assert _adjacent((cell.row, cell.col), (4, 4))
            assert 0.0 <= cell.probability <= 1.0

    def test_no_same_hour_chaining(self):
        """A cell ignited at hour t can only have a neighbour burning before t."""
        sim = _simulator(size=15, hours=6)
        snapshots = list(sim.run(6))
        for snap in snapshots[1:]:
            for cell in snap.cells:
                earlier = [
                    (r, c)
                    for r in range(cell.row - 1, cell.row + 2)
                    for c in range(cell.col - 1, cell.col + 2)
                    if 0 <= r < 15 and 0 <= c < 15 and 0 <= sim.burned_hour[r][c] < snap.hour
                ]
                assert earlier

    def test_cells_ignite_once(self):
        snapshots = list(_simulator(size=11, hours=6).run(6))
        cells = [(c.row, c.col) for s in snapshots for c in s.cells]
        assert len(cells) == len(set(cells))

    def test_fuel_non_increasing_and_floored(self):
        sim = _simulator(size=9, hours=5)
        history = []
        for _ in sim.run(5):
            history.append([row[:] for row in sim.fuel])
        for before, after in zip(history, history[1:]):
            for r in range(9):
                for c in range(9):
                    assert after[r][c] <= before[r][c]
                    assert after[r][c] >= 0.0

    def test_burning_cell_consumes_fuel(self):
        sim = _simulator(size=5, fuel=1.0)
        list(sim.run(1))
        assert sim.fuel[2][2] == pytest.approx(1.0 - FUEL_CONSUMPTION)

    def test_low_fuel_blocks_spread(self):
        snapshots = list(_simulator(fuel=0.05, hours=3).run(3))
        assert all(not s.cells for s in snapshots[1:])

    def test_explicit_seeds(self):
        sim = _simulator(size=6, seeds=[(0, 0), (5, 5), (0, 0)])
        initial = next(sim.run(1))
        assert [(c.row, c.col) for c in initial.cells] == [(0, 0), (5, 5)]

    def test_seeds_clamped_to_grid(self):
        sim = _simulator(size=6, seeds=[(-3, 10)])
        initial = next(sim.run(1))
        assert [(c.row, c.col) for c in initial.cells] == [(0, 5)]

    def test_snapshot_carries_hour_wind(self):
        sim = SpreadSimulator(
            fuel=[[1.0] * 5 for _ in range(5)],
            slope_grid=[[0.0] * 5 for _ in range(5)],
            slope_vector=None,
            wind_series=[wind_sample(1.0, 0.0), wind_sample(2.0, 90.0)],
            dryness=1.0,
            rng=Mulberry32(1),
        )
        snapshots = list(sim.run(3))
        assert [s.wind.speed for s in snapshots] == [1.0, 2.0, 2.0, 2.0]

    def test_deterministic(self):
        a = list(_simulator(size=15, hours=5).run(5))
        b = list(_simulator(size=15, hours=5).run(5))
        assert a == b


class TestSimulationConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"hours": 0},
            {"grid_size": 2},
            {"cell_size": 0.0},
            {"lat": float("nan")},
            {"lon": float("inf")},
        ],
    )
    def test_invalid_config_rejected(self, kwargs):
        with pytest.raises(InvalidInputError):
            SimulationConfig(**kwargs)


class TestResolveGrid:
    def test_without_polygon(self):
        grid, base = resolve_grid(SimulationConfig(lat=37.0, lon=30.0, grid_size=20))
        assert (grid.lat, grid.lon, grid.grid_size, grid.cell_size) == (37.0, 30.0, 20, 0.0005)
        assert base == []

    def test_recenters_and_widens(self, fire_polygon):
        grid, base = resolve_grid(SimulationConfig(grid_size=20, base_polygon=fire_polygon))
        assert base[0] == base[-1]
        assert 37.042 < grid.lat < 37.055
        assert 30.47 < grid.lon < 30.495
        # Longitude extent 0.025 over 60% of 20 cells
        assert grid.cell_size == pytest.approx(0.025 / 12.0)

    def test_degenerate_polygon_ignored(self):
        grid, base = resolve_grid(
            SimulationConfig(lat=1.0, lon=2.0, base_polygon=[(0.0, 0.0), (1.0, 1.0)])
        )
        assert (grid.lat, grid.lon) == (1.0, 2.0)
        assert base == []


class TestSummarizeWeather:
    def test_derives_from_first_hour(self):
        hourly = [
            WeatherHour(time="2024-07-15T00:00", temperature_2m=22.0, precipitation=0.4),
            WeatherHour(time="2024-07-15T01:00", temperature_2m=21.0, precipitation=0.6),
        ]
        summary = summarize_weather(WeatherData(hourly=hourly, summary=None))
        assert summary.temperature_2m == 22.0
        assert summary.precipitation_24h == pytest.approx(1.0)

    def test_empty_weather(self):
        summary = summarize_weather(WeatherData(hourly=[], summary=None))
        assert summary.at is None
        assert summary.precipitation_24h == 0.0


class TestSimulate:
    """End-to-end runs against a deterministic provider."""

    async def test_one_hour_scenario(self, provider):
        config = SimulationConfig(seed=1337, hours=1, grid_size=10, start_time=START)
        result = await simulate(config, provider)

        assert len(result.snapshots) == 2
        assert [(c.row, c.col) for c in result.snapshots[0].cells] == [(5, 5)]
        for cell in result.snapshots[1].cells:
            assert _adjacent((cell.row, cell.col), (5, 5))
            assert 0.0 <= cell.probability <= 1.0

    async def test_fetches_both_inputs(self, provider):
        await simulate(SimulationConfig(hours=1, grid_size=8), provider)
        assert provider.weather_calls == 1
        assert provider.elevation_calls == 1

    async def test_deterministic(self, make_provider):
        config = SimulationConfig(seed=42, hours=5, grid_size=20, start_time=START)
        a = await simulate(config, make_provider())
        b = await simulate(config, make_provider())
        assert a.snapshots == b.snapshots
        assert a.footprint == b.footprint
        assert a.forecast == b.forecast

    async def test_seed_changes_outcome(self, make_provider):
        a = await simulate(SimulationConfig(seed=1, hours=5, grid_size=20), make_provider())
        b = await simulate(SimulationConfig(seed=2, hours=5, grid_size=20), make_provider())
        assert a.fuel_grid != b.fuel_grid

    async def test_weather_failure_propagates(self, provider):
        provider.fail_weather = True
        with pytest.raises(ExternalServiceError) as exc_info:
            await simulate(SimulationConfig(hours=1), provider)
        assert exc_info.value.service == "weather"

    async def test_elevation_failure_propagates(self, provider):
        provider.fail_elevation = True
        with pytest.raises(ExternalServiceError):
            await simulate(SimulationConfig(hours=1), provider)

    async def test_model_parameters(self, provider):
        result = await simulate(SimulationConfig(hours=2, grid_size=10), provider)
        assert 0.4 <= result.model.dryness_factor <= 1.8
        # Terrain rises to the north; the slope vector is the negated gradient
        assert result.model.slope_vector == pytest.approx((0.0, -1.0))
        assert 0.0 < result.model.slope_strength <= 1.0
        assert len(result.wind_series) == 3
        assert result.fwi.classification.value in {
            "low", "moderate", "high", "very-high", "extreme"
        }

    async def test_fuel_grid_bounds(self, provider):
        result = await simulate(SimulationConfig(hours=3, grid_size=12), provider)
        assert all(0.0 <= v <= 1.0 for row in result.fuel_grid for v in row)

    async def test_forecast_never_shrinks(self, provider):
        result = await simulate(SimulationConfig(hours=8, grid_size=20, start_time=START), provider)
        areas = [polygon_area(entry.coordinates) for entry in result.forecast]
        assert len(areas) == 9
        for before, after in zip(areas, areas[1:]):
            assert after >= before - 1e-15

    async def test_forecast_timestamps(self, provider):
        result = await simulate(SimulationConfig(hours=2, grid_size=10, start_time=START), provider)
        stamps = [entry.stats.timestamp for entry in result.forecast]
        assert stamps == ["2024-07-15T12:00:00Z", "2024-07-15T13:00:00Z", "2024-07-15T14:00:00Z"]

    async def test_footprint_is_closed_ring(self, provider):
        result = await simulate(SimulationConfig(hours=6, grid_size=20), provider)
        if len(result.footprint) > 2:
            assert result.footprint[0] == result.footprint[-1]

    async def test_base_polygon_run(self, provider, fire_polygon):
        config = SimulationConfig(hours=3, grid_size=20, base_polygon=fire_polygon, start_time=START)
        result = await simulate(config, provider)

        hour0 = result.forecast[0]
        assert hour0.hour == 0
        assert hour0.is_ring is False
        assert hour0.stats.probability == 1.0
        assert hour0.coordinates[0] == (30.475, 37.042)
        assert hour0.coordinates[0] == hour0.coordinates[-1]
        # Seeded cells cover the polygon, not just the center
        assert len(result.snapshots[0].cells) > 10
        assert [entry.hour for entry in result.forecast] == [0, 1, 2, 3]

    async def test_automaton_runs_on_worker_thread(self, provider, monkeypatch):
        loop_thread = threading.get_ident()
        threads = []
        real_build = simulator_module.build_forecast_polygons

        def recording_build(*args, **kwargs):
            threads.append(threading.get_ident())
            return real_build(*args, **kwargs)

        monkeypatch.setattr(simulator_module, "build_forecast_polygons", recording_build)
        await simulate(SimulationConfig(hours=2, grid_size=10), provider)
        assert len(threads) == 1
        assert threads[0] != loop_thread

    async def test_run_forecast_matches_simulate(self, make_provider):
        config = SimulationConfig(seed=7, hours=4, grid_size=16, start_time=START)
        expected = await simulate(config, make_provider())

        source = make_provider()
        grid, base = resolve_grid(config)
        weather = await source.fetch_weather(grid.lat, grid.lon)
        elevation = await source.fetch_elevation_grid(grid.lat, grid.lon)
        result = run_forecast(config, grid, base, weather, elevation)

        assert result.snapshots == expected.snapshots
        assert result.forecast == expected.forecast
