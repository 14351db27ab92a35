"""Fire spread simulation orchestrator.

The SpreadSimulator steps an hourly stochastic cellular automaton over a
fuel grid. Every burning cell tries to ignite its 8 neighbours with a
probability derived from the Rothermel rate of spread toward that
neighbour. It yields a BurnSnapshot per hour, enabling streaming.

simulate() wires the automaton to live inputs: it fetches weather and
elevation concurrently, then hands them to run_forecast() on a worker
thread, which derives FWI, dryness and slope, runs the automaton and
builds the forecast polygons.

Usage:
    result = await simulate(SimulationConfig(lat=37.05, lon=30.49), provider)
    for entry in result.forecast:
        print(entry.hour, entry.stats.cell_count)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Generator, Sequence

from firerisk.fwi.calculator import compute_fire_danger
from firerisk.geometry.polygon import normalize_polygon, polygon_centroid
from firerisk.providers.base import Provider
from firerisk.rng import Mulberry32, RandomSource
from firerisk.spread.forecast import build_footprint, build_forecast_polygons
from firerisk.spread.grids import (
    build_fuel_grid,
    build_slope_grid,
    build_wind_series,
    dryness_factor,
    normalize,
    seed_cells_from_polygon,
)
from firerisk.spread.rothermel import MS_TO_MPH, fuel_model_for_dryness, rate_of_spread
from firerisk.spread.slope import FULL_SLOPE_DEGREES, slope_strength
from firerisk.types import (
    BurnedCell,
    BurnSnapshot,
    ElevationGrid,
    GridGeometry,
    LatLon,
    ModelParameters,
    SimulationConfig,
    SimulationResult,
    WeatherData,
    WeatherSummary,
    WindSample,
)

logger = logging.getLogger(__name__)

# Fuel consumed by a burning cell each hour
FUEL_CONSUMPTION = 0.45

# Cells with this much fuel or less cannot ignite
MIN_IGNITION_FUEL = 0.05

MAX_IGNITION_PROBABILITY = 0.95

# Fraction of the grid a base polygon should span
POLYGON_GRID_COVERAGE = 0.6


class SpreadSimulator:
    """Hourly cellular automaton driven by Rothermel spread rates.

    The automaton consumes a single random stream in a fixed order
    (burning cells in ignition order, neighbours row-major), so a given
    seed reproduces the same snapshots bit for bit.

    Attributes:
        fuel: Fuel availability grid, consumed in place as cells burn
        burned_hour: Hour each cell ignited, -1 if unburned
    """

    def __init__(
        self,
        fuel: list[list[float]],
        slope_grid: list[list[float]],
        slope_vector: tuple[float, float] | None,
        wind_series: Sequence[WindSample],
        dryness: float,
        rng: RandomSource,
        seeds: Sequence[tuple[int, int]] | None = None,
    ):
        """Initialize simulator.

        Args:
            fuel: N x N fuel availability in [0, 1]
            slope_grid: N x N slope magnitude in [0, 1] of full slope
            slope_vector: Unit slope vector (east, north), the negated elevation
                gradient; None for flat
            wind_series: Wind per hour, index 0 = ignition hour
            dryness: FWI-derived dryness factor
            rng: Random stream (shared with fuel grid construction)
            seeds: Initially burning (row, col) cells; defaults to the center
        """
        self.size = len(fuel)
        self.fuel = fuel
        self.slope_grid = slope_grid
        self.slope_vector = slope_vector
        self.wind_series = list(wind_series)
        self.dryness = dryness
        self.rng = rng
        self.fuel_model = fuel_model_for_dryness(dryness)
        self.burned_hour = [[-1] * self.size for _ in range(self.size)]

        center = self.size // 2
        initial = list(seeds) if seeds else [(center, center)]
        self.seeds = [
            (min(max(r, 0), self.size - 1), min(max(c, 0), self.size - 1)) for r, c in initial
        ]

    def _wind_at(self, hour: int) -> WindSample:
        return self.wind_series[min(hour, len(self.wind_series) - 1)]

    def _ignition_probability(
        self, r: int, c: int, rr: int, cc: int, wind: WindSample, wind_mph: float
    ) -> float:
        neighbour = normalize((cc - c, r - rr))
        wind_align = max(
            0.0, neighbour[0] * wind.unit_vector[0] + neighbour[1] * wind.unit_vector[1]
        )
        slope_align = 0.0
        if self.slope_vector is not None:
            slope_align = max(
                0.0,
                neighbour[0] * self.slope_vector[0] + neighbour[1] * self.slope_vector[1],
            )
        slope_degrees = self.slope_grid[rr][cc] * FULL_SLOPE_DEGREES

        ros = rate_of_spread(self.fuel_model, wind_mph, slope_degrees, wind_align, slope_align)
        base = min(MAX_IGNITION_PROBABILITY, ros / 10.0)
        random_factor = 0.85 + self.rng.next() * 0.15
        return base * self.fuel[rr][cc] * random_factor

    def run(self, hours: int) -> Generator[BurnSnapshot, None, None]:
        """Run the automaton, yielding one snapshot per hour.

        Yields:
            BurnSnapshot for hour 0 (seed cells) then hours 1..hours
        """
        size = self.size
        burning: list[tuple[int, int]] = []
        initial = []
        for r, c in self.seeds:
            if self.burned_hour[r][c] >= 0:
                continue
            self.burned_hour[r][c] = 0
            burning.append((r, c))
            initial.append(BurnedCell(row=r, col=c, probability=1.0))

        yield BurnSnapshot(hour=0, cells=initial, wind=self._wind_at(0))

        for t in range(1, hours + 1):
            wind = self._wind_at(t)
            wind_mph = wind.speed * MS_TO_MPH
            ignited: list[BurnedCell] = []

            for r, c in burning:
                self.fuel[r][c] = max(0.0, self.fuel[r][c] - FUEL_CONSUMPTION)

                for rr in range(r - 1, r + 2):
                    for cc in range(c - 1, c + 2):
                        if rr < 0 or cc < 0 or rr >= size or cc >= size:
                            continue
                        if rr == r and cc == c:
                            continue
                        if self.burned_hour[rr][cc] >= 0:
                            continue
                        if self.fuel[rr][cc] <= MIN_IGNITION_FUEL:
                            continue

                        probability = self._ignition_probability(r, c, rr, cc, wind, wind_mph)
                        if self.rng.next() < probability:
                            self.burned_hour[rr][cc] = t
                            ignited.append(
                                BurnedCell(
                                    row=rr, col=cc, probability=min(max(probability, 0.0), 1.0)
                                )
                            )

            # New cells start burning next hour
            burning.extend((cell.row, cell.col) for cell in ignited)
            logger.debug("Hour %d: %d new cells, %d burning", t, len(ignited), len(burning))
            yield BurnSnapshot(hour=t, cells=ignited, wind=wind)


def summarize_weather(weather: WeatherData) -> WeatherSummary:
    """Current conditions, derived from the first hour when no summary is given."""
    if weather.summary is not None:
        return weather.summary
    if not weather.hourly:
        logger.warning("Weather response has no hourly rows; using defaults")
        return WeatherSummary(
            at=None,
            temperature_2m=None,
            precipitation_24h=0.0,
            wind_speed_10m=None,
            wind_direction_10m=None,
            relative_humidity_2m=None,
        )
    first = weather.hourly[0]
    precip = sum(h.precipitation or 0.0 for h in weather.hourly[:24])
    return WeatherSummary(
        at=first.time,
        temperature_2m=first.temperature_2m,
        precipitation_24h=round(precip, 2),
        wind_speed_10m=first.wind_speed_10m,
        wind_direction_10m=first.wind_direction_10m,
        relative_humidity_2m=first.relative_humidity_2m,
    )


def _month_of(summary: WeatherSummary) -> int:
    if summary.at:
        try:
            return datetime.fromisoformat(summary.at.replace("Z", "+00:00")).month
        except ValueError:
            logger.warning("Unparseable weather timestamp %r; using current month", summary.at)
    return datetime.now(timezone.utc).month


def _default(value: float | None, fallback: float) -> float:
    return fallback if value is None else value


def resolve_grid(config: SimulationConfig) -> tuple[GridGeometry, list[tuple[float, float]]]:
    """Grid placement, recentred and widened to fit a base polygon if given."""
    base = normalize_polygon(config.base_polygon)
    lat, lon = config.lat, config.lon
    cell_size = config.cell_size

    if len(base) >= 3:
        center = polygon_centroid(base)
        if center is not None:
            lat, lon = center
        lats = [p[0] for p in base]
        lons = [p[1] for p in base]
        cells_across = max(1.0, config.grid_size * POLYGON_GRID_COVERAGE)
        cell_size = max(
            cell_size,
            (max(lats) - min(lats)) / cells_across,
            (max(lons) - min(lons)) / cells_across,
        )

    return GridGeometry(lat=lat, lon=lon, grid_size=config.grid_size, cell_size=cell_size), base


async def simulate(config: SimulationConfig, provider: Provider) -> SimulationResult:
    """Run a complete fire spread forecast.

    Weather and elevation are fetched concurrently; if either call fails
    the error propagates and no simulation is run.

    Args:
        config: Simulation parameters
        provider: Weather and elevation source

    Returns:
        SimulationResult with snapshots, forecast polygons and footprint

    Raises:
        ExternalServiceError: A provider call failed
    """
    grid, base = resolve_grid(config)

    weather, elevation = await asyncio.gather(
        provider.fetch_weather(grid.lat, grid.lon),
        provider.fetch_elevation_grid(grid.lat, grid.lon),
    )

    # CPU bound from here on; runs on a worker thread
    return await asyncio.to_thread(run_forecast, config, grid, base, weather, elevation)


def run_forecast(
    config: SimulationConfig,
    grid: GridGeometry,
    base: list[LatLon],
    weather: WeatherData,
    elevation: ElevationGrid,
) -> SimulationResult:
    """Derive model inputs from fetched data, run the automaton and build polygons."""
    summary = summarize_weather(weather)
    fwi = compute_fire_danger(
        temperature=_default(summary.temperature_2m, 20.0),
        relative_humidity=_default(summary.relative_humidity_2m, 45.0),
        wind_speed=_default(summary.wind_speed_10m, 3.0),
        rain_24h=summary.precipitation_24h,
        month=_month_of(summary),
    )
    dryness = dryness_factor(fwi.fwi)
    wind_series = build_wind_series(weather.hourly, config.hours, summary)

    slope = elevation.slope
    slope_vector = normalize((-slope.dzdx, -slope.dzdy))
    strength = slope_strength(slope.slope_degrees)
    slope_grid = build_slope_grid(grid.grid_size, slope_vector, strength)

    rng = Mulberry32(config.seed)
    fuel = build_fuel_grid(grid.grid_size, rng, dryness)
    seeds = seed_cells_from_polygon(base, grid)

    logger.info(
        "Starting simulation: center=(%.5f, %.5f), hours=%d, grid=%d, cell=%.6f, "
        "fwi=%.2f (%s), seeds=%d",
        grid.lat,
        grid.lon,
        config.hours,
        grid.grid_size,
        grid.cell_size,
        fwi.fwi,
        fwi.classification.value,
        len(seeds) or 1,
    )

    simulator = SpreadSimulator(
        fuel=fuel,
        slope_grid=slope_grid,
        slope_vector=slope_vector,
        wind_series=wind_series,
        dryness=dryness,
        rng=rng,
        seeds=seeds,
    )
    snapshots = list(simulator.run(config.hours))

    forecast, centroids = build_forecast_polygons(
        snapshots, grid, base_polygon=base or None, start_time=config.start_time
    )
    footprint = build_footprint(centroids)

    logger.info(
        "Simulation complete: %d burned cells over %dh",
        sum(len(s.cells) for s in snapshots),
        config.hours,
    )

    return SimulationResult(
        config=config,
        grid=grid,
        weather=summary,
        elevation=elevation,
        fwi=fwi,
        model=ModelParameters(
            dryness_factor=round(dryness, 3),
            slope_vector=slope_vector,
            slope_strength=round(strength, 3),
        ),
        wind_series=wind_series,
        snapshots=snapshots,
        fuel_grid=simulator.fuel,
        forecast=forecast,
        footprint=footprint,
    )
