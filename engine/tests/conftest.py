"""Shared test fixtures for firerisk engine tests."""

import pytest

from firerisk.exceptions import ExternalServiceError
from firerisk.spread.slope import calculate_slope
from firerisk.types import ElevationGrid, WeatherData, WeatherHour, WeatherSummary

# Reference fire polygon near Antalya, (lat, lon)
FIRE_POLYGON = [
    (37.042, 30.475),
    (37.045, 30.495),
    (37.055, 30.495),
    (37.052, 30.47),
]


class FakeProvider:
    """Deterministic in-memory weather and elevation source.

    Counts calls so tests can check the simulator fetched both inputs.
    Set ``fail_weather`` or ``fail_elevation`` to make a call raise.
    """

    def __init__(
        self,
        hours: int = 24,
        temperature: float = 30.0,
        humidity: float = 25.0,
        wind_speed: float = 6.0,
        wind_direction: float = 270.0,
        elevation: list[list[float]] | None = None,
    ):
        self.hourly = [
            WeatherHour(
                time=f"2024-07-15T{h:02d}:00",
                temperature_2m=temperature,
                precipitation=0.0,
                wind_speed_10m=wind_speed,
                wind_direction_10m=wind_direction,
                relative_humidity_2m=humidity,
            )
            for h in range(hours)
        ]
        self.elevation = elevation or [
            [100.0, 100.0, 100.0],
            [110.0, 110.0, 110.0],
            [120.0, 120.0, 120.0],
        ]
        self.fail_weather = False
        self.fail_elevation = False
        self.weather_calls = 0
        self.elevation_calls = 0

    async def fetch_weather(self, lat: float, lon: float) -> WeatherData:
        self.weather_calls += 1
        if self.fail_weather:
            raise ExternalServiceError("weather request failed", service="weather", status_code=503)
        first = self.hourly[0]
        summary = WeatherSummary(
            at=first.time,
            temperature_2m=first.temperature_2m,
            precipitation_24h=0.0,
            wind_speed_10m=first.wind_speed_10m,
            wind_direction_10m=first.wind_direction_10m,
            relative_humidity_2m=first.relative_humidity_2m,
        )
        return WeatherData(hourly=list(self.hourly), summary=summary, latitude=lat, longitude=lon)

    async def fetch_elevation_grid(self, lat: float, lon: float) -> ElevationGrid:
        self.elevation_calls += 1
        if self.fail_elevation:
            raise ExternalServiceError("elevation request failed", service="elevation")
        cell_size = 30.0
        return ElevationGrid(
            matrix=self.elevation,
            cell_size_meters=cell_size,
            slope=calculate_slope(self.elevation, cell_size),
        )


@pytest.fixture
def fire_polygon():
    """Quadrilateral fire area used across analyzer and simulator tests."""
    return list(FIRE_POLYGON)


@pytest.fixture
def unit_square():
    """Unit square as (lat, lon) pairs."""
    return [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    """Factory for providers with custom weather or terrain."""
    return FakeProvider
