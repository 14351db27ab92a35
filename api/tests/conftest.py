"""Shared fixtures for API tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from firerisk.exceptions import ExternalServiceError
from firerisk.spread.slope import calculate_slope
from firerisk.types import ElevationGrid, WeatherData, WeatherHour, WeatherSummary
from firerisk_api.config import ApiSettings
from firerisk_api.main import create_app


class StubProvider:
    """Fixed weather and terrain; flip ``fail`` to simulate an outage."""

    def __init__(self):
        self.fail = False

    async def fetch_weather(self, lat, lon):
        if self.fail:
            raise ExternalServiceError("weather request failed", service="weather", status_code=503)
        hourly = [
            WeatherHour(
                time=f"2024-08-01T{h:02d}:00",
                temperature_2m=31.0,
                precipitation=0.0,
                wind_speed_10m=5.0,
                wind_direction_10m=225.0,
                relative_humidity_2m=22.0,
            )
            for h in range(24)
        ]
        summary = WeatherSummary(
            at=hourly[0].time,
            temperature_2m=31.0,
            precipitation_24h=0.0,
            wind_speed_10m=5.0,
            wind_direction_10m=225.0,
            relative_humidity_2m=22.0,
        )
        return WeatherData(hourly=hourly, summary=summary)

    async def fetch_elevation_grid(self, lat, lon):
        matrix = [[200.0, 205.0, 210.0], [200.0, 205.0, 210.0], [200.0, 205.0, 210.0]]
        return ElevationGrid(matrix=matrix, cell_size_meters=26.6, slope=calculate_slope(matrix, 26.6))


@pytest.fixture
def stub_provider():
    return StubProvider()


@pytest.fixture
def app(stub_provider):
    return create_app(provider=stub_provider, settings=ApiSettings())


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
