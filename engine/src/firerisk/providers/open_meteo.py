"""Open-Meteo weather and elevation adapter.

Uses the public forecast and elevation endpoints over httpx. Responses
are cached by rounded coordinate: weather for an hour, elevation for a
day. Any non-success response, transport error or malformed payload is
raised as ExternalServiceError.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from firerisk.exceptions import ExternalServiceError
from firerisk.providers.cache import TTLCache, coordinate_key
from firerisk.spread.slope import calculate_slope
from firerisk.types import ElevationGrid, WeatherData, WeatherHour, WeatherSummary

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
ELEVATION_URL = "https://api.open-meteo.com/v1/elevation"

HOURLY_VARIABLES = [
    "temperature_2m",
    "precipitation",
    "wind_speed_10m",
    "wind_direction_10m",
    "soil_temperature_0cm",
    "soil_moisture_1_to_3cm",
    "surface_pressure",
    "cloud_cover",
    "relative_humidity_2m",
]

WEATHER_TTL_SECONDS = 3600.0
ELEVATION_TTL_SECONDS = 86400.0

# Spacing of the 3x3 elevation sample (degrees)
ELEVATION_DELTA_DEG = 0.0003


def _avg(rows: list[WeatherHour], attr: str) -> float:
    return sum(getattr(h, attr) or 0.0 for h in rows) / len(rows)


def parse_hourly(payload: dict[str, Any]) -> list[WeatherHour]:
    """Turn Open-Meteo's column-oriented hourly block into rows."""
    hourly = payload["hourly"]
    times = hourly["time"]
    rows = []
    for idx, t in enumerate(times):
        values = {name: hourly.get(name, [None] * len(times))[idx] for name in HOURLY_VARIABLES}
        rows.append(WeatherHour(time=t, **values))
    return rows


def summarize_hourly(rows: list[WeatherHour]) -> WeatherSummary | None:
    if not rows:
        return None
    first = rows[0]
    precip = sum(h.precipitation or 0.0 for h in rows)
    return WeatherSummary(
        at=first.time,
        temperature_2m=first.temperature_2m,
        precipitation_24h=round(precip, 2),
        wind_speed_10m=first.wind_speed_10m,
        wind_direction_10m=first.wind_direction_10m,
        relative_humidity_2m=first.relative_humidity_2m,
        soil_moisture_1_to_3cm_avg=round(_avg(rows, "soil_moisture_1_to_3cm"), 4),
        cloud_cover_avg=round(_avg(rows, "cloud_cover"), 2),
    )


class OpenMeteoProvider:
    """Weather + elevation provider backed by the Open-Meteo API.

    Args:
        client: Shared httpx.AsyncClient; one is created (and owned) if None
        timeout: Request timeout (seconds) for an owned client
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0):
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self.weather_cache: TTLCache[WeatherData] = TTLCache(WEATHER_TTL_SECONDS)
        self.elevation_cache: TTLCache[ElevationGrid] = TTLCache(ELEVATION_TTL_SECONDS)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, service: str, url: str, params: dict[str, str]) -> Any:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"{service} request failed: {e}", service=service) from e
        if not response.is_success:
            raise ExternalServiceError(
                f"{service} request failed",
                service=service,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(f"{service} returned invalid JSON", service=service) from e

    async def fetch_weather(self, lat: float, lon: float) -> WeatherData:
        key = coordinate_key(lat, lon, 3)
        cached = self.weather_cache.get(key)
        if cached is not None:
            return cached

        params = {
            "latitude": str(lat),
            "longitude": str(lon),
            "hourly": ",".join(HOURLY_VARIABLES),
            "forecast_days": "1",
            "wind_speed_unit": "ms",
            "timezone": "UTC",
        }
        payload = await self._get_json("weather", FORECAST_URL, params)
        try:
            hourly = parse_hourly(payload)
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError(
                f"weather response is malformed: {e!r}", service="weather"
            ) from e

        data = WeatherData(
            hourly=hourly,
            summary=summarize_hourly(hourly),
            latitude=payload.get("latitude"),
            longitude=payload.get("longitude"),
            elevation=payload.get("elevation"),
        )
        self.weather_cache.set(key, data)
        logger.info("Fetched %d hourly weather rows for %s", len(hourly), key)
        return data

    async def fetch_elevation_grid(self, lat: float, lon: float) -> ElevationGrid:
        key = coordinate_key(lat, lon, 5)
        cached = self.elevation_cache.get(key)
        if cached is not None:
            return cached

        offsets = (-ELEVATION_DELTA_DEG, 0.0, ELEVATION_DELTA_DEG)
        points = [(lat + dlat, lon + dlon) for dlat in offsets for dlon in offsets]
        params = {
            "latitude": ",".join(f"{p[0]:.6f}" for p in points),
            "longitude": ",".join(f"{p[1]:.6f}" for p in points),
        }
        payload = await self._get_json("elevation", ELEVATION_URL, params)
        values = payload.get("elevation") if isinstance(payload, dict) else None
        if not isinstance(values, list) or len(values) != 9:
            raise ExternalServiceError(
                "elevation response must contain 9 values", service="elevation"
            )
        if any(v is None for v in values):
            raise ExternalServiceError("elevation response has missing values", service="elevation")

        matrix = [[float(v) for v in values[i * 3:(i + 1) * 3]] for i in range(3)]
        cell_size = 111320.0 * ELEVATION_DELTA_DEG * math.cos(math.radians(lat))
        grid = ElevationGrid(
            matrix=matrix,
            cell_size_meters=cell_size,
            slope=calculate_slope(matrix, cell_size),
        )
        self.elevation_cache.set(key, grid)
        return grid
