"""Capability interfaces for external weather and elevation data."""

from __future__ import annotations

from typing import Protocol

from firerisk.types import ElevationGrid, WeatherData


class WeatherProvider(Protocol):
    async def fetch_weather(self, lat: float, lon: float) -> WeatherData:
        """Current and hourly weather for a coordinate."""
        ...


class ElevationProvider(Protocol):
    async def fetch_elevation_grid(self, lat: float, lon: float) -> ElevationGrid:
        """3x3 elevation sample (with derived slope) around a coordinate."""
        ...


class Provider(WeatherProvider, ElevationProvider, Protocol):
    """Both data sources needed by the spread simulator."""
