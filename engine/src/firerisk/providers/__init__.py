"""External data providers (weather, elevation)."""

from firerisk.providers.base import ElevationProvider, Provider, WeatherProvider
from firerisk.providers.cache import TTLCache
from firerisk.providers.open_meteo import OpenMeteoProvider

__all__ = [
    "ElevationProvider",
    "OpenMeteoProvider",
    "Provider",
    "TTLCache",
    "WeatherProvider",
]
