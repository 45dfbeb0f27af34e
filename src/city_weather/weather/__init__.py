"""Weather provider integrations."""

from .base import WeatherProvider
from .models import ForecastEntry, WeatherSnapshot
from .openweather import OpenWeatherProvider

__all__ = [
    "ForecastEntry",
    "OpenWeatherProvider",
    "WeatherProvider",
    "WeatherSnapshot",
]
