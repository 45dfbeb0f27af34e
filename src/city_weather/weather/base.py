"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import ForecastEntry, WeatherSnapshot


class WeatherProvider(ABC):
    """Base contract for providers queried by the weather session."""

    @abstractmethod
    async def fetch_current(self, city: str) -> WeatherSnapshot:
        """Fetch current conditions for a city name."""

    @abstractmethod
    async def fetch_forecast(self, city: str) -> list[ForecastEntry]:
        """Fetch the raw 3-hour forecast list for a city name."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release provider resources."""
