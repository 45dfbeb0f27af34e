"""Typed models for normalized OpenWeatherMap payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class WeatherSnapshot(BaseModel):
    """Current conditions for one location, temperatures in Celsius."""

    location_name: str
    temperature: float
    description: str
    icon_code: str
    observed_at: int = Field(description="Observation time as UNIX seconds")
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class ForecastEntry(BaseModel):
    """One 3-hour forecast sample as returned by the provider."""

    dt: int
    dt_txt: str = Field(description="Provider text timestamp, 'YYYY-MM-DD HH:MM:SS'")
    temperature: float
    description: str
    icon_code: str
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def date_key(self) -> str:
        """Calendar-date part of `dt_txt` (everything before the first space)."""
        return self.dt_txt.partition(" ")[0]
