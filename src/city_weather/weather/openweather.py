"""OpenWeatherMap (api.openweathermap.org) provider implementation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import ProviderRejectedError, WeatherProviderError
from ..redaction import sanitize_text
from .base import WeatherProvider
from .models import ForecastEntry, WeatherSnapshot

CURRENT_PATH = "/data/2.5/weather"
FORECAST_PATH = "/data/2.5/forecast"
UNITS = "metric"


class OpenWeatherProvider(WeatherProvider):
    """Fetches current conditions and the 5-day/3-hour forecast by city name."""

    provider_name = "openweathermap"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._base_url = settings.base_url
        self._api_key = settings.openweather_api_key
        self._client = client or httpx.AsyncClient(timeout=settings.weather_timeout_seconds)

    async def __aenter__(self) -> OpenWeatherProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_current(self, city: str) -> WeatherSnapshot:
        """Fetch current conditions; a non-200 `cod` in the body is a rejection."""
        payload = await self._request_json(CURRENT_PATH, city, context="current conditions")

        status = payload.get("cod")
        if status != 200:
            message = payload.get("message")
            if not isinstance(message, str) or not message:
                message = f"OpenWeatherMap returned status {status!r}"
            raise ProviderRejectedError(message, status_code=status)

        return self._normalize_current(payload)

    async def fetch_forecast(self, city: str) -> list[ForecastEntry]:
        """Fetch the forecast list.

        The embedded `cod` is not inspected here; a rejected forecast simply
        lacks a usable `list` and fails normalization.
        """
        payload = await self._request_json(FORECAST_PATH, city, context="forecast")
        raw_entries = payload.get("list")
        if not isinstance(raw_entries, list):
            raise WeatherProviderError("OpenWeatherMap forecast payload missing 'list' array.")
        return [self._normalize_entry(item, index) for index, item in enumerate(raw_entries)]

    async def _request_json(self, path: str, city: str, context: str) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        params = {"q": city, "appid": self._api_key, "units": UNITS}
        self.logger.debug("OpenWeatherMap %s request for %r", context, city)
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise WeatherProviderError(
                sanitize_text(str(exc)) or f"OpenWeatherMap {context} request failed."
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise WeatherProviderError(
                f"OpenWeatherMap {context} returned non-JSON response "
                f"(HTTP {response.status_code})."
            ) from exc

        if not isinstance(payload, dict):
            raise WeatherProviderError(
                f"OpenWeatherMap {context} returned unexpected payload type "
                f"{type(payload).__name__}."
            )
        return payload

    def _normalize_current(self, payload: dict[str, Any]) -> WeatherSnapshot:
        condition = self._first_condition(payload, "current conditions payload")
        return WeatherSnapshot(
            location_name=self._require_str(payload, "name", "current conditions payload"),
            temperature=self._require_number(
                payload.get("main"), "temp", "current conditions payload 'main'"
            ),
            description=self._require_str(
                condition, "description", "current conditions payload 'weather[0]'"
            ),
            icon_code=self._require_str(
                condition, "icon", "current conditions payload 'weather[0]'"
            ),
            observed_at=int(self._require_number(payload, "dt", "current conditions payload")),
            raw=payload,
        )

    def _normalize_entry(self, item: Any, index: int) -> ForecastEntry:
        where = f"forecast entry {index}"
        if not isinstance(item, dict):
            raise WeatherProviderError(f"OpenWeatherMap {where} is not an object.")
        condition = self._first_condition(item, where)
        return ForecastEntry(
            dt=int(self._require_number(item, "dt", where)),
            dt_txt=self._require_str(item, "dt_txt", where),
            temperature=self._require_number(item.get("main"), "temp", f"{where} 'main'"),
            description=self._require_str(condition, "description", f"{where} 'weather[0]'"),
            icon_code=self._require_str(condition, "icon", f"{where} 'weather[0]'"),
            raw=item,
        )

    @staticmethod
    def _first_condition(payload: dict[str, Any], where: str) -> dict[str, Any]:
        conditions = payload.get("weather")
        if not isinstance(conditions, list) or not conditions or not isinstance(
            conditions[0], dict
        ):
            raise WeatherProviderError(f"OpenWeatherMap {where} missing 'weather[0]'.")
        return conditions[0]

    @staticmethod
    def _require_str(container: Any, key: str, where: str) -> str:
        value = container.get(key) if isinstance(container, dict) else None
        if not isinstance(value, str):
            raise WeatherProviderError(f"OpenWeatherMap {where} missing '{key}'.")
        return value

    @staticmethod
    def _require_number(container: Any, key: str, where: str) -> float:
        value = container.get(key) if isinstance(container, dict) else None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise WeatherProviderError(f"OpenWeatherMap {where} missing numeric '{key}'.")
        return float(value)
