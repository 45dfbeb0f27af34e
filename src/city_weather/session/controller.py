"""Weather session controller: one query drives current conditions, then forecast."""

from __future__ import annotations

import logging

from ..exceptions import WeatherProviderError
from ..redaction import sanitize_text
from ..weather.base import WeatherProvider
from ..weather.models import ForecastEntry
from .forecast import derive_daily_forecast
from .models import SessionPhase, SessionState


class WeatherSession:
    """Owns the idle/loading/success/failed state machine for city queries.

    Overlapping ``submit`` calls are not cancelled. By default each one
    commits state whenever its responses arrive, so the last response to land
    wins. With ``guard_stale_responses`` enabled, a generation counter drops
    commits from any submit that has since been superseded.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        logger: logging.Logger,
        *,
        guard_stale_responses: bool = False,
    ) -> None:
        self.provider = provider
        self.logger = logger
        self.guard_stale_responses = guard_stale_responses
        self.state = SessionState()
        self._generation = 0

    @property
    def daily_forecast(self) -> list[ForecastEntry]:
        return derive_daily_forecast(self.state.forecast_list)

    async def submit(self, city: str) -> SessionState:
        """Run one query for ``city`` exactly as typed and return the live state."""
        self._generation += 1
        generation = self._generation

        state = self.state
        state.phase = SessionPhase.LOADING
        state.loading = True
        state.error = ""
        context = {"city": city, "generation": generation}
        self.logger.info("Weather query started for %r", city, extra=context)

        try:
            snapshot = await self.provider.fetch_current(city)
            if self._is_stale(generation, stage="current conditions"):
                return state
            state.snapshot = snapshot

            entries = await self.provider.fetch_forecast(city)
            if self._is_stale(generation, stage="forecast"):
                return state
            state.forecast_list = entries
            state.forecast_revision += 1
            state.phase = SessionPhase.SUCCESS
            self.logger.info(
                "Weather query for %r succeeded: %d forecast entries, %d days",
                city,
                len(entries),
                len(self.daily_forecast),
                extra=context,
            )
        except WeatherProviderError as exc:
            if not self._is_stale(generation, stage="failure"):
                self._fail(str(exc))
                self.logger.warning(
                    "Weather query for %r failed: %s",
                    city,
                    sanitize_text(str(exc)),
                    extra=context,
                )
        except Exception as exc:
            if not self._is_stale(generation, stage="failure"):
                self._fail(str(exc) or type(exc).__name__)
                self.logger.exception(
                    "Unexpected failure in weather query for %r", city, extra=context
                )
        finally:
            if not (self.guard_stale_responses and generation != self._generation):
                state.loading = False
        return state

    def _fail(self, message: str) -> None:
        self.state.error = message
        self.state.phase = SessionPhase.FAILED

    def _is_stale(self, generation: int, *, stage: str) -> bool:
        if not self.guard_stale_responses or generation == self._generation:
            return False
        self.logger.info(
            "Dropping %s result from superseded query (generation %d, latest %d)",
            stage,
            generation,
            self._generation,
        )
        return True
