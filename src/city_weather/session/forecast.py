"""Day bucketing of the provider's 3-hour forecast list."""

from __future__ import annotations

from collections.abc import Iterable

from ..weather.models import ForecastEntry

MAX_FORECAST_DAYS = 6


def derive_daily_forecast(entries: Iterable[ForecastEntry]) -> list[ForecastEntry]:
    """Return the first entry seen for each calendar date, at most six.

    Order follows the provider list; later samples for an already-seen date
    are dropped, not averaged.
    """
    by_day: dict[str, ForecastEntry] = {}
    for entry in entries:
        by_day.setdefault(entry.date_key, entry)
    return list(by_day.values())[:MAX_FORECAST_DAYS]
