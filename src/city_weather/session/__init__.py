"""Query state machine and derived forecast views."""

from .controller import WeatherSession
from .forecast import MAX_FORECAST_DAYS, derive_daily_forecast
from .models import SessionPhase, SessionState

__all__ = [
    "MAX_FORECAST_DAYS",
    "SessionPhase",
    "SessionState",
    "WeatherSession",
    "derive_daily_forecast",
]
