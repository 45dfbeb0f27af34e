"""Terminal presentation layer for the weather session."""

from .animation import ArrivalAnimation, PulseAnimation, interpolate
from .layout import is_narrow_viewport
from .weather_view import WeatherView

__all__ = [
    "ArrivalAnimation",
    "PulseAnimation",
    "WeatherView",
    "interpolate",
    "is_narrow_viewport",
]
