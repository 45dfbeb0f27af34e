"""Typed state models for the weather query session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..weather.models import ForecastEntry, WeatherSnapshot


class SessionPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(slots=True)
class SessionState:
    """Everything the presentation layer needs to render one frame.

    A failed query keeps the previous snapshot and forecast list; only the
    error text and phase change.
    """

    phase: SessionPhase = SessionPhase.IDLE
    loading: bool = False
    error: str = ""
    snapshot: WeatherSnapshot | None = None
    forecast_list: list[ForecastEntry] = field(default_factory=list)
    forecast_revision: int = 0
