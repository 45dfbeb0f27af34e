"""Rich-rendered weather screen: banner, current conditions and daily forecast."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from rich.align import Align
from rich.columns import Columns
from rich.console import Console, Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.spinner import Spinner
from rich.style import Style
from rich.table import Table
from rich.text import Text

from ..config import DEFAULT_ICON_URL_TEMPLATE
from ..formatting import (
    LocaleLike,
    format_date,
    format_temperature,
    format_time,
    icon_url,
    resolve_locale,
)
from ..redaction import sanitize_text
from ..session.forecast import derive_daily_forecast
from ..session.models import SessionState
from ..weather.models import ForecastEntry, WeatherSnapshot
from .animation import ArrivalAnimation, PulseAnimation
from .layout import ACCENT, SECONDARY, TEXT, fade, is_narrow_viewport

CARD_WIDTH = 18
# Offset units per blank row when sliding the forecast in.
OFFSET_UNITS_PER_ROW = 10

_ICON_GLYPHS = {
    "01": "☀",
    "02": "⛅",
    "03": "☁",
    "04": "☁",
    "09": "🌧",
    "10": "🌦",
    "11": "⛈",
    "13": "❄",
    "50": "🌫",
}


def capitalize_words(text: str) -> str:
    """Upper-case the first letter of each word, leaving the rest untouched."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def icon_glyph(icon_code: str) -> str:
    return _ICON_GLYPHS.get(icon_code[:2], "?")


class _StatusLogHandler(logging.Handler):
    """Route logger output into the view's status line while Live is drawing."""

    def __init__(self, view: WeatherView) -> None:
        super().__init__()
        self.view = view

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.view.status_line = sanitize_text(record.getMessage())
        except Exception:
            self.handleError(record)


class WeatherView:
    """Renders a ``SessionState`` into a rich renderable for one instant.

    The only state kept here is animation progress and the last forecast
    revision seen, used to re-trigger the arrival animation.
    """

    def __init__(
        self,
        *,
        console: Console,
        banner_text: str,
        narrow_threshold: int = 600,
        icon_url_template: str = DEFAULT_ICON_URL_TEMPLATE,
        width: int | None = None,
        animate: bool = True,
        locale: LocaleLike = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.console = console
        self.banner_text = banner_text
        self.narrow_threshold = narrow_threshold
        self.icon_url_template = icon_url_template
        self.width_override = width
        self.animate = animate
        self.locale = resolve_locale(locale)
        self.clock = clock
        self.arrival = ArrivalAnimation()
        self.pulse = PulseAnimation(started_at=clock())
        self.status_line: str | None = None
        self._seen_revision = 0
        self._logger: logging.Logger | None = None
        self._original_handlers: list[logging.Handler] = []

    @property
    def is_narrow(self) -> bool:
        columns = self.width_override if self.width_override is not None else self.console.width
        return is_narrow_viewport(columns, self.narrow_threshold)

    def attach_logger(self, logger: logging.Logger) -> None:
        """Replace console log handlers so JSON lines don't tear the live frame."""
        self._logger = logger
        self._original_handlers = list(logger.handlers)
        logger.handlers = [_StatusLogHandler(self)]

    def detach_logger(self) -> None:
        if self._logger is None:
            return
        self._logger.handlers = self._original_handlers
        self._logger = None
        self._original_handlers = []

    def sync(self, state: SessionState, now: float) -> None:
        """Start the arrival animation when a new non-empty forecast lands."""
        if state.forecast_revision == self._seen_revision:
            return
        self._seen_revision = state.forecast_revision
        if not derive_daily_forecast(state.forecast_list):
            return
        if self.animate:
            self.arrival.start(now)
        else:
            self.arrival.finish()

    def is_animating(self, now: float | None = None) -> bool:
        return self.arrival.is_running(self.clock() if now is None else now)

    def render(self, state: SessionState, now: float | None = None) -> RenderableType:
        now = self.clock() if now is None else now
        self.sync(state, now)

        parts: list[RenderableType] = [
            self._build_banner(now),
            Align.center(Text("Weather App", style=Style(color=TEXT, bold=True))),
        ]
        if state.loading:
            parts.append(Align.center(Spinner("dots", text="Loading...", style=ACCENT)))
        if state.error:
            parts.append(Align.center(Text(state.error, style=ACCENT)))
        if state.snapshot is not None:
            parts.append(Align.center(self._build_current_panel(state.snapshot)))
        daily = derive_daily_forecast(state.forecast_list)
        if daily:
            parts.append(self._build_forecast_section(daily, now))
        if self.status_line:
            parts.append(Text(self.status_line, style="dim"))
        return Group(*parts)

    def _build_banner(self, now: float) -> RenderableType:
        if self.animate:
            opacity, scale = self.pulse.opacity(now), self.pulse.scale(now)
        else:
            opacity, scale = 1.0, 1.0
        style = Style(
            color=fade(TEXT, opacity),
            bold=scale >= 1.1,
        )
        return Align.center(Text(self.banner_text, style=style))

    def _build_current_panel(self, snapshot: WeatherSnapshot) -> Panel:
        url = icon_url(snapshot.icon_code, self.icon_url_template)
        body = Group(
            Text(format_temperature(snapshot.temperature), style="bold", justify="center"),
            Text(capitalize_words(snapshot.description), justify="center"),
            Text(format_date(snapshot.observed_at, self.locale), justify="center"),
            Text(
                f"{icon_glyph(snapshot.icon_code)} {snapshot.icon_code}",
                style=Style(link=url),
                justify="center",
            ),
        )
        return Panel(
            body,
            title=f"Current Conditions in {snapshot.location_name}",
            style=Style(color=TEXT, bgcolor=SECONDARY),
            border_style=TEXT,
            width=40,
        )

    def build_card(self, entry: ForecastEntry, opacity: float = 1.0) -> Panel:
        color = fade(TEXT, opacity)
        url = icon_url(entry.icon_code, self.icon_url_template)
        body = Group(
            Text(format_date(entry.dt, self.locale), justify="center"),
            Text(format_time(entry.dt, self.locale), style="dim", justify="center"),
            Text(format_temperature(entry.temperature), style="bold", justify="center"),
            Text(
                f"{icon_glyph(entry.icon_code)} {entry.icon_code}",
                style=Style(link=url),
                justify="center",
            ),
        )
        return Panel(
            body,
            style=Style(color=color, bgcolor=ACCENT),
            border_style=color,
            width=CARD_WIDTH,
        )

    def _build_forecast_section(self, daily: list[ForecastEntry], now: float) -> RenderableType:
        opacity = self.arrival.opacity(now)
        cards = [self.build_card(entry, opacity) for entry in daily]

        if self.is_narrow:
            body: RenderableType = Align.center(Columns(cards, padding=(0, 1)))
        else:
            row = Table.grid(padding=(0, 1))
            for _ in cards:
                row.add_column(no_wrap=True, min_width=CARD_WIDTH)
            row.add_row(*cards)
            body = Align.center(row)

        rows = round(self.arrival.offset(now) / OFFSET_UNITS_PER_ROW)
        title = Align.center(Text("Forecast", style=Style(color=fade(TEXT, opacity))))
        return Padding(Group(title, body), (rows, 0, 0, 0))
