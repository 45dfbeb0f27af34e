"""CLI smoke tests with the provider mocked at the HTTP layer."""

from __future__ import annotations

import asyncio
import io
import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
import respx
from rich.console import Console, RenderableType

from city_weather import cli
from city_weather.log_setup import JsonConsoleFormatter
from city_weather.redaction import clear_registered_secrets
from city_weather.session.controller import WeatherSession
from city_weather.session.models import SessionPhase, SessionState
from city_weather.ui.weather_view import WeatherView
from city_weather.weather.base import WeatherProvider
from city_weather.weather.models import ForecastEntry, WeatherSnapshot

HOST = "owm.cli.example"

CURRENT_OK: dict[str, Any] = {
    "cod": 200,
    "name": "Lisbon",
    "dt": 1704103200,
    "main": {"temp": 14.6},
    "weather": [{"description": "clear sky", "icon": "01d"}],
}
FORECAST_OK: dict[str, Any] = {
    "cod": "200",
    "list": [
        {
            "dt": 1704067200 + day * 86400,
            "dt_txt": f"2024-01-{day + 1:02d} 00:00:00",
            "main": {"temp": 10 + day},
            "weather": [{"description": "few clouds", "icon": "02d"}],
        }
        for day in range(5)
    ],
}


@pytest.fixture(autouse=True)
def _reset_cli_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("city_weather")
    logger.handlers = []
    logger.filters = []
    clear_registered_secrets()


def _set_required_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENWEATHER_API_KEY", "cli-test-key")
    monkeypatch.setenv("OPENWEATHER_BASE_URL", f"https://{HOST}")
    monkeypatch.setenv("JOURNAL_DIR", str(tmp_path / "journal"))
    monkeypatch.setenv("RAW_PAYLOAD_DIR", str(tmp_path / "raw"))
    monkeypatch.setenv("JOURNAL_ENABLED", "false")
    monkeypatch.setenv("COLUMNS", "120")


def _mock_provider(current: httpx.Response, forecast: httpx.Response) -> dict[str, respx.Route]:
    return {
        "current": respx.route(method="GET", host=HOST, path="/data/2.5/weather").mock(
            return_value=current
        ),
        "forecast": respx.route(method="GET", host=HOST, path="/data/2.5/forecast").mock(
            return_value=forecast
        ),
    }


def test_parse_args_defaults() -> None:
    args = cli.parse_args([])
    assert args.city is None
    assert args.width is None
    assert args.no_animation is False
    assert args.journal is False


def test_parse_args_rejects_non_positive_width() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["--width", "0"])


@respx.mock
def test_one_shot_success_prints_current_and_forecast(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: Any
) -> None:
    _set_required_env(monkeypatch, tmp_path)
    routes = _mock_provider(
        httpx.Response(200, json=CURRENT_OK),
        httpx.Response(200, json=FORECAST_OK),
    )

    exit_code = cli.main(["--city", "Lisbon", "--no-animation"])
    assert exit_code == 0

    output = capsys.readouterr().out
    assert "Current Conditions in Lisbon" in output
    assert "15°C" in output
    assert "Forecast" in output
    for temp in range(10, 15):
        assert f"{temp}°C" in output
    assert routes["current"].call_count == 1
    assert routes["forecast"].call_count == 1


@respx.mock
def test_one_shot_rejection_exits_4_without_forecast_request(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: Any
) -> None:
    _set_required_env(monkeypatch, tmp_path)
    routes = _mock_provider(
        httpx.Response(404, json={"cod": "404", "message": "city not found"}),
        httpx.Response(200, json=FORECAST_OK),
    )

    exit_code = cli.main(["--city", "Atlantis", "--no-animation"])
    assert exit_code == 4
    assert "city not found" in capsys.readouterr().out
    assert routes["current"].call_count == 1
    assert routes["forecast"].call_count == 0


@respx.mock
def test_journal_records_query_lifecycle(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _set_required_env(monkeypatch, tmp_path)
    _mock_provider(
        httpx.Response(200, json=CURRENT_OK),
        httpx.Response(200, json=FORECAST_OK),
    )

    exit_code = cli.main(["--city", "Lisbon", "--no-animation", "--journal"])
    assert exit_code == 0

    journal_files = sorted((tmp_path / "journal").glob("*.jsonl"))
    assert journal_files
    text = journal_files[0].read_text(encoding="utf-8")
    assert "cli-test-key" not in text
    records = [json.loads(line) for line in text.splitlines() if line.strip()]
    event_types = [item["event_type"] for item in records]
    assert event_types == [
        "weather_startup",
        "weather_request_start",
        "weather_request_success",
        "weather_shutdown",
    ]
    success = records[2]["payload"]
    assert success["city"] == "Lisbon"
    assert success["forecast_entries"] == 5
    assert Path(success["forecast_raw_path"]).exists()
    assert Path(success["current_raw_path"]).exists()


def test_missing_api_key_exits_2(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _set_required_env(monkeypatch, tmp_path)
    monkeypatch.delenv("OPENWEATHER_API_KEY")
    assert cli.main(["--city", "Lisbon"]) == 2


@respx.mock
def test_interactive_loop_runs_until_eof(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: Any
) -> None:
    _set_required_env(monkeypatch, tmp_path)
    routes = _mock_provider(
        httpx.Response(200, json=CURRENT_OK),
        httpx.Response(200, json=FORECAST_OK),
    )
    answers = iter(["Lisbon", ""])

    def _fake_input(self: Any, prompt: str = "", **kwargs: Any) -> str:
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("rich.console.Console.input", _fake_input)

    assert cli.main(["--no-animation"]) == 0
    # The empty line is forwarded as an empty city, not skipped.
    assert routes["current"].call_count == 2
    assert [call.request.url.params["q"] for call in routes["current"].calls] == ["Lisbon", ""]
    assert "Current Conditions in Lisbon" in capsys.readouterr().out


class StepClock:
    """Monotonic clock that moves forward a fixed step on every read."""

    def __init__(self, step: float = 0.05) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


class InstantProvider(WeatherProvider):
    async def fetch_current(self, city: str) -> WeatherSnapshot:
        return WeatherSnapshot(
            location_name=city,
            temperature=14.6,
            description="clear sky",
            icon_code="01d",
            observed_at=1704103200,
        )

    async def fetch_forecast(self, city: str) -> list[ForecastEntry]:
        return [
            ForecastEntry(
                dt=1704067200 + day * 86400,
                dt_txt=f"2024-01-{day + 1:02d} 00:00:00",
                temperature=10.0 + day,
                description="few clouds",
                icon_code="02d",
            )
            for day in range(3)
        ]

    async def aclose(self) -> None:
        return None


def test_live_query_plays_arrival_animation_to_rest(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "FRAMES_PER_SECOND", 1000)
    clock = StepClock()
    console = Console(file=io.StringIO(), width=120)
    view = WeatherView(console=console, banner_text="Hello", clock=clock, locale="en_US")
    session = WeatherSession(InstantProvider(), logging.getLogger("test_cli.live"))

    frames: list[tuple[float, float, float]] = []
    render = view.render

    def recording_render(state: SessionState, now: float | None = None) -> RenderableType:
        now = clock() if now is None else now
        result = render(state, now=now)
        if state.forecast_revision:
            arrival = view.arrival
            frames.append((arrival.offset(now), arrival.opacity(now), view.pulse.scale(now)))
        return result

    monkeypatch.setattr(view, "render", recording_render)

    state = asyncio.run(cli._run_query(session, view, console, "Lisbon"))

    assert state.phase is SessionPhase.SUCCESS
    offsets = [offset for offset, _, _ in frames]
    assert offsets[0] == 50.0
    assert offsets == sorted(offsets, reverse=True)
    assert len(frames) > 3
    assert frames[-1][:2] == (0.0, 1.0)
    # The banner pulse keeps moving while frames are drawn.
    assert len({scale for _, _, scale in frames}) > 1
    assert view.is_animating(clock.now) is False


@respx.mock
def test_animated_cli_routes_logs_to_status_line_and_restores_handlers(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _set_required_env(monkeypatch, tmp_path)
    _mock_provider(
        httpx.Response(200, json=CURRENT_OK),
        httpx.Response(200, json=FORECAST_OK),
    )
    during_query: list[list[logging.Handler]] = []
    status_lines: list[str | None] = []
    detach = WeatherView.detach_logger

    def recording_detach(self: WeatherView) -> None:
        during_query.append(list(logging.getLogger("city_weather").handlers))
        status_lines.append(self.status_line)
        detach(self)

    monkeypatch.setattr(WeatherView, "detach_logger", recording_detach)

    assert cli.main(["--city", "Lisbon"]) == 0

    assert len(during_query) == 1
    assert [type(handler).__name__ for handler in during_query[0]] == ["_StatusLogHandler"]
    assert status_lines[0] is not None and "succeeded" in status_lines[0]
    handlers = logging.getLogger("city_weather").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, JsonConsoleFormatter)
