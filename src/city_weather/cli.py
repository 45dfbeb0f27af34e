"""CLI: look up a city's current weather and six-day forecast in the terminal.

The interactive prompt waits for each query (and its arrival animation) to
finish before asking again, so overlapping queries are only reachable through
``WeatherSession.submit`` directly, never from the terminal.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid

from rich.console import Console
from rich.live import Live

from .config import Settings, load_settings
from .exceptions import ConfigError, JournalError
from .journal import JournalWriter
from .log_setup import setup_logger
from .redaction import register_secret
from .session.controller import WeatherSession
from .session.models import SessionPhase, SessionState
from .ui.weather_view import WeatherView
from .weather.openweather import OpenWeatherProvider

FRAMES_PER_SECOND = 20


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse weather CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show current conditions and a six-day forecast for a city."
    )
    parser.add_argument(
        "--city",
        type=str,
        default=None,
        help="Run a single query for this city and exit (sent to the provider as typed).",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Console width in columns used for the narrow/wide layout decision.",
    )
    parser.add_argument(
        "--no-animation",
        action="store_true",
        help="Print only the final frame instead of a live animated display.",
    )
    parser.add_argument(
        "--journal",
        action="store_true",
        help="Journal query events and raw payloads regardless of JOURNAL_ENABLED.",
    )
    args = parser.parse_args(argv)
    if args.width is not None and args.width <= 0:
        parser.error("--width must be > 0 when provided.")
    return args


def _journal_query(
    journal: JournalWriter | None,
    logger: logging.Logger,
    city: str,
    state: SessionState,
) -> None:
    if journal is None:
        return
    try:
        journal.record_query_outcome(city, state)
    except JournalError as exc:
        logger.error("Failed to journal weather query: %s", exc, extra={"city": city})


async def _run_query(
    session: WeatherSession,
    view: WeatherView,
    console: Console,
    city: str,
) -> SessionState:
    if not view.animate:
        state = await session.submit(city)
        console.print(view.render(state))
        return state

    with Live(
        view.render(session.state),
        console=console,
        refresh_per_second=FRAMES_PER_SECOND,
    ) as live:
        task = asyncio.create_task(session.submit(city))
        while True:
            # render() starts the arrival animation, so it runs before the exit check.
            now = view.clock()
            live.update(view.render(session.state, now=now))
            if task.done() and not view.is_animating(now):
                break
            await asyncio.sleep(1 / FRAMES_PER_SECOND)
    return await task


async def _run(
    args: argparse.Namespace,
    settings: Settings,
    logger: logging.Logger,
    console: Console,
    journal: JournalWriter | None,
) -> int:
    view = WeatherView(
        console=console,
        banner_text=settings.banner_text,
        narrow_threshold=settings.viewport_narrow_threshold,
        icon_url_template=settings.openweather_icon_url_template,
        width=args.width,
        animate=not args.no_animation,
        locale=settings.display_locale,
    )
    async with OpenWeatherProvider(settings=settings, logger=logger) as provider:
        session = WeatherSession(
            provider,
            logger,
            guard_stale_responses=settings.guard_stale_responses,
        )

        async def query(city: str) -> SessionState:
            if journal is not None:
                try:
                    journal.record_query_start(city)
                except JournalError as exc:
                    logger.error(
                        "Failed to journal weather query start: %s", exc, extra={"city": city}
                    )
            if view.animate:
                view.attach_logger(logger)
            try:
                state = await _run_query(session, view, console, city)
            finally:
                view.detach_logger()
            _journal_query(journal, logger, city, state)
            return state

        if args.city is not None:
            state = await query(args.city)
            return 4 if state.phase is SessionPhase.FAILED else 0

        while True:
            try:
                city = await asyncio.to_thread(console.input, "Enter city name: ")
            except EOFError:
                console.print()
                return 0
            await query(city)


def main(argv: list[str] | None = None) -> int:
    """Run the weather CLI."""
    args = parse_args(argv)
    session_id = uuid.uuid4().hex[:12]
    logger = setup_logger(session_id=session_id)
    console = Console()
    journal: JournalWriter | None = None

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.setLevel(settings.log_level)
    register_secret(settings.openweather_api_key)

    if settings.journal_enabled or args.journal:
        try:
            journal = JournalWriter(
                journal_dir=settings.journal_dir,
                raw_payload_dir=settings.raw_payload_dir,
                session_id=session_id,
            )
            journal.write_event(
                "weather_startup",
                payload=settings.safe_summary(),
                metadata={"session_id": session_id},
            )
        except JournalError as exc:
            logger.error("Failed to initialize weather journal: %s", exc)
            return 3

    exit_code = 0
    try:
        exit_code = asyncio.run(_run(args, settings, logger, console, journal))
    except KeyboardInterrupt:
        console.print()
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        exit_code = 99
        logger.exception("Unexpected weather CLI failure: %s", exc)
    finally:
        if journal is not None:
            try:
                journal.write_event(
                    "weather_shutdown",
                    payload={"exit_code": exit_code},
                    metadata={"session_id": session_id},
                )
            except JournalError:
                logger.error("Failed to write weather_shutdown event.")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
