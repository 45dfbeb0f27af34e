"""Display formatting for provider timestamps, temperatures and icons."""

from __future__ import annotations

import math
from datetime import datetime

from babel import Locale, UnknownLocaleError, default_locale
from babel.dates import format_datetime, format_skeleton, get_time_format

from .config import DEFAULT_ICON_URL_TEMPLATE

# Used when the environment names no locale Babel knows (e.g. LANG unset).
FALLBACK_LOCALE = "en_US"
# Short weekday, short month, numeric day; each locale picks its own order.
DATE_SKELETON = "MMMEd"

LocaleLike = Locale | str | None


def resolve_locale(identifier: LocaleLike = None) -> Locale:
    """Parse ``identifier``, or take the environment's LC_TIME locale when None.

    Explicit identifiers may use ``-`` or ``_`` separators and raise on
    unknown locales. The environment lookup never raises.
    """
    if isinstance(identifier, Locale):
        return identifier
    if identifier is not None:
        return Locale.parse(identifier.strip().replace("-", "_"))
    try:
        return Locale.parse(default_locale("LC_TIME") or FALLBACK_LOCALE)
    except (UnknownLocaleError, ValueError):
        return Locale.parse(FALLBACK_LOCALE)


def _local(dt: int | float) -> datetime:
    # Viewer's timezone, never the city's.
    return datetime.fromtimestamp(dt).astimezone()


def _two_digit_hour_pattern(locale: Locale) -> str:
    """The locale's short time pattern with the hour widened to two digits."""
    pattern = get_time_format("short", locale=locale).pattern
    # Odd-indexed pieces are quoted literals and stay untouched.
    pieces = pattern.split("'")
    for index in range(0, len(pieces), 2):
        piece = pieces[index]
        for letter in "hHkK":
            doubled = letter * 2
            if letter in piece and doubled not in piece:
                piece = piece.replace(letter, doubled)
        pieces[index] = piece
    return "'".join(pieces)


def format_date(dt: int | float, locale: LocaleLike = None) -> str:
    """Short weekday, month and day in the locale's own order, e.g. ``Mon, Jan 1``."""
    return format_skeleton(DATE_SKELETON, _local(dt), locale=resolve_locale(locale))


def format_time(dt: int | float, locale: LocaleLike = None) -> str:
    """Two-digit hour and minute in the locale's clock, e.g. ``03:00 AM`` or ``03:00``."""
    resolved = resolve_locale(locale)
    return format_datetime(_local(dt), _two_digit_hour_pattern(resolved), locale=resolved)


def round_half_up(value: float) -> int:
    """Round like a browser's Math.round: halves go toward +infinity."""
    return math.floor(value + 0.5)


def format_temperature(value: float) -> str:
    return f"{round_half_up(value)}°C"


def icon_url(icon_code: str, template: str = DEFAULT_ICON_URL_TEMPLATE) -> str:
    return template.format(icon_code=icon_code)
