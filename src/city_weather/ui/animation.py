"""Time-driven tween values for the forecast slide-in and the banner pulse.

Both classes are pure functions of a monotonic timestamp (seconds), so a
frame can be rendered for any instant without sleeping.
"""

from __future__ import annotations

from collections.abc import Sequence


def interpolate(
    value: float,
    input_range: Sequence[float],
    output_range: Sequence[float],
) -> float:
    """Map ``value`` linearly from a two-point input range onto an output range.

    Values outside the input range are clamped to its ends.
    """
    in_start, in_end = input_range
    out_start, out_end = output_range
    if in_end == in_start:
        return float(out_start)
    t = (value - in_start) / (in_end - in_start)
    t = min(max(t, 0.0), 1.0)
    return out_start + (out_end - out_start) * t


class ArrivalAnimation:
    """One-shot slide from offset 50 to 0 over 500ms.

    Opacity is coupled to the same value: fully visible at offset 0, fully
    transparent at offset 50.
    """

    START_OFFSET = 50.0
    END_OFFSET = 0.0
    DURATION_SECONDS = 0.5

    def __init__(self) -> None:
        self._started_at: float | None = None

    def start(self, now: float) -> None:
        """(Re)start from the initial offset."""
        self._started_at = now

    def finish(self) -> None:
        """Jump straight to the resting state."""
        self._started_at = float("-inf")

    def offset(self, now: float) -> float:
        if self._started_at is None:
            return self.START_OFFSET
        elapsed = max(now - self._started_at, 0.0)
        return interpolate(
            elapsed,
            (0.0, self.DURATION_SECONDS),
            (self.START_OFFSET, self.END_OFFSET),
        )

    def opacity(self, now: float) -> float:
        return interpolate(self.offset(now), (0.0, 50.0), (1.0, 0.0))

    def is_running(self, now: float) -> bool:
        if self._started_at is None:
            return False
        return now - self._started_at < self.DURATION_SECONDS


class PulseAnimation:
    """Endless 0 -> 1 -> 0 loop, 500ms each way."""

    HALF_PERIOD_SECONDS = 0.5

    def __init__(self, started_at: float) -> None:
        self.started_at = started_at

    def progress(self, now: float) -> float:
        period = 2 * self.HALF_PERIOD_SECONDS
        position = (now - self.started_at) % period / self.HALF_PERIOD_SECONDS
        return position if position <= 1.0 else 2.0 - position

    def opacity(self, now: float) -> float:
        return self.progress(now)

    def scale(self, now: float) -> float:
        return interpolate(self.progress(now), (0.0, 1.0), (1.0, 1.2))
