"""Viewport classification and colour helpers shared by the weather view."""

from __future__ import annotations

from rich.color import Color, blend_rgb

# Terminal cells are converted to logical units so the narrow/wide threshold
# keeps the same meaning as on a pixel-based screen.
CELL_WIDTH_UNITS = 8
DEFAULT_NARROW_THRESHOLD = 600

BACKGROUND = "#3d405b"
TEXT = "#f4f1de"
ACCENT = "#e07a5f"
SECONDARY = "#81b29a"


def logical_width(columns: int) -> int:
    return columns * CELL_WIDTH_UNITS


def is_narrow_viewport(columns: int, threshold: int = DEFAULT_NARROW_THRESHOLD) -> bool:
    """True when the wrapped-grid layout should be used instead of a single row."""
    return logical_width(columns) < threshold


def fade(color: str, opacity: float, background: str = BACKGROUND) -> str:
    """Blend ``color`` toward ``background``; opacity 0 returns the background."""
    opacity = min(max(opacity, 0.0), 1.0)
    blended = blend_rgb(
        Color.parse(background).get_truecolor(),
        Color.parse(color).get_truecolor(),
        opacity,
    )
    return blended.hex
