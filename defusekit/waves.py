"""Sine-wave plotting for the wave-matching game."""

from __future__ import annotations

import math
from typing import Sequence

from defusekit.display import Color, Display

WAVE_WIDTH = 320
PLOT_HEIGHT = 180
PLOT_CENTER_Y = 90


def clamp_y(y: int) -> int:
    """Clamp a row to the plotting area ``[0, PLOT_HEIGHT - 1]``."""
    return min(max(y, 0), PLOT_HEIGHT - 1)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compute_wave(
    frequency: float,
    amplitude: float,
    center_y: int = PLOT_CENTER_Y,
    width: int = WAVE_WIDTH,
) -> list[int]:
    """Return one clamped row coordinate per column for the given sine wave."""
    return [
        clamp_y(
            _round_half_away(
                center_y + amplitude * math.sin(2.0 * math.pi * frequency * x / width)
            )
        )
        for x in range(width)
    ]


def draw_target(display: Display, y_coords: Sequence[int]) -> None:
    """Draw the target wave in light grey."""
    for x, y in enumerate(y_coords):
        display.draw_pixel(x, y, Color.LGRAY)


def draw_player(
    display: Display,
    old_y: Sequence[int],
    new_y: Sequence[int],
    target_y: Sequence[int],
) -> None:
    """Erase the previous player wave, restoring target pixels, and draw the new one."""
    for x, (old, new, target) in enumerate(zip(old_y, new_y, target_y)):
        display.draw_pixel(x, old, Color.LGRAY if old == target else Color.BLACK)
        display.draw_pixel(x, new, Color.GREEN)