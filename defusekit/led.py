"""Common-anode RGB status LED driven by inverted PWM levels."""

from __future__ import annotations

import time

LED_R_PIN = 12
LED_G_PIN = 11
LED_B_PIN = 10

LED_OFF = 255
BRIGHTNESS = 30
FLASH_WHITE_SECONDS = 0.1


def scale_channel(value: int) -> int:
    """Scale an 8-bit channel down to the brightness cap."""
    if not 0 <= value <= 255:
        raise ValueError(f"colour channel out of range: {value}")
    return value * BRIGHTNESS // 255


class RgbLed:
    """Tracks the requested colour and the PWM level on each pin.

    ``levels`` holds the inverted PWM duty for red, green and blue: 255 is
    off, lower values are brighter. ``history`` records every colour set.
    """

    def __init__(self) -> None:
        self.color: tuple[int, int, int] = (0, 0, 0)
        self.levels: tuple[int, int, int] = (LED_OFF, LED_OFF, LED_OFF)
        self.history: list[tuple[int, int, int]] = []

    def set_color(self, r: int, g: int, b: int) -> None:
        self.levels = tuple(LED_OFF - scale_channel(v) for v in (r, g, b))
        self.color = (r, g, b)
        self.history.append(self.color)

    def set_idle(self) -> None:
        self.set_color(0, 0, 255)

    def set_playing(self) -> None:
        self.set_color(0, 0, 0)

    def set_locking(self, progress: float) -> None:
        """Blend from yellow towards green as ``progress`` goes from 0 to 1."""
        progress = min(max(progress, 0.0), 1.0)
        red = int(255.0 * (1.0 - progress) + 0.5)
        self.set_color(red, 255, 0)

    def set_win(self) -> None:
        self.set_color(0, 255, 0)

    def flash_white(self) -> None:
        self.set_color(255, 255, 255)
        time.sleep(FLASH_WHITE_SECONDS)
        self.set_color(0, 0, 0)