"""Blast gauge module: stop a sweeping servo needle inside the right LED zone.

The module is non-blocking. ``BlastGauge.update`` is called once per frame
with a debounced button edge and a monotonic microsecond clock. Every wait
is a deadline checked against that clock, never a sleep.
"""

from __future__ import annotations

import logging
import random
import time
from enum import Enum, auto
from typing import Callable, Optional, Protocol

from defusekit.game import Event
from defusekit.led import RgbLed

log = logging.getLogger(__name__)

BG_WS2812_PIN = 16
BG_SERVO_PIN = 20
BG_BUTTON_PIN = 5
BG_LED_R_PIN = 6
BG_LED_G_PIN = 3
BG_LED_B_PIN = 2

NUM_LEDS_TOTAL = 24
NUM_LEDS_ACTIVE = 12
FIRST_LED = 0

SERVO_PERIOD_US = 20_000
SERVO_MIN_US = 500
SERVO_MAX_US = 2_500
SERVO_RANGE_DEG = 180

NUM_ZONES = 4
LEDS_PER_ZONE = 3

SPEED_ROUND1_MS = 12
SPEED_ROUND2_MS = 8
SPEED_ROUND3_MS = 5

ZONE_SHIFT_MS = 400

FLASH_ON_MS = 150
FLASH_OFF_MS = 75
PASS_FLASHES = 3
STRIKE_FLASHES = 2
INTER_ROUND_MS = 500

BUTTON_DEBOUNCE_MS = 40

# Ring colours are packed as 0xGGRRBB00.
COLOR_RED = 0x00FF0000
COLOR_ORANGE = 0x40FF0000
COLOR_YELLOW = 0x80FF0000
COLOR_GREEN = 0xFF000000
COLOR_OFF = 0x00000000


def dim(color: int) -> int:
    """Quarter the brightness of a packed GRB colour."""
    return (color >> 2) & 0x3F3F3F00


ZONE_COLORS = (dim(COLOR_GREEN), dim(COLOR_YELLOW), dim(COLOR_ORANGE), dim(COLOR_RED))
ZONE_NAMES = ("GREEN", "YELLOW", "ORANGE", "RED")

# RGB of the dedicated target LED for each zone.
_TARGET_LED_COLORS = ((0, 255, 0), (255, 255, 0), (255, 128, 0), (255, 0, 0))


class BgState(Enum):
    IDLE = auto()
    ROUND1 = auto()
    ROUND2 = auto()
    ROUND3 = auto()
    FLASH_PASS = auto()
    FLASH_STRIKE = auto()
    INTER_ROUND = auto()
    DEFUSED = auto()
    EXPLODED = auto()


_STATE_NAMES = {
    BgState.IDLE: "IDLE",
    BgState.ROUND1: "ROUND1",
    BgState.ROUND2: "ROUND2",
    BgState.ROUND3: "ROUND3",
    BgState.FLASH_PASS: "PASS",
    BgState.FLASH_STRIKE: "STRIKE",
    BgState.INTER_ROUND: "WAIT",
    BgState.DEFUSED: "DEFUSED",
    BgState.EXPLODED: "EXPLODED",
}

_ROUND_NUMBERS = {BgState.ROUND1: 1, BgState.ROUND2: 2, BgState.ROUND3: 3}
_NEXT_ROUND = {BgState.ROUND1: BgState.ROUND2, BgState.ROUND2: BgState.ROUND3}


def state_name(state: BgState) -> str:
    """Short label for a state, as shown on the status line."""
    return _STATE_NAMES[state]


def angle_to_led(angle: int) -> int:
    """Map a servo angle to the active LED under the needle (mirrored)."""
    angle = min(max(angle, 0), SERVO_RANGE_DEG)
    mirrored = SERVO_RANGE_DEG - angle
    return min(mirrored * (NUM_LEDS_ACTIVE - 1) // SERVO_RANGE_DEG, NUM_LEDS_ACTIVE - 1)


def led_to_zone(led: int) -> int:
    return led // LEDS_PER_ZONE


class LedRing:
    """Pixel buffer of the WS2812 ring; only the top semicircle is used."""

    def __init__(self) -> None:
        self.pixels = [COLOR_OFF] * NUM_LEDS_TOTAL
        self.shows = 0

    def _show(self) -> None:
        self.shows += 1

    def _blank_inactive(self) -> None:
        for i in range(NUM_LEDS_ACTIVE, NUM_LEDS_TOTAL):
            self.pixels[FIRST_LED + i] = COLOR_OFF

    def render_zones(self, offset: int = 0) -> None:
        """Paint the four coloured zones, rotated round the ring by ``offset``."""
        for i in range(NUM_LEDS_ACTIVE):
            shifted = (i + NUM_LEDS_ACTIVE - offset) % NUM_LEDS_ACTIVE
            self.pixels[FIRST_LED + i] = ZONE_COLORS[shifted // LEDS_PER_ZONE]
        self._blank_inactive()
        self._show()

    def render_green_cluster(self, green_start: int) -> None:
        """All red but one green cluster, laid out against the sweep direction."""
        for i in range(NUM_LEDS_ACTIVE):
            inverted = NUM_LEDS_ACTIVE - 1 - i
            in_green = green_start <= inverted < green_start + LEDS_PER_ZONE
            self.pixels[FIRST_LED + i] = dim(COLOR_GREEN) if in_green else dim(COLOR_RED)
        self._blank_inactive()
        self._show()

    def fill_active(self, color: int) -> None:
        for i in range(NUM_LEDS_ACTIVE):
            self.pixels[FIRST_LED + i] = color
        self._show()

    def clear(self) -> None:
        self.pixels = [COLOR_OFF] * NUM_LEDS_TOTAL
        self._show()


class Servo:
    """Hobby servo on a 50 Hz PWM; tracks the commanded angle and pulse width."""

    def __init__(self) -> None:
        self.angle = 0
        self.pulse_us = SERVO_MIN_US

    def set_angle(self, angle: int) -> None:
        angle = min(max(angle, 0), SERVO_RANGE_DEG)
        self.pulse_us = SERVO_MIN_US + (SERVO_MAX_US - SERVO_MIN_US) * angle // SERVO_RANGE_DEG
        self.angle = angle


class ButtonDebouncer:
    """Turns a raw active button level into one debounced press edge."""

    def __init__(self) -> None:
        self._last_level = False
        self._last_change_us = 0
        self._stable_pressed = False

    def poll(self, pressed: bool, now_us: int) -> bool:
        """Return True on the frame where a debounced press begins."""
        if pressed != self._last_level:
            self._last_level = pressed
            self._last_change_us = now_us
            return False
        if now_us - self._last_change_us < BUTTON_DEBOUNCE_MS * 1000:
            return False
        if pressed and not self._stable_pressed:
            self._stable_pressed = True
            return True
        if not pressed:
            self._stable_pressed = False
        return False


class _Rng(Protocol):
    def randrange(self, stop: int) -> int: ...


def _monotonic_us() -> int:
    return time.monotonic_ns() // 1000


class BlastGauge:
    """The three-round blast gauge state machine.

    Round 1 stops in a named zone, round 2 finds the green cluster and
    round 3 stops in a named zone while the zones rotate. ``update`` returns
    ``Event.STRIKE`` on a wrong stop and ``Event.COMPLETE`` when defused.
    """

    def __init__(self, rng: Optional[_Rng] = None,
                 clock: Optional[Callable[[], int]] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock if clock is not None else _monotonic_us
        self.ring = LedRing()
        self.servo = Servo()
        self.target_led = RgbLed()
        self.reset()

    def reset(self) -> None:
        """Return to IDLE, waiting for a button press to arm."""
        self.state = BgState.IDLE
        self.strikes = 0
        self.target_zone = 0
        self.r2_green_start = 0
        self.r3_offset = 0
        self.r3_last_shift_us = 0
        self.angle = 0
        self.direction = 1
        self.sweep_delay_ms = 0
        self.next_step_us = 0
        self.sweeping = False
        self.hold_until_us = 0
        self.flash_remaining = 0
        self.flash_on = False
        self.flash_next_toggle_us = 0
        self.pending_next = BgState.IDLE
        self.servo.set_angle(0)
        self.ring.render_zones(0)
        log.debug("blast gauge idle, waiting for button press to arm")
        self._update_target_led()

    @property
    def servo_angle(self) -> int:
        return self.servo.angle

    def current_round(self) -> int:
        """1, 2 or 3 while a round is running, otherwise 0."""
        return _ROUND_NUMBERS.get(self.state, 0)

    def _update_target_led(self) -> None:
        if self.state in (BgState.ROUND1, BgState.ROUND3) and 0 <= self.target_zone < NUM_ZONES:
            self.target_led.set_color(*_TARGET_LED_COLORS[self.target_zone])
        else:
            self.target_led.set_color(0, 0, 0)

    def _setup_round(self, round_state: BgState) -> None:
        self.state = round_state
        self.sweeping = True
        self.angle = 0
        self.direction = 1
        self.next_step_us = 0
        self.servo.set_angle(0)

        if round_state is BgState.ROUND1:
            self.target_zone = self._rng.randrange(NUM_ZONES)
            self.sweep_delay_ms = SPEED_ROUND1_MS
            self.ring.render_zones(0)
            log.debug("round 1, target zone %s", ZONE_NAMES[self.target_zone])
        elif round_state is BgState.ROUND2:
            self.r2_green_start = self._rng.randrange(NUM_ZONES) * LEDS_PER_ZONE
            self.target_zone = self.r2_green_start // LEDS_PER_ZONE
            self.sweep_delay_ms = SPEED_ROUND2_MS
            self.ring.render_green_cluster(self.r2_green_start)
            log.debug("round 2, green LEDs %d-%d",
                      self.r2_green_start, self.r2_green_start + LEDS_PER_ZONE - 1)
        elif round_state is BgState.ROUND3:
            self.target_zone = self._rng.randrange(NUM_ZONES)
            self.r3_offset = 0
            self.r3_last_shift_us = self._clock()
            self.sweep_delay_ms = SPEED_ROUND3_MS
            self.ring.render_zones(0)
            log.debug("round 3, target zone %s", ZONE_NAMES[self.target_zone])

    def _flash_color(self) -> int:
        return dim(COLOR_GREEN) if self.state is BgState.FLASH_PASS else dim(COLOR_RED)

    def _start_flash(self, flash_state: BgState, pulses: int, now_us: int) -> None:
        self.state = flash_state
        self.flash_remaining = pulses * 2 - 2
        self.flash_on = True
        self.ring.fill_active(self._flash_color())
        self.flash_next_toggle_us = now_us + FLASH_ON_MS * 1000

    def _player_zone(self) -> int:
        led = angle_to_led(self.servo.angle)
        if self.state is BgState.ROUND3:
            shifted = (led + NUM_LEDS_ACTIVE - self.r3_offset) % NUM_LEDS_ACTIVE
            return shifted // LEDS_PER_ZONE
        if self.state is BgState.ROUND2:
            return led_to_zone(NUM_LEDS_ACTIVE - 1 - led)
        return led_to_zone(led)

    def _stop(self, now_us: int) -> Event:
        self.sweeping = False
        zone = self._player_zone()
        log.debug("stopped at angle=%d led=%d zone=%s target=%s",
                  self.servo.angle, angle_to_led(self.servo.angle),
                  ZONE_NAMES[zone], ZONE_NAMES[self.target_zone])
        if zone == self.target_zone:
            next_state = _NEXT_ROUND.get(self.state, BgState.DEFUSED)
            self.pending_next = next_state
            self._start_flash(BgState.FLASH_PASS, PASS_FLASHES, now_us)
            if next_state is BgState.DEFUSED:
                log.debug("defused")
                return Event.COMPLETE
            return Event.NONE
        self.strikes += 1
        log.debug("strike, module-local count %d", self.strikes)
        self.pending_next = self.state
        self._start_flash(BgState.FLASH_STRIKE, STRIKE_FLASHES, now_us)
        return Event.STRIKE

    def _sweep(self, now_us: int) -> None:
        if not self.sweeping or now_us < self.next_step_us:
            return
        self.angle += self.direction
        if self.angle >= SERVO_RANGE_DEG:
            self.angle = SERVO_RANGE_DEG
            self.direction = -1
        elif self.angle <= 0:
            self.angle = 0
            self.direction = 1
        self.servo.set_angle(self.angle)
        self.next_step_us = now_us + self.sweep_delay_ms * 1000

        if (self.state is BgState.ROUND3
                and now_us - self.r3_last_shift_us > ZONE_SHIFT_MS * 1000):
            self.r3_offset = (self.r3_offset + 1) % NUM_LEDS_ACTIVE
            self.ring.render_zones(self.r3_offset)
            self.r3_last_shift_us = now_us

    def _update_flash(self, now_us: int) -> None:
        if now_us >= self.flash_next_toggle_us and self.flash_remaining > 0:
            self.flash_on = not self.flash_on
            self.ring.fill_active(self._flash_color() if self.flash_on else COLOR_OFF)
            self.flash_remaining -= 1
            ms = FLASH_ON_MS if self.flash_on else FLASH_OFF_MS
            self.flash_next_toggle_us = now_us + ms * 1000
        if self.flash_remaining == 0 and now_us >= self.flash_next_toggle_us:
            next_state = self.pending_next
            if next_state is BgState.DEFUSED:
                self.state = BgState.DEFUSED
                self.ring.render_zones(0)
            elif next_state is BgState.EXPLODED:
                self.state = BgState.EXPLODED
                self.ring.clear()
            else:
                self.state = BgState.INTER_ROUND
                self.hold_until_us = now_us + INTER_ROUND_MS * 1000
                self.pending_next = next_state

    def update(self, button_edge: bool, now_us: int) -> Event:
        """Advance one frame; returns the event this frame produced."""
        event = Event.NONE
        state = self.state
        if state is BgState.IDLE:
            if button_edge:
                log.debug("armed, starting round 1")
                self._setup_round(BgState.ROUND1)
        elif state in _ROUND_NUMBERS:
            if button_edge and self.sweeping:
                event = self._stop(now_us)
            else:
                self._sweep(now_us)
        elif state in (BgState.FLASH_PASS, BgState.FLASH_STRIKE):
            self._update_flash(now_us)
        elif state is BgState.INTER_ROUND:
            if now_us >= self.hold_until_us:
                self._setup_round(self.pending_next)
        self._update_target_led()
        return event