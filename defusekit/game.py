"""Wave-matching game: steer a player sine wave onto a random target wave."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional, Protocol

from defusekit.led import RgbLed

FREQ_TOLERANCE = 0.3
AMP_TOLERANCE = 5.0
LOCK_DURATION_US = 1_500_000
WIN_HOLD_MS = 2_000
DEAD_ZONE = 0.5
STRIKE_TIME_US = 15_000_000
WAIT_TIME_US = 15_000_000

NUM_SIGNAL_COLORS = 4
BASE_ROUNDS_MIN = 2
BASE_ROUNDS_MAX = 5

STABLE_THRESHOLD = 0.15
STABLE_TIME_US = 500_000
OVERSOLVE_GRACE_US = 3_000_000

STRIKE_FLASH_US = 200_000
OVERSOLVE_FLASH_US = 300_000
WHITE_FLASH_US = 100_000


class Event(IntEnum):
    """What a single update reported."""

    NONE = 0
    STRIKE = 1
    COMPLETE = 2


class WaveState(Enum):
    IDLE = auto()
    PLAYING = auto()
    WIN = auto()
    RESET = auto()
    WAIT = auto()
    COMPLETE = auto()
    FLASH_STRIKE = auto()
    FLASH_WHITE = auto()


@dataclass
class WaveParams:
    frequency: float
    amplitude: float


class _Rng(Protocol):
    def randrange(self, stop: int) -> int: ...


def new_target(rng: _Rng) -> WaveParams:
    """Pick a target with frequency 1.00..10.00 in 0.01 steps and amplitude 15..55."""
    frequency = 1.0 + rng.randrange(901) / 100.0
    amplitude = float(15 + rng.randrange(41))
    return WaveParams(frequency, amplitude)


def check_match(player: float, target: float, tolerance: float) -> bool:
    """True when ``player`` lies within ``tolerance`` of ``target``."""
    return abs(player - target) <= tolerance


class WaveGame:
    """State machine for the wave-matching module.

    ``update`` is called once per frame with the smoothed pot readings and a
    monotonic microsecond clock; it returns the :class:`Event` of the frame.
    """

    def __init__(self, led: Optional[RgbLed] = None, rng: Optional[_Rng] = None) -> None:
        self.led = led if led is not None else RgbLed()
        self._rng = rng if rng is not None else random.Random()
        self._prev: Optional[tuple[float, float]] = None
        self._stable_since: Optional[int] = None
        self.reset()

    def reset(self) -> None:
        """Start a fresh module: new signal colour, round count and target."""
        self.state = WaveState.IDLE
        self.lock_start_us: Optional[int] = None
        self.win_start_ms = 0
        self.play_start_us = 0
        self.wait_start_us = 0
        self.flash_start_us = 0
        self.flash_duration_us = 0
        self.pending_state = WaveState.IDLE
        self.freq_matched = False
        self.amp_matched = False

        self.signal_color = self._rng.randrange(NUM_SIGNAL_COLORS)
        self.base_rounds = BASE_ROUNDS_MIN + self.signal_color
        self.strikes = 0
        self.rounds_won = 0
        self.module_complete = False

        self._initial: Optional[tuple[float, float]] = None
        self.target = new_target(self._rng)

    def rounds_needed(self) -> int:
        """Rounds to win before waiting out the module; each strike adds one."""
        return self.base_rounds + self.strikes

    def reset_idle(self) -> None:
        """Return to IDLE and forget the pot baseline and stability tracking."""
        self.state = WaveState.IDLE
        self.lock_start_us = None
        self.play_start_us = 0
        self.wait_start_us = 0
        self.flash_start_us = 0
        self.flash_duration_us = 0
        self.pending_state = WaveState.IDLE
        self.freq_matched = False
        self.amp_matched = False
        self._initial = None
        self._prev = None
        self._stable_since = None

    def update(self, player_freq: float, player_amp: float, now_us: int) -> Event:
        if self.module_complete:
            return Event.NONE
        state = self.state
        if state is WaveState.IDLE:
            self._update_idle(player_freq, player_amp, now_us)
        elif state is WaveState.PLAYING:
            return self._update_playing(player_freq, player_amp, now_us)
        elif state is WaveState.WIN:
            self._update_win(now_us)
        elif state is WaveState.RESET:
            self._update_reset(now_us)
        elif state in (WaveState.FLASH_STRIKE, WaveState.FLASH_WHITE):
            self._update_flash(now_us)
        elif state is WaveState.WAIT:
            return self._update_wait(player_freq, player_amp, now_us)
        return Event.NONE

    def _start_flash(self, now_us: int, duration_us: int,
                     pending: WaveState, flash: WaveState) -> None:
        self.flash_start_us = now_us
        self.flash_duration_us = duration_us
        self.pending_state = pending
        self.state = flash

    def _target_matched(self, player_freq: float, player_amp: float) -> tuple[bool, bool]:
        return (
            check_match(player_freq, self.target.frequency, FREQ_TOLERANCE),
            check_match(player_amp, self.target.amplitude, AMP_TOLERANCE),
        )

    def _update_idle(self, player_freq: float, player_amp: float, now_us: int) -> None:
        if self._initial is None:
            self._initial = (player_freq, player_amp)
        initial_freq, initial_amp = self._initial
        if abs(player_freq - initial_freq) > DEAD_ZONE or abs(player_amp - initial_amp) > DEAD_ZONE:
            self.state = WaveState.PLAYING
            self.play_start_us = now_us
            self.led.set_playing()

    def _update_playing(self, player_freq: float, player_amp: float, now_us: int) -> Event:
        event = Event.NONE
        if now_us - self.play_start_us >= STRIKE_TIME_US:
            self.strikes += 1
            self.play_start_us = now_us
            event = Event.STRIKE
            self.led.set_color(255, 0, 0)
            self._start_flash(now_us, STRIKE_FLASH_US, WaveState.PLAYING, WaveState.FLASH_STRIKE)

        pots_stable = False
        if self._prev is not None:
            prev_freq, prev_amp = self._prev
            still = (abs(player_freq - prev_freq) < STABLE_THRESHOLD
                     and abs(player_amp - prev_amp) < STABLE_THRESHOLD)
            if still:
                if self._stable_since is None:
                    self._stable_since = now_us
                pots_stable = now_us - self._stable_since >= STABLE_TIME_US
            else:
                self._stable_since = None
        self._prev = (player_freq, player_amp)

        self.freq_matched, self.amp_matched = self._target_matched(player_freq, player_amp)

        if self.freq_matched and self.amp_matched and pots_stable:
            if self.lock_start_us is None:
                self.lock_start_us = now_us
            elapsed = now_us - self.lock_start_us
            self.led.set_locking(min(elapsed / LOCK_DURATION_US, 1.0))
            if elapsed >= LOCK_DURATION_US:
                self.rounds_won += 1
                self.state = WaveState.WIN
                self.win_start_ms = now_us // 1000
                self.led.set_win()
                self._stable_since = None
        else:
            self.lock_start_us = None
            self.led.set_playing()
        return event

    def _update_win(self, now_us: int) -> None:
        if now_us // 1000 - self.win_start_ms < WIN_HOLD_MS:
            return
        if self.rounds_won >= self.rounds_needed():
            # A fresh target keeps the resting pot position from matching.
            self.state = WaveState.WAIT
            self.wait_start_us = now_us
            self.lock_start_us = None
            self.target = new_target(self._rng)
        else:
            self.state = WaveState.RESET

    def _update_reset(self, now_us: int) -> None:
        self.led.set_color(255, 255, 255)
        self.target = new_target(self._rng)
        self.lock_start_us = None
        self.play_start_us = 0
        self.freq_matched = False
        self.amp_matched = False
        self._initial = None
        self._start_flash(now_us, WHITE_FLASH_US, WaveState.IDLE, WaveState.FLASH_WHITE)

    def _update_flash(self, now_us: int) -> None:
        if now_us - self.flash_start_us < self.flash_duration_us:
            return
        if self.state is WaveState.FLASH_WHITE:
            self.led.set_color(0, 0, 0)
        elif self.pending_state is WaveState.PLAYING:
            self.led.set_playing()
        self.state = self.pending_state

    def _update_wait(self, player_freq: float, player_amp: float, now_us: int) -> Event:
        wait_elapsed = now_us - self.wait_start_us
        self.led.set_win()

        if wait_elapsed >= WAIT_TIME_US:
            self.state = WaveState.COMPLETE
            self.module_complete = True
            self.led.set_win()
            return Event.COMPLETE

        # The match flags latch "has left the target"; only a return to the
        # target after leaving it, past the grace period, counts as oversolving.
        currently_matched = all(self._target_matched(player_freq, player_amp))
        if not currently_matched:
            self.freq_matched = False
            self.amp_matched = False
        elif not self.freq_matched and not self.amp_matched and wait_elapsed > OVERSOLVE_GRACE_US:
            if self.lock_start_us is None:
                self.lock_start_us = now_us
            if now_us - self.lock_start_us >= LOCK_DURATION_US:
                self.led.set_color(255, 0, 0)
                self._start_flash(now_us, OVERSOLVE_FLASH_US, WaveState.RESET, WaveState.FLASH_STRIKE)
                self.lock_start_us = None
                return Event.STRIKE
        else:
            self.lock_start_us = None
        return Event.NONE