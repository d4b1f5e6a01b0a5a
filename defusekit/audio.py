"""Wavetable tone generator for the wave game's beeps and final boom."""

from __future__ import annotations

import math

from defusekit.game import WaveState

AUDIO_PIN = 36

WAVETABLE_N = 1000
SAMPLE_RATE = 20_000
PWM_TOP = 1_000_000 // SAMPLE_RATE - 1

BEEP_FREQ_HZ = 500
BEEP_DURATION_MS = 50
BEEP_INTERVAL_MS = 1000

BOOM_DURATION_MS = 1500
BOOM_FREQ_START = 80
BOOM_FREQ_END = 40

_PHASE_ONE = 1 << 16
_TABLE_SPAN = WAVETABLE_N << 16


def build_wavetable() -> list[int]:
    """One period of a full-scale 16-bit sine, truncated toward zero."""
    return [int(32767.0 * math.sin(2.0 * math.pi * i / WAVETABLE_N)) for i in range(WAVETABLE_N)]


class AudioEngine:
    """Direct digital synthesis driven once per frame by the game state.

    ``step`` and ``offset`` are 16.16 fixed-point phase values; ``next_sample``
    advances the phase by one sample and returns the PWM level for it.
    """

    def __init__(self) -> None:
        self.wavetable = build_wavetable()
        self.step = 0
        self.offset = 0
        self._prev_state = WaveState.IDLE
        self._since_last_beep = 0
        self._beep_elapsed = 0
        self.beep_on = False
        self.boom_playing = False
        self._boom_elapsed = 0

    @property
    def frequency(self) -> float:
        """The frequency currently being synthesised, in hertz."""
        return self.step * SAMPLE_RATE / _TABLE_SPAN

    @property
    def silent(self) -> bool:
        return self.step == 0

    def _set_freq(self, freq_hz: float) -> None:
        if freq_hz <= 0.0:
            self.step = 0
            return
        self.step = int(freq_hz * WAVETABLE_N * _PHASE_ONE / SAMPLE_RATE)

    def _silence(self) -> None:
        self.step = 0
        self.offset = 0

    def tick(self, state: WaveState, dt_ms: int) -> None:
        """Advance the sound schedule by ``dt_ms`` for the given game state."""
        if state is not self._prev_state:
            self._since_last_beep = 0
            self._beep_elapsed = 0
            self.beep_on = False
            self.boom_playing = state is WaveState.COMPLETE
            self._boom_elapsed = 0
            self._silence()
            self._prev_state = state

        if self.boom_playing:
            self._boom_elapsed += dt_ms
            if self._boom_elapsed >= BOOM_DURATION_MS:
                self._silence()
                self.boom_playing = False
            else:
                t = self._boom_elapsed / BOOM_DURATION_MS
                self._set_freq(BOOM_FREQ_START - t * (BOOM_FREQ_START - BOOM_FREQ_END))
            return

        if state is WaveState.PLAYING:
            if self.beep_on:
                self._beep_elapsed += dt_ms
                if self._beep_elapsed >= BEEP_DURATION_MS:
                    self._silence()
                    self.beep_on = False
                    self._beep_elapsed = 0
                    self._since_last_beep = 0
            else:
                self._since_last_beep += dt_ms
                if self._since_last_beep >= BEEP_INTERVAL_MS:
                    self._set_freq(BEEP_FREQ_HZ)
                    self.beep_on = True
                    self._beep_elapsed = 0
            return

        self._silence()

    def next_sample(self, wrap: int = PWM_TOP) -> int:
        """Advance one sample and return its PWM level in ``0..wrap``."""
        self.offset += self.step
        if self.offset >= _TABLE_SPAN:
            self.offset -= _TABLE_SPAN
        if self.step == 0:
            return wrap // 2
        sample = self.wavetable[self.offset >> 16]
        return ((sample + 32768) * wrap) >> 16