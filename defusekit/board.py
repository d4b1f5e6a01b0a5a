"""Slave board that runs the blast gauge and the wave game side by side.

Strikes and solves are reported to the master board over the one-byte link;
the master keeps the authoritative strike count and countdown.
"""

from __future__ import annotations

import argparse
import random
import sys
from typing import Callable, Optional

from defusekit.blast_gauge import BgState, BlastGauge, ButtonDebouncer, state_name
from defusekit.display import TFT_WIDTH, Color, Display
from defusekit.game import Event, WaveGame, WaveState
from defusekit.inputs import ADC_MAX, POT_FREQ_CH, PotInputs
from defusekit.led import RgbLed
from defusekit.link import EventType, Link, Module
from defusekit.waves import (
    PLOT_CENTER_Y,
    PLOT_HEIGHT,
    WAVE_WIDTH,
    compute_wave,
    draw_player,
    draw_target,
)

SYS_RESET_PIN = 7
FRAME_MS = 33
PRIME_SAMPLES = 20
BLINK_PERIOD_MS = 500
PRESS_FRAMES = 3

SIGNAL_COLORS = {
    0: (0, 0, 255),
    1: (255, 255, 0),
    2: (255, 0, 0),
    3: (128, 0, 255),
}

_SOLVED_CLEAR_W = 240
_SOLVED_CLEAR_H = 160
_NEW_ROUND_FROM = (WaveState.RESET, WaveState.WIN, WaveState.FLASH_WHITE)
_DRAW_PLAYER_IN = (WaveState.WAIT, WaveState.PLAYING)


class SlaveBoard:
    """Both game modules plus the screen, status LED and master link.

    ``read_adc`` returns a raw conversion for an ADC channel, ``write``
    receives link bytes and ``clock`` is the microsecond clock the blast
    gauge reads when a round starts.
    """

    def __init__(self, read_adc: Callable[[int], int],
                 write: Callable[[bytes], object],
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], int]] = None) -> None:
        rng = rng if rng is not None else random.Random()
        self.display = Display()
        self.inputs = PotInputs(read_adc)
        self.led = RgbLed()
        self.waves = WaveGame(self.led, rng)
        self._prime_waves_idle()
        self.bg = BlastGauge(rng, clock)
        self.link = Link(write)
        self.button = ButtonDebouncer()
        self.target_y: list[int] = []
        self.player_y = [0] * WAVE_WIDTH
        self.prev_player_y = [PLOT_CENTER_Y] * WAVE_WIDTH
        self._blink_toggle_ms = 0
        self._blink_on = True
        self._paint_target(clear=False)

    def _prime_waves_idle(self) -> None:
        # Settle the smoothed pot baseline before the first real sample.
        for _ in range(PRIME_SAMPLES):
            self.inputs.update()
        self.waves.reset_idle()

    def _paint_target(self, clear: bool) -> None:
        if clear:
            self.display.fill_rect(0, 0, TFT_WIDTH, PLOT_HEIGHT, Color.BLACK)
        target = self.waves.target
        self.target_y = compute_wave(target.frequency, target.amplitude,
                                     PLOT_CENTER_Y, WAVE_WIDTH)
        draw_target(self.display, self.target_y)
        self.prev_player_y = [PLOT_CENTER_Y] * WAVE_WIDTH

    def reset(self) -> None:
        """Global reset from the master: restart both modules and the plot."""
        self.waves.reset()
        self._prime_waves_idle()
        self.bg.reset()
        self._paint_target(clear=True)

    def _report(self, event: Event, module: Module,
                reported: list[tuple[EventType, Module]]) -> None:
        if event is Event.STRIKE:
            self.link.send_strike(module.name)
            reported.append((EventType.STRIKE, module))
        elif event is Event.COMPLETE:
            self.link.send_solved(module.name)
            reported.append((EventType.SOLVED, module))

    def tick(self, now_us: int, button_down: bool) -> list[tuple[EventType, Module]]:
        """Run one frame; returns the events sent to the master."""
        reported: list[tuple[EventType, Module]] = []
        now_ms = now_us // 1000

        edge = self.button.poll(button_down, now_us)
        if self.bg.state in (BgState.DEFUSED, BgState.EXPLODED):
            edge = False
        self._report(self.bg.update(edge, now_us), Module.KRISH, reported)

        if not self.waves.module_complete:
            self._tick_waves(now_us, now_ms, reported)

        self._draw_status()
        return reported

    def _tick_waves(self, now_us: int, now_ms: int,
                    reported: list[tuple[EventType, Module]]) -> None:
        self.inputs.update()
        freq, amp = self.inputs.freq, self.inputs.amp

        old_state = self.waves.state
        event = self.waves.update(freq, amp, now_us)
        self._report(event, Module.MYLES, reported)
        if event is Event.COMPLETE:
            self.display.fill_rect(0, 0, _SOLVED_CLEAR_W, _SOLVED_CLEAR_H, Color.BLACK)
            self.display.draw_string(50, 70, "MODULE SOLVED!", Color.GREEN, Color.BLACK)

        state = self.waves.state
        if state is WaveState.IDLE:
            if now_ms - self._blink_toggle_ms >= BLINK_PERIOD_MS:
                self._blink_on = not self._blink_on
                self._blink_toggle_ms = now_ms
            # Only signal while the blast gauge is idle too, so the two
            # modules do not compete for the player's attention.
            if self.bg.state is BgState.IDLE:
                if self._blink_on:
                    self.led.set_color(*SIGNAL_COLORS[self.waves.signal_color])
                else:
                    self.led.set_color(0, 0, 0)

        if state is WaveState.IDLE and old_state in _NEW_ROUND_FROM:
            self._paint_target(clear=True)

        if state in _DRAW_PLAYER_IN:
            self.prev_player_y = self.player_y
            self.player_y = compute_wave(freq, amp, PLOT_CENTER_Y, WAVE_WIDTH)
            draw_player(self.display, self.prev_player_y, self.player_y, self.target_y)

    def status_lines(self) -> tuple[str, str]:
        """The two status lines shown under the wave plot."""
        bg = self.bg
        target = self.waves.target
        top = f"Blast: {state_name(bg.state):<6} R{bg.current_round()} Str:{bg.strikes}   "
        bottom = (f"F:{self.inputs.freq:4.1f}/{target.frequency:4.1f} "
                  f"A:{self.inputs.amp:2.0f}/{target.amplitude:2.0f}   ")
        return top, bottom

    def _draw_status(self) -> None:
        top, bottom = self.status_lines()
        self.display.draw_string(10, 190, top, Color.WHITE, Color.BLACK)
        self.display.draw_string(10, 210, bottom, Color.LGRAY, Color.BLACK)


def _adc_value(text: str) -> int:
    value = int(text)
    if not 0 <= value <= int(ADC_MAX):
        raise argparse.ArgumentTypeError(f"ADC value must be 0..{int(ADC_MAX)}")
    return value


def main(argv: Optional[list[str]] = None) -> int:
    """Run the board for a number of simulated frames and print the link traffic."""
    parser = argparse.ArgumentParser(description="Simulate the two-module slave board.")
    parser.add_argument("--frames", type=int, default=300, help="frames to run")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--freq-raw", type=_adc_value, default=0,
                        help="raw ADC reading of the frequency pot")
    parser.add_argument("--amp-raw", type=_adc_value, default=0,
                        help="raw ADC reading of the amplitude pot")
    parser.add_argument("--press", type=int, action="append", default=[],
                        metavar="FRAME", help="press the button starting at FRAME")
    args = parser.parse_args(argv)

    now_us = 0

    def clock() -> int:
        return now_us

    def read_adc(channel: int) -> int:
        return args.freq_raw if channel == POT_FREQ_CH else args.amp_raw

    def write(data: bytes) -> None:
        for byte in data:
            print(f"link 0x{byte:02X}")

    held = {start + i for start in args.press for i in range(PRESS_FRAMES)}
    board = SlaveBoard(read_adc, write, random.Random(args.seed), clock)
    for frame in range(args.frames):
        now_us = frame * FRAME_MS * 1000
        board.tick(now_us, frame in held)

    for line in board.status_lines():
        print(line.rstrip())
    return 0


if __name__ == "__main__":
    sys.exit(main())