"""Morse-code defusal module: key in the word that the LED pattern selects.

Input arrives as single characters from the gesture sensor link ('.' dot,
'-' dash, ' ' letter gap, newline submit) or as timed presses of a fallback
key. Status messages go back over the same link as newline-terminated text.
"""

from __future__ import annotations

import random
from enum import Enum, auto
from typing import Callable, Optional, Protocol

MORSE_CODE = {
    "A": ".-", "B": "-...", "C": "-.-.", "D": "-..", "E": ".", "F": "..-.",
    "G": "--.", "H": "....", "I": "..", "J": ".---", "K": "-.-", "L": ".-..",
    "M": "--", "N": "-.", "O": "---", "P": ".--.", "Q": "--.-", "R": ".-.",
    "S": "...", "T": "-", "U": "..-", "V": "...-", "W": ".--", "X": "-..-",
    "Y": "-.--", "Z": "--..",
}
_LETTERS = {pattern: letter for letter, pattern in MORSE_CODE.items()}

WORD_BANK = ("SOS", "FIRE", "BOMB", "HELP", "WIRE", "CODE", "FUSE", "HALT")

DOT_MAX_MS = 200
LETTER_TIMEOUT_US = 1_500_000
SUBMIT_TIMEOUT_US = 3_000_000
GAME_TIMEOUT_US = 600_000_000

TONE_DOT_HZ = 880
TONE_DASH_HZ = 440
TONE_CORRECT_HZ = 1047
TONE_STRIKE_HZ = 220
TONE_UNKNOWN_HZ = 300

DOT_MS = 80
DASH_MS = 150
VICTORY_SHORT_MS = 100
VICTORY_LONG_MS = 300
STRIKE_MS = 500
EXPLODE_MS = 1200
UNKNOWN_MS = 50

MAX_SYMBOLS = 7
MAX_WORD = 15
MAX_STRIKES = 3
ALL_LEDS = 0b111

_KEYS = {"f": ".", "p": "-", "v": " ", "s": "\n"}


def decode(pattern: str) -> str:
    """Return the letter for a dot/dash pattern."""
    try:
        return _LETTERS[pattern]
    except KeyError:
        raise ValueError(f"unknown morse pattern {pattern!r}") from None


def translate_key(c: str) -> Optional[str]:
    """Map a sensor test key to the morse symbol it stands for, or None."""
    return _KEYS.get(c)


class MorseState(Enum):
    IDLE = auto()
    AWAITING_INPUT = auto()
    CHECKING = auto()
    DEFUSED = auto()
    STRIKE = auto()
    EXPLODED = auto()


class _Rng(Protocol):
    def randrange(self, stop: int) -> int: ...


class MorseGame:
    """State machine of the morse module.

    ``send`` receives each status message. ``leds`` is the 3-bit pattern on
    the clue LEDs and ``tones`` records every buzzer tone as
    ``(frequency_hz, duration_ms)``.
    """

    def __init__(self, rng: Optional[_Rng] = None,
                 send: Optional[Callable[[str], object]] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._send = send if send is not None else (lambda message: None)
        self.state = MorseState.IDLE
        self.led_pattern = 0
        self.leds = 0
        self.strikes = 0
        self.correct_word = ""
        self.symbols = ""
        self.word = ""
        self.last_input_us = 0
        self.game_start_us = 0
        self.debug_led = False
        self.blinks = 0
        self.tones: list[tuple[int, int]] = []
        self._now = 0

    def _tone(self, freq_hz: int, duration_ms: int) -> None:
        self.tones.append((freq_hz, duration_ms))

    def _reset_input(self, now_us: int) -> None:
        self.symbols = ""
        self.word = ""
        self.last_input_us = now_us

    def start(self, now_us: int) -> None:
        """Pick a new word, show its LED pattern and wait for input."""
        self._now = now_us
        self.strikes = 0
        self._reset_input(now_us)
        self.led_pattern = self._rng.randrange(len(WORD_BANK))
        self.correct_word = WORD_BANK[self.led_pattern]
        self.leds = self.led_pattern
        self.game_start_us = now_us
        self.state = MorseState.AWAITING_INPUT
        self._send("READY\n")

    def _add_symbol(self, symbol: str, blinks: int, tone: tuple[int, int]) -> None:
        if len(self.symbols) < MAX_SYMBOLS:
            self.symbols += symbol
        self.blinks += blinks
        self._tone(*tone)

    def _dot(self) -> None:
        self._add_symbol(".", 1, (TONE_DOT_HZ, DOT_MS))

    def _dash(self) -> None:
        self._add_symbol("-", 2, (TONE_DASH_HZ, DASH_MS))

    def _letter_gap(self) -> None:
        if not self.symbols:
            return
        try:
            letter: Optional[str] = decode(self.symbols)
        except ValueError:
            letter = None
        if letter is not None and len(self.word) < MAX_WORD:
            self.word += letter
        else:
            self._tone(TONE_UNKNOWN_HZ, UNKNOWN_MS)
        self.symbols = ""

    def _submit(self) -> None:
        self._letter_gap()
        if not self.word:
            return
        self.state = MorseState.CHECKING

    def receive(self, c: str, now_us: int) -> None:
        """Handle one character from the sensor link."""
        self._now = now_us
        self.debug_led = not self.debug_led
        if self.state is not MorseState.AWAITING_INPUT:
            return
        handler = {".": self._dot, "-": self._dash,
                   " ": self._letter_gap, "\n": self._submit}.get(c)
        if handler is not None:
            handler()
        self.last_input_us = now_us

    def button_release(self, held_ms: int, now_us: int) -> None:
        """Handle a release of the fallback key held for ``held_ms``."""
        self._now = now_us
        if self.state is not MorseState.AWAITING_INPUT:
            return
        if held_ms <= DOT_MAX_MS:
            self._dot()
        else:
            self._dash()
        self.last_input_us = now_us

    def _explode(self) -> None:
        self.state = MorseState.EXPLODED
        self._tone(TONE_STRIKE_HZ, EXPLODE_MS)
        self._send("EXPLODED\n")

    def tick(self, now_us: int) -> None:
        """Apply timeouts and resolve a pending submission."""
        self._now = now_us
        if self.state is MorseState.AWAITING_INPUT:
            idle = now_us - self.last_input_us
            if self.symbols and idle > LETTER_TIMEOUT_US:
                self._letter_gap()
            if self.word and not self.symbols and idle > SUBMIT_TIMEOUT_US:
                self._submit()
            if now_us - self.game_start_us > GAME_TIMEOUT_US:
                self._explode()
        elif self.state is MorseState.CHECKING:
            self.check()

    def check(self) -> bool:
        """Judge the submitted word; returns True when the module is defused."""
        if self.state is not MorseState.CHECKING:
            raise RuntimeError("no submitted word to check")
        if self.word == self.correct_word:
            self.state = MorseState.DEFUSED
            self._tone(TONE_CORRECT_HZ, VICTORY_SHORT_MS)
            self._tone(TONE_CORRECT_HZ, VICTORY_SHORT_MS)
            self._tone(int(TONE_CORRECT_HZ * 1.5), VICTORY_LONG_MS)
            self.leds = 0
            self._send("DEFUSED\n")
            return True
        self.strikes += 1
        self._tone(TONE_STRIKE_HZ, STRIKE_MS)
        self._send("STRIKE\n")
        if self.strikes >= MAX_STRIKES:
            self.leds = ALL_LEDS
            self._explode()
        else:
            self._reset_input(self._now)
            self.state = MorseState.AWAITING_INPUT
        return False