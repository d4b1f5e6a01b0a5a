"""Potentiometer inputs: ADC sampling, range mapping and smoothing."""

from __future__ import annotations

from typing import Callable

POT_FREQ_PIN = 41
POT_AMP_PIN = 42
POT_FREQ_CH = 1
POT_AMP_CH = 2

FREQ_MIN = 1.0
FREQ_MAX = 10.0
AMP_MIN = 10.0
AMP_MAX = 60.0
ADC_MAX = 4095.0

SMOOTH_ALPHA = 0.2

# Throwaway conversions that let the sample-and-hold settle after switching.
_SETTLE_READS = 3


def map_freq(raw: int) -> float:
    """Map a 12-bit ADC reading onto the frequency range."""
    return FREQ_MIN + (raw / ADC_MAX) * (FREQ_MAX - FREQ_MIN)


def map_amp(raw: int) -> float:
    """Map a 12-bit ADC reading onto the amplitude range."""
    return AMP_MIN + (raw / ADC_MAX) * (AMP_MAX - AMP_MIN)


def apply_smoothing(previous: float, new_sample: float, alpha: float) -> float:
    """Exponential moving average step."""
    return (1.0 - alpha) * previous + alpha * new_sample


class PotInputs:
    """Smoothed frequency and amplitude readings from two pots.

    ``read_adc`` takes an ADC channel number and returns one raw conversion.
    """

    def __init__(self, read_adc: Callable[[int], int]) -> None:
        self._read_adc = read_adc
        self.freq = FREQ_MIN
        self.amp = AMP_MIN
        self.raw_freq = 0
        self.raw_amp = 0

    def _sample(self, channel: int) -> int:
        for _ in range(_SETTLE_READS):
            self._read_adc(channel)
        return self._read_adc(channel)

    def update(self) -> None:
        """Sample both pots and fold the readings into the smoothed values."""
        self.raw_freq = self._sample(POT_FREQ_CH)
        self.raw_amp = self._sample(POT_AMP_CH)
        self.freq = apply_smoothing(self.freq, map_freq(self.raw_freq), SMOOTH_ALPHA)
        self.amp = apply_smoothing(self.amp, map_amp(self.raw_amp), SMOOTH_ALPHA)