"""Simulated bomb-defusal puzzle modules (wave match, blast gauge, Morse) and the board that runs them."""

__version__ = "0.1.0"