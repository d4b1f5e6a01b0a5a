"""One-byte event link to the master board.

Each byte carries the event type in its upper three bits and the module id
in its lower five bits. There is no framing and no checksum.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable

LINK_UART_TX_PIN = 24
LINK_BAUD_RATE = 115200

_MODULE_MASK = 0x1F


class EventType(IntEnum):
    STRIKE = 0x00 << 5
    SOLVED = 0x01 << 5


class Module(IntEnum):
    KRISH = 0x00
    MYLES = 0x01
    MORSE = 0x02


def opcode(event: EventType, module: Module) -> int:
    """Combine an event type and a module id into one opcode byte."""
    return int(EventType(event)) | int(Module(module))


def module_id(name: str) -> Module:
    """Look up a module by its upper-case name."""
    try:
        return Module[name]
    except (KeyError, TypeError):
        raise ValueError(f"unknown module {name!r}") from None


class Link:
    """Transmit-only link; ``write`` receives each encoded byte string."""

    def __init__(self, write: Callable[[bytes], object]) -> None:
        self._write = write

    def send_op(self, op: int) -> None:
        if not 0 <= op <= 0xFF:
            raise ValueError(f"opcode out of range: {op}")
        self._write(bytes([op]))

    def send_strike(self, who: str) -> None:
        self.send_op(opcode(EventType.STRIKE, module_id(who)))

    def send_solved(self, module: str) -> None:
        self.send_op(opcode(EventType.SOLVED, module_id(module)))