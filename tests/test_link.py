import pytest

from defusekit.link import EventType, Link, Module, module_id, opcode


@pytest.mark.parametrize(
    "event, module, expected",
    [
        (EventType.STRIKE, Module.KRISH, 0x00),
        (EventType.STRIKE, Module.MYLES, 0x01),
        (EventType.STRIKE, Module.MORSE, 0x02),
        (EventType.SOLVED, Module.KRISH, 0x20),
        (EventType.SOLVED, Module.MYLES, 0x21),
        (EventType.SOLVED, Module.MORSE, 0x22),
    ],
)
def test_opcode_table(event, module, expected):
    assert opcode(event, module) == expected


def test_opcode_fields_round_trip():
    for event in EventType:
        for module in Module:
            op = opcode(event, module)
            assert EventType(op & ~0x1F) is event
            assert Module(op & 0x1F) is module


def test_module_id_lookup():
    assert module_id("KRISH") is Module.KRISH
    assert module_id("MORSE") is Module.MORSE
    with pytest.raises(ValueError):
        module_id("myles")


def test_send_strike_and_solved_bytes():
    sent = []
    link = Link(sent.append)
    link.send_strike("MYLES")
    link.send_solved("KRISH")
    assert sent == [b"\x01", b"\x20"]


def test_unknown_module_sends_nothing():
    sent = []
    link = Link(sent.append)
    with pytest.raises(ValueError):
        link.send_strike("NOBODY")
    with pytest.raises(ValueError):
        link.send_solved("")
    assert sent == []


def test_send_op_range():
    sent = []
    link = Link(sent.append)
    link.send_op(0xFF)
    assert sent == [b"\xff"]
    with pytest.raises(ValueError):
        link.send_op(256)
    with pytest.raises(ValueError):
        link.send_op(-1)