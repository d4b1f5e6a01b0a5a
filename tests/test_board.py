import random

import pytest

from defusekit.blast_gauge import BgState
from defusekit.board import SIGNAL_COLORS, SlaveBoard, main
from defusekit.display import Color
from defusekit.game import WaveState
from defusekit.inputs import POT_AMP_CH, POT_FREQ_CH, map_freq
from defusekit.link import EventType, Module
from defusekit.waves import WAVE_WIDTH, compute_wave


def make_board(seed=3):
    raw = {POT_FREQ_CH: 0, POT_AMP_CH: 0}
    sent = []
    board = SlaveBoard(raw.__getitem__, sent.append, random.Random(seed), lambda: 0)
    return board, raw, sent


def test_target_wave_painted_at_start():
    board, _, _ = make_board()
    target = board.waves.target
    assert board.target_y == compute_wave(target.frequency, target.amplitude)
    for x in range(WAVE_WIDTH):
        assert board.display.pixel(x, board.target_y[x]) == Color.LGRAY


def test_priming_settles_inputs():
    raw = {POT_FREQ_CH: 2000, POT_AMP_CH: 0}
    board = SlaveBoard(raw.__getitem__, lambda b: None, random.Random(1), lambda: 0)
    assert abs(board.inputs.freq - map_freq(2000)) < 0.2
    assert board.waves.state is WaveState.IDLE


@pytest.mark.parametrize(
    "signal_color, expected",
    [
        (0, (0, 0, 255)),
        (1, (255, 255, 0)),
        (2, (255, 0, 0)),
        (3, (128, 0, 255)),
    ],
)
def test_signal_colour_shown_on_led(signal_color, expected):
    board, _, _ = make_board()
    board.waves.signal_color = signal_color
    board.tick(0, False)
    assert board.led.color == expected


def test_idle_blink_shows_signal_colour():
    board, _, _ = make_board()
    board.tick(0, False)
    assert board.led.color == SIGNAL_COLORS[board.waves.signal_color]


def test_button_press_arms_blast_gauge():
    board, _, sent = make_board()
    board.tick(0, True)
    assert board.bg.state is BgState.IDLE
    board.tick(50_000, True)
    assert board.bg.state is BgState.ROUND1
    assert board.status_lines()[0] == "Blast: ROUND1 R1 Str:0   "
    assert sent == []


def test_button_inert_after_gauge_defused():
    board, _, _ = make_board()
    board.bg.state = BgState.DEFUSED
    board.tick(0, True)
    board.tick(50_000, True)
    assert board.bg.state is BgState.DEFUSED


def test_wave_strike_sent_to_master():
    board, raw, sent = make_board()
    board.tick(0, False)
    raw[POT_FREQ_CH] = 4095
    board.tick(33_000, False)
    assert board.waves.state is WaveState.PLAYING
    events = board.tick(33_000 + 15_000_000, False)
    assert events == [(EventType.STRIKE, Module.MYLES)]
    assert sent == [b"\x01"]


def test_player_wave_drawn_while_playing():
    board, raw, _ = make_board()
    board.tick(0, False)
    raw[POT_FREQ_CH] = 4095
    board.tick(33_000, False)
    assert board.player_y == compute_wave(board.inputs.freq, board.inputs.amp)
    for x in range(WAVE_WIDTH):
        assert board.display.pixel(x, board.player_y[x]) == Color.GREEN


def test_status_lines_drawn_and_formatted():
    board, _, _ = make_board()
    board.tick(0, False)
    top, bottom = board.status_lines()
    assert top == "Blast: IDLE   R0 Str:0   "
    assert bottom.startswith("F: 1.0/")
    assert board.display.pixel(10, 190) == Color.WHITE


def test_reset_returns_modules_to_idle():
    board, raw, _ = make_board()
    board.tick(0, True)
    board.tick(50_000, True)
    raw[POT_FREQ_CH] = 4095
    board.tick(83_000, False)
    board.reset()
    assert board.bg.state is BgState.IDLE
    assert board.waves.state is WaveState.IDLE
    target = board.waves.target
    assert board.target_y == compute_wave(target.frequency, target.amplitude)
    assert board.prev_player_y == [90] * WAVE_WIDTH


def test_main_reports_status(capsys):
    assert main(["--frames", "5", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "Blast: IDLE" in out


def test_main_press_arms_gauge(capsys):
    assert main(["--frames", "5", "--seed", "1", "--press", "0"]) == 0
    out = capsys.readouterr().out
    assert "Blast: ROUND1" in out