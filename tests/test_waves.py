from defusekit.display import Color, Display
from defusekit.waves import (
    PLOT_CENTER_Y,
    PLOT_HEIGHT,
    WAVE_WIDTH,
    clamp_y,
    compute_wave,
    draw_player,
    draw_target,
)


def test_clamp_y():
    assert clamp_y(-5) == 0
    assert clamp_y(PLOT_HEIGHT + 50) == PLOT_HEIGHT - 1
    assert clamp_y(42) == 42


def test_compute_wave_length_and_start():
    wave = compute_wave(3.0, 40.0, PLOT_CENTER_Y, WAVE_WIDTH)
    assert len(wave) == WAVE_WIDTH
    assert wave[0] == PLOT_CENTER_Y


def test_zero_amplitude_is_flat():
    assert compute_wave(5.0, 0.0, PLOT_CENTER_Y, 50) == [PLOT_CENTER_Y] * 50


def test_wave_stays_within_amplitude():
    wave = compute_wave(2.5, 30.0)
    assert all(PLOT_CENTER_Y - 30 <= y <= PLOT_CENTER_Y + 30 for y in wave)
    assert max(wave) == PLOT_CENTER_Y + 30
    assert min(wave) == PLOT_CENTER_Y - 30


def test_large_amplitude_is_clamped():
    wave = compute_wave(1.0, 500.0)
    assert min(wave) == 0
    assert max(wave) == PLOT_HEIGHT - 1


def test_whole_periods_are_periodic():
    wave = compute_wave(4.0, 25.0, PLOT_CENTER_Y, 320)
    assert wave[:80] == wave[80:160]


def test_draw_target_paints_grey():
    d = Display()
    target = compute_wave(2.0, 20.0)
    draw_target(d, target)
    assert all(d.pixel(x, y) == Color.LGRAY for x, y in enumerate(target))


def test_draw_player_restores_target_and_erases_rest():
    d = Display(4, PLOT_HEIGHT)
    target = [10, 20, 30, 40]
    old = [10, 25, 30, 45]
    new = [50, 60, 70, 80]
    draw_target(d, target)
    for x, y in enumerate(old):
        d.draw_pixel(x, y, Color.GREEN)
    draw_player(d, old, new, target)
    assert [d.pixel(x, y) for x, y in enumerate(new)] == [Color.GREEN] * 4
    assert d.pixel(0, 10) == Color.LGRAY
    assert d.pixel(2, 30) == Color.LGRAY
    assert d.pixel(1, 25) == Color.BLACK
    assert d.pixel(3, 45) == Color.BLACK